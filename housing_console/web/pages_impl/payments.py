from __future__ import annotations

import streamlit as st

from housing_console.domain.models import EntityKind
from housing_console.web.components.query_view import load_records
from housing_console.web.components.sidebar import render_sidebar
from housing_console.web.framework.auth import require_session
from housing_console.web.services.filters import ALL_STATUSES, search_records
from housing_console.web.services.tables import records_frame

_COLUMNS = {
    "payment_id": "ID",
    "student_name": "Student",
    "amount": "Amount",
    "status": "Status",
    "method": "Method",
    "paid_at": "Paid at",
}


def render() -> None:
    services = require_session()
    render_sidebar(services)
    st.title("💳 Payments")

    records = load_records(services, EntityKind.PAYMENTS)
    if records is None:
        return

    statuses = sorted({r.status for r in records if r.status})
    c1, c2 = st.columns([3, 1])
    query = c1.text_input("Search", placeholder="Student or method")
    status = c2.selectbox("Status", [ALL_STATUSES] + statuses)

    visible = search_records(records, query, ("student_name", "method"))
    if status != ALL_STATUSES:
        visible = [r for r in visible if r.status == status]

    df = records_frame(visible, _COLUMNS)
    fee = services.config.office.housing_fee
    cols = st.columns(3)
    cols[0].metric("Payments", len(df))
    cols[1].metric("Collected", f"{df['Amount'].sum():,.2f}" if not df.empty else "0.00")
    cols[2].metric("Housing fee", f"{fee:,.2f}")

    if df.empty:
        st.info("No payments found.")
        return
    st.dataframe(df, use_container_width=True, hide_index=True)
