from __future__ import annotations

from typing import Any, Dict

import streamlit as st

from housing_console.domain.models import EntityKind
from housing_console.web.components.query_view import apply_mutation, load_records
from housing_console.web.components.sidebar import render_sidebar
from housing_console.web.framework.auth import require_session
from housing_console.web.services.filters import newest_first

DEFAULT_RECIPIENTS = "All Students"
NOTIFICATION_TYPES = ("announcement", "payment", "maintenance", "inspection")


def notification_payload(title: str, message: str, type_: str, recipients: str = DEFAULT_RECIPIENTS) -> Dict[str, Any]:
    return {
        "title": title.strip(),
        "message": message.strip(),
        "type": type_,
        "recipients": recipients.strip() or DEFAULT_RECIPIENTS,
    }


def render() -> None:
    services = require_session()
    render_sidebar(services)
    qc = services.query_client
    st.title("🔔 Notifications")

    with st.expander("✉️ Send notification", expanded=False):
        with st.form("send_notification", clear_on_submit=False):
            title = st.text_input("Title")
            message = st.text_area("Message")
            c1, c2 = st.columns(2)
            type_ = c1.selectbox("Type", NOTIFICATION_TYPES)
            recipients = c2.text_input("Recipients", value=DEFAULT_RECIPIENTS)
            submitted = st.form_submit_button("Send", type="primary")
        if submitted:
            if not title.strip() or not message.strip():
                st.error("Title and message are required")
            else:
                apply_mutation(
                    qc.create(EntityKind.NOTIFICATIONS, notification_payload(title, message, type_, recipients)),
                    "Notification sent",
                )

    records = load_records(services, EntityKind.NOTIFICATIONS)
    if records is None:
        return
    if not records:
        st.info("No notifications sent yet.")
        return
    for rec in newest_first(records, "sent_at"):
        with st.container(border=True):
            st.markdown(f"**{rec.title or 'Untitled'}**  ·  `{rec.type or 'general'}`")
            st.write(rec.message)
            st.caption(f"{rec.recipients or DEFAULT_RECIPIENTS} · {rec.sent_at or 'unknown date'}")
