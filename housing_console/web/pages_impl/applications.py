from __future__ import annotations

from typing import Any, Dict, Optional

import streamlit as st

from housing_console.domain.models import ApplicationRecord, ApplicationStatus, EntityKind
from housing_console.web.components.query_view import apply_mutation, load_records
from housing_console.web.components.sidebar import render_sidebar
from housing_console.web.framework.auth import require_session
from housing_console.web.services.filters import ALL_STATUSES, count_by_status, filter_applications
from housing_console.web.services.tables import records_frame

_COLUMNS = {
    "application_id": "ID",
    "student_name": "Student",
    "national_id": "National ID",
    "status": "Status",
    "submitted_at": "Submitted",
}

_INFO_SECTIONS = (
    ("student_info", "Student"),
    ("father_info", "Father"),
    ("guardian_info", "Guardian"),
    ("secondary_info", "Secondary school"),
    ("academic_info", "Academic"),
)


def decision_payload(record: ApplicationRecord, status: str) -> Dict[str, Any]:
    return {"applicationId": record.application_id, "status": status}


def _render_block(title: str, block: Optional[Dict[str, Any]]) -> None:
    if not block:
        return
    st.markdown(f"**{title}**")
    st.json(block, expanded=False)


def render() -> None:
    services = require_session()
    render_sidebar(services)
    qc = services.query_client

    st.title("📝 Applications")
    st.caption("Review and decide on housing applications.")

    records = load_records(services, EntityKind.APPLICATIONS)
    if records is None:
        return

    counts = count_by_status(records)
    cols = st.columns(4)
    cols[0].metric("Total", counts["total"])
    cols[1].metric("Pending", counts[ApplicationStatus.PENDING])
    cols[2].metric("Approved", counts[ApplicationStatus.APPROVED])
    cols[3].metric("Rejected", counts[ApplicationStatus.REJECTED])

    c1, c2 = st.columns([3, 1])
    query = c1.text_input("Search", placeholder="Student name or national id")
    status = c2.selectbox("Status", (ALL_STATUSES,) + ApplicationStatus.ALL)
    visible = filter_applications(records, query, status)

    if not visible:
        st.info("No applications match the current filters.")
        return
    st.dataframe(records_frame(visible, _COLUMNS), use_container_width=True, hide_index=True)

    st.markdown("### Details")
    for rec in visible:
        with st.expander(f"#{rec.application_id} · {rec.student_name or 'Unknown student'} · {rec.status}"):
            for attr, title in _INFO_SECTIONS:
                _render_block(title, getattr(rec, attr))
            if rec.status != ApplicationStatus.PENDING:
                continue
            a, r = st.columns(2)
            if a.button("✅ Approve", key=f"approve_{rec.application_id}", use_container_width=True):
                apply_mutation(
                    qc.update(EntityKind.APPLICATIONS, rec.application_id, decision_payload(rec, ApplicationStatus.APPROVED)),
                    "Application approved",
                )
            if r.button("❌ Reject", key=f"reject_{rec.application_id}", use_container_width=True):
                apply_mutation(
                    qc.update(EntityKind.APPLICATIONS, rec.application_id, decision_payload(rec, ApplicationStatus.REJECTED)),
                    "Application rejected",
                )
