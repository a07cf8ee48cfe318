from __future__ import annotations

from typing import Any, Dict

import streamlit as st

from housing_console.domain.models import ComplaintRecord, ComplaintStatus, EntityKind
from housing_console.web.components.query_view import apply_mutation, load_records
from housing_console.web.components.sidebar import render_sidebar
from housing_console.web.framework.auth import require_session
from housing_console.web.services.filters import newest_first, split_complaints

_PRIORITY_ICONS = {"high": "🔴", "medium": "🟠", "low": "⚪"}


def resolution_payload(record: ComplaintRecord, resolution: str) -> Dict[str, Any]:
    return {"complaintId": record.complaint_id, "status": ComplaintStatus.RESOLVED, "resolution": resolution.strip()}


def _header(rec: ComplaintRecord) -> str:
    icon = _PRIORITY_ICONS.get(rec.priority, "")
    return f"{icon} {rec.title or 'Untitled'} · {rec.student_name or 'Unknown'} · {rec.room or '-'}".strip()


def render() -> None:
    services = require_session()
    render_sidebar(services)
    qc = services.query_client
    st.title("⚠️ Complaints")

    records = load_records(services, EntityKind.COMPLAINTS)
    if records is None:
        return

    unresolved, resolved = split_complaints(newest_first(records, "created_at"))
    cols = st.columns(2)
    cols[0].metric("Open", len(unresolved))
    cols[1].metric("Resolved", len(resolved))

    open_tab, done_tab = st.tabs([f"Open ({len(unresolved)})", f"Resolved ({len(resolved)})"])
    with open_tab:
        if not unresolved:
            st.success("No open complaints.")
        for rec in unresolved:
            with st.expander(_header(rec)):
                st.write(rec.message)
                st.caption(f"Submitted {rec.created_at or 'unknown'} · priority {rec.priority or 'n/a'}")
                with st.form(f"resolve_{rec.complaint_id}"):
                    text = st.text_area("Resolution")
                    if st.form_submit_button("Mark as resolved", type="primary"):
                        if not text.strip():
                            st.error("Describe how the complaint was resolved")
                        else:
                            apply_mutation(
                                qc.update(EntityKind.COMPLAINTS, rec.complaint_id, resolution_payload(rec, text)),
                                "Complaint resolved",
                            )
    with done_tab:
        if not resolved:
            st.info("Nothing resolved yet.")
        for rec in resolved:
            with st.expander(_header(rec)):
                st.write(rec.message)
                st.markdown(f"**Resolution:** {rec.resolution or '-'}")
