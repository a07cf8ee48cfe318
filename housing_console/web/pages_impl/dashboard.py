from __future__ import annotations

import asyncio

import streamlit as st

from housing_console.domain.models import ApplicationStatus, EntityKind
from housing_console.web.components.sidebar import render_sidebar
from housing_console.web.framework.auth import require_session
from housing_console.web.framework.runtime import run
from housing_console.web.services.filters import count_by_status, newest_first, split_complaints
from housing_console.web.services.tables import records_frame

_KINDS = (EntityKind.APPLICATIONS, EntityKind.BUILDINGS, EntityKind.STUDENTS, EntityKind.COMPLAINTS)


async def _load_all(query_client):
    # concurrent reads; each kind still goes through the shared cache
    return await asyncio.gather(*(query_client.list(k) for k in _KINDS))


def render() -> None:
    services = require_session()
    render_sidebar(services)
    user = services.session_store.user

    st.title("📊 Dashboard")
    st.caption(f"Welcome back, {user.username}")

    qc = services.query_client
    with st.spinner("Loading metrics..."):
        results = run(_load_all(qc))
    by_kind = dict(zip(_KINDS, results))

    for kind, result in by_kind.items():
        if result.is_error:
            st.warning(f"{kind.value.capitalize()}: {result.error}")

    applications = by_kind[EntityKind.APPLICATIONS].data
    counts = count_by_status(applications)
    unresolved, _ = split_complaints(by_kind[EntityKind.COMPLAINTS].data)

    st.markdown("### Key figures")
    cols = st.columns(4)
    cols[0].metric("📝 Applications", counts["total"], help=f"{counts[ApplicationStatus.PENDING]} pending review")
    cols[1].metric("🎓 Students", len(by_kind[EntityKind.STUDENTS].data))
    cols[2].metric("🏢 Buildings", len(by_kind[EntityKind.BUILDINGS].data))
    cols[3].metric("⚠️ Open complaints", len(unresolved))

    st.markdown("### Latest applications")
    recent = newest_first(applications, "submitted_at")[:5]
    if not recent:
        st.info("No applications yet.")
        return
    st.dataframe(
        records_frame(recent, {"student_name": "Student", "status": "Status", "submitted_at": "Submitted"}),
        use_container_width=True,
        hide_index=True,
    )
