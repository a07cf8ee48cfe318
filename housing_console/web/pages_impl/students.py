from __future__ import annotations

import streamlit as st

from housing_console.domain.models import EntityKind
from housing_console.web.components.query_view import load_records
from housing_console.web.components.sidebar import render_sidebar
from housing_console.web.framework.auth import require_session
from housing_console.web.services.filters import search_records
from housing_console.web.services.tables import records_frame

_COLUMNS = {
    "student_id": "ID",
    "full_name": "Name",
    "national_id": "National ID",
    "faculty": "Faculty",
    "level": "Level",
    "room_number": "Room",
    "email": "Email",
    "phone": "Phone",
}


def render() -> None:
    services = require_session()
    render_sidebar(services)
    st.title("🎓 Students")

    records = load_records(services, EntityKind.STUDENTS)
    if records is None:
        return

    query = st.text_input("Search", placeholder="Name, national id, email or faculty")
    visible = search_records(records, query, ("full_name", "national_id", "email", "faculty"))
    st.caption(f"{len(visible)} of {len(records)} students")
    if visible:
        st.dataframe(records_frame(visible, _COLUMNS), use_container_width=True, hide_index=True)
