from __future__ import annotations

import streamlit as st

from housing_console.domain.models import EntityKind
from housing_console.web.components.query_view import load_records
from housing_console.web.components.sidebar import render_sidebar
from housing_console.web.framework.auth import require_session
from housing_console.web.services.filters import search_records
from housing_console.web.services.tables import records_frame

_COLUMNS = {
    "room_number": "Room",
    "building_name": "Building",
    "floor": "Floor",
    "capacity": "Capacity",
    "current_occupancy": "Occupied",
    "status": "Status",
}


def render() -> None:
    services = require_session()
    render_sidebar(services)
    st.title("🚪 Rooms")

    records = load_records(services, EntityKind.ROOMS)
    if records is None:
        return

    df = records_frame(records, _COLUMNS)
    cols = st.columns(3)
    cols[0].metric("Rooms", len(df))
    cols[1].metric("Beds", int(df["Capacity"].sum()) if not df.empty else 0)
    cols[2].metric("Free beds", int((df["Capacity"] - df["Occupied"]).clip(lower=0).sum()) if not df.empty else 0)

    query = st.text_input("Search", placeholder="Room number, building or status")
    visible = search_records(records, query, ("room_number", "building_name", "status"))
    if not visible:
        st.info("No rooms found.")
        return
    st.dataframe(records_frame(visible, _COLUMNS), use_container_width=True, hide_index=True)
