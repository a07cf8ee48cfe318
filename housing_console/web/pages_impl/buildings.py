from __future__ import annotations

from typing import Any, Dict, Optional

import streamlit as st

from housing_console.domain.models import BuildingRecord, EntityKind
from housing_console.web.components.query_view import apply_mutation, load_records
from housing_console.web.components.sidebar import render_sidebar
from housing_console.web.framework.auth import require_session
from housing_console.web.services.filters import search_records
from housing_console.web.services.tables import records_frame

_COLUMNS = {
    "building_id": "ID",
    "name": "Name",
    "type": "Type",
    "number_of_floors": "Floors",
    "status": "Status",
}
BUILDING_TYPES = ("male", "female")
BUILDING_STATUSES = ("active", "maintenance", "inactive")


def building_payload(name: str, type_: str, floors: int, status: str) -> Dict[str, Any]:
    return {"name": name.strip(), "type": type_, "numberOfFloors": int(floors), "status": status}


def _index(options, value: str) -> int:
    return options.index(value) if value in options else 0


def _building_form(key: str, record: Optional[BuildingRecord] = None) -> Optional[Dict[str, Any]]:
    """Render the create/edit form; returns the payload when submitted and valid."""
    with st.form(key, clear_on_submit=record is None):
        name = st.text_input("Name", value=record.name if record else "")
        c1, c2, c3 = st.columns(3)
        type_ = c1.selectbox("Type", BUILDING_TYPES, index=_index(BUILDING_TYPES, record.type if record else ""))
        floors = c2.number_input("Floors", 1, 50, min(max(int(record.number_of_floors), 1), 50) if record else 1)
        status = c3.selectbox("Status", BUILDING_STATUSES, index=_index(BUILDING_STATUSES, record.status if record else ""))
        submitted = st.form_submit_button("💾 Save", type="primary")
    if not submitted:
        return None
    if not name.strip():
        st.error("Building name is required")
        return None
    return building_payload(name, type_, floors, status)


def render() -> None:
    services = require_session()
    render_sidebar(services)
    qc = services.query_client

    st.title("🏢 Buildings")

    with st.expander("➕ Add building"):
        payload = _building_form("create_building")
        if payload is not None:
            apply_mutation(qc.create(EntityKind.BUILDINGS, payload), "Building created")

    records = load_records(services, EntityKind.BUILDINGS)
    if records is None:
        return

    query = st.text_input("Search", placeholder="Name, type or status")
    visible = search_records(records, query, ("name", "type", "status"))
    if not visible:
        st.info("No buildings found.")
        return
    st.dataframe(records_frame(visible, _COLUMNS), use_container_width=True, hide_index=True)

    for rec in visible:
        with st.expander(f"✏️ {rec.name or 'Unnamed'} (#{rec.building_id})"):
            payload = _building_form(f"edit_building_{rec.building_id}", rec)
            if payload is not None:
                apply_mutation(qc.update(EntityKind.BUILDINGS, rec.building_id, payload), "Building updated")

            confirm_key = f"confirm_delete_{rec.building_id}"
            if st.button("🗑️ Delete", key=f"delete_{rec.building_id}"):
                st.session_state[confirm_key] = True
            if st.session_state.get(confirm_key):
                st.warning(f"Delete {rec.name or 'this building'}? This cannot be undone.")
                y, n = st.columns(2)
                if y.button("Yes, delete", key=f"yes_{rec.building_id}", type="primary"):
                    st.session_state.pop(confirm_key, None)
                    apply_mutation(qc.delete(EntityKind.BUILDINGS, rec.building_id), "Building deleted")
                if n.button("Cancel", key=f"no_{rec.building_id}"):
                    st.session_state.pop(confirm_key, None)
                    st.rerun()
