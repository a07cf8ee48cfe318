"""Streamlit glue around the query client: spinners, error banners, toasts."""
from __future__ import annotations

from typing import Any, Awaitable, List, Optional

import streamlit as st

from housing_console.app.query_client import MutationResult
from housing_console.app.services import ConsoleServices
from housing_console.domain.models import EntityKind
from housing_console.web.framework.runtime import run

FLASH_KEY = "flash_message"


def load_records(services: ConsoleServices, kind: EntityKind) -> Optional[List[Any]]:
    """Fetch a kind's list; show the error and return None when it failed."""
    refresh = st.button("🔄 Refresh", key=f"refresh_{kind.value}")
    with st.spinner("Loading..."):
        result = run(services.query_client.list(kind, force=refresh))
    if result.is_error:
        st.error(result.error)
        return None
    return list(result.data)


def apply_mutation(call: Awaitable[MutationResult], success_message: str) -> bool:
    """Run a write; on success rerun so the invalidated list is refetched."""
    with st.spinner("Saving..."):
        result = run(call)
    if not result.success:
        st.error(result.error or "The operation failed")
        return False
    # toasts do not survive st.rerun(); show it on the next run
    st.session_state[FLASH_KEY] = success_message
    st.rerun()
    return True


def show_flash() -> None:
    message = st.session_state.pop(FLASH_KEY, None)
    if message:
        st.toast(message, icon="✅")
