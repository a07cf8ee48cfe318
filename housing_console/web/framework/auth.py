"""Route guards. Both run after the persisted session has been restored."""
from __future__ import annotations

import streamlit as st

from housing_console.app.services import ConsoleServices

from .state import get_services

LOGIN_PAGE = "app.py"
HOME_PAGE = "pages/1_Dashboard.py"


def require_session() -> ConsoleServices:
    """Send anonymous visitors to the login page; return the services otherwise."""
    services = get_services()
    store = services.session_store
    if store.is_loading:
        st.info("Restoring session...")
        st.stop()
    if not store.is_authenticated:
        st.switch_page(LOGIN_PAGE)
    return services


def redirect_if_authenticated() -> ConsoleServices:
    services = get_services()
    if services.session_store.is_authenticated:
        st.switch_page(HOME_PAGE)
    return services


__all__ = ["require_session", "redirect_if_authenticated", "LOGIN_PAGE", "HOME_PAGE"]
