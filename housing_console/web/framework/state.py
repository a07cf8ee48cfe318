from __future__ import annotations

import streamlit as st

from housing_console.app.services import ConsoleServices, build_services
from housing_console.infra.exceptions import ConfigError, ErrorHandler
from housing_console.infra.logging import get_logger
from housing_console.ports.storage import is_browser_id, new_browser_id
from housing_console.web.framework.runtime import get_http_session

logger = get_logger(__name__)

SERVICES_KEY = "housing_services"
BROWSER_ID_KEY = "housing_browser_id"
# query parameter that keeps the browser id across reloads
BROWSER_ID_PARAM = "sid"


def get_browser_id() -> str:
    """
    The id naming this browser's persisted session.

    Read from the URL on first use, or drawn fresh. It is written back on
    every rerun because page switches drop query parameters.
    """
    browser_id = st.session_state.get(BROWSER_ID_KEY)
    if not is_browser_id(browser_id):
        browser_id = st.query_params.get(BROWSER_ID_PARAM)
        if not is_browser_id(browser_id):
            browser_id = new_browser_id()
        st.session_state[BROWSER_ID_KEY] = browser_id
    if st.query_params.get(BROWSER_ID_PARAM) != browser_id:
        st.query_params[BROWSER_ID_PARAM] = browser_id
    return browser_id


def get_services() -> ConsoleServices:
    """Per-browser-session services; the persisted login is restored on first build."""
    browser_id = get_browser_id()
    services = st.session_state.get(SERVICES_KEY)
    if isinstance(services, ConsoleServices):
        return services

    try:
        services = build_services(browser_id=browser_id, http_session=get_http_session())
    except ConfigError as e:
        ErrorHandler(logger).handle_and_log(e)
        st.error(f"Configuration error: {e.message}")
        st.stop()

    services.session_store.restore()
    st.session_state[SERVICES_KEY] = services
    return services


__all__ = ["get_browser_id", "get_services", "BROWSER_ID_PARAM", "SERVICES_KEY"]
