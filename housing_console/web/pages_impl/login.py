from __future__ import annotations

import streamlit as st

from housing_console.web.framework.auth import HOME_PAGE, redirect_if_authenticated
from housing_console.web.framework.runtime import run


def render() -> None:
    services = redirect_if_authenticated()
    store = services.session_store

    st.title("🏠 University Housing Console")
    st.caption("Sign in with your housing office account.")

    with st.form("login"):
        username = st.text_input("Username")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign in", type="primary", use_container_width=True)

    if not submitted:
        return
    if not username.strip() or not password:
        st.error("Enter both username and password")
        return

    with st.spinner("Signing in..."):
        result = run(store.login(username.strip(), password))
    if result.success:
        st.switch_page(HOME_PAGE)
    else:
        st.error(result.error)
