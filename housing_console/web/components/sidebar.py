from __future__ import annotations

import streamlit as st

from housing_console.app.services import ConsoleServices
from housing_console.web.components.query_view import show_flash
from housing_console.web.framework.auth import LOGIN_PAGE
from housing_console.web.services.filters import initials

NAV_ITEMS = (
    ("pages/1_Dashboard.py", "Dashboard", "📊"),
    ("pages/2_Applications.py", "Applications", "📝"),
    ("pages/3_Buildings.py", "Buildings", "🏢"),
    ("pages/4_Rooms.py", "Rooms", "🚪"),
    ("pages/5_Students.py", "Students", "🎓"),
    ("pages/6_Payments.py", "Payments", "💳"),
    ("pages/7_Complaints.py", "Complaints", "⚠️"),
    ("pages/8_Notifications.py", "Notifications", "🔔"),
    ("pages/9_Settings.py", "Settings", "⚙️"),
)


def render_sidebar(services: ConsoleServices) -> None:
    store = services.session_store
    show_flash()
    with st.sidebar:
        st.markdown("### 🏠 Housing Console")
        for path, label, icon in NAV_ITEMS:
            st.page_link(path, label=label, icon=icon)

        st.divider()
        user = store.user
        if user is not None:
            st.markdown(f"**{initials(user.username)}** · {user.username}")
            st.caption(f"Role: {user.role}")
        if st.button("🚪 Sign out", use_container_width=True):
            store.logout()
            st.switch_page(LOGIN_PAGE)
