from __future__ import annotations

import yaml
import streamlit as st

from housing_console.infra.config import OfficeSettings, save_office_settings
from housing_console.infra.exceptions import ConfigError, ErrorHandler
from housing_console.infra.logging import get_logger
from housing_console.web.components.sidebar import render_sidebar
from housing_console.web.framework.auth import require_session

logger = get_logger(__name__)


def render() -> None:
    services = require_session()
    render_sidebar(services)
    config = services.config
    office = config.office

    st.title("⚙️ Settings")
    st.caption("Housing office preferences (written to the console YAML config).")

    with st.form("office_settings"):
        fee = st.number_input("Housing fee", 0.0, 1_000_000.0, float(office.housing_fee), 100.0)
        applications_open = st.toggle("Applications open", value=office.applications_open)
        email = st.toggle("Email notifications", value=office.email_notifications)
        sms = st.toggle("SMS notifications", value=office.sms_notifications)

        updated = OfficeSettings(
            housing_fee=fee,
            applications_open=applications_open,
            email_notifications=email,
            sms_notifications=sms,
        )
        with st.expander("Preview (YAML to be written)", expanded=False):
            st.code(yaml.safe_dump({"office": updated.to_dict()}, allow_unicode=True, sort_keys=False), language="yaml")

        submitted = st.form_submit_button("💾 Save", type="primary", use_container_width=True)

    if submitted:
        try:
            path = save_office_settings(updated, config.source_path)
        except (OSError, ConfigError) as e:
            handler = ErrorHandler(logger)
            handler.handle_and_log(e, {"page": "settings"})
            st.error(f"Save failed: {handler.create_error_response(e)['error']['message']}")
        else:
            config.office = updated
            logger.info(f"Office settings saved to {path}")
            st.success(f"Settings saved to {path.name}")

    user = services.session_store.user
    st.divider()
    st.markdown("### Account")
    st.write(f"Signed in as **{user.username}** ({user.role})")
