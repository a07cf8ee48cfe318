"""Frontend framework layer for the Streamlit console.

This package centralizes:
- page initialization (set_page_config)
- the background event loop and the per-browser-session services
- the auth guard and sidebar navigation
"""
