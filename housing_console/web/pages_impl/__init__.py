"""Actual page implementations (render functions) for Streamlit pages.

`pages/*.py` should stay as thin wrappers that:
- call init_page(...)
- call the corresponding render() function here
"""
