from housing_console.web.framework.page import init_page, PageSpec
from housing_console.web.pages_impl.payments import render

# MUST be the first Streamlit command on this page
init_page(PageSpec(title="Payments", icon="💳"))

render()
