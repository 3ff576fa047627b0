"""Admin sign-in page."""

import streamlit as st

from legoworld.services.auth import get_auth_service
from legoworld.ui.auth_handlers import sign_in
from legoworld.ui.components.common import navigate_to, render_info_card


def render_login_page() -> None:
    """Render the email and password form."""
    st.markdown("### 🔑 Admin sign in")

    if st.session_state.get("is_admin"):
        st.success(f"Signed in as {st.session_state.user_email}")
        if st.button("📤 Upload a creation", type="primary"):
            navigate_to("upload")
        return

    if not get_auth_service().is_configured:
        render_info_card(
            "Sign in unavailable",
            "The database is not configured, so nobody can sign in. Browsing still works.",
            "⚠️",
        )
        return

    with st.form("login_form"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign in", type="primary")

    if submitted:
        if sign_in(email, password) and st.session_state.is_admin:
            navigate_to("home")
        st.error(st.session_state.auth_error or "Sign in failed")
