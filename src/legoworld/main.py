"""
Main Streamlit application for Aiden's Lego World.

This is the entry point for the gallery web application.
"""

import streamlit as st

from legoworld.config import get_debug_mode
from legoworld.logging_config import configure_structured_logging, get_logger
from legoworld.ui.auth_handlers import authenticate_user
from legoworld.ui.components.common import APP_TITLE, render_footer, render_header, render_sidebar
from legoworld.ui.components.error_display import error_context, get_error_display_manager
from legoworld.ui.pages.creation import render_creation_page
from legoworld.ui.pages.gallery import render_gallery_page
from legoworld.ui.pages.home import render_home_page
from legoworld.ui.pages.login import render_login_page
from legoworld.ui.pages.upload import render_upload_page

# Configure structured logging
configure_structured_logging()
logger = get_logger(__name__)
error_display = get_error_display_manager()

PAGES = {
    "home": render_home_page,
    "gallery": render_gallery_page,
    "creation": render_creation_page,
    "upload": render_upload_page,
    "login": render_login_page,
}


def initialize_session_state() -> None:
    """Initialize session state variables."""
    # Authentication state
    if "authenticated" not in st.session_state:
        st.session_state.authenticated = False

    if "user_id" not in st.session_state:
        st.session_state.user_id = None

    if "user_email" not in st.session_state:
        st.session_state.user_email = None

    if "is_admin" not in st.session_state:
        st.session_state.is_admin = False

    if "auth_error" not in st.session_state:
        st.session_state.auth_error = None

    # Application state
    if "current_page" not in st.session_state:
        st.session_state.current_page = "home"

    if "selected_creation_id" not in st.session_state:
        st.session_state.selected_creation_id = None


def render_main_content() -> None:
    """Render the main content area based on current page with error handling."""
    current_page = st.session_state.current_page

    with error_context(f"Failed to load page '{current_page}'"):
        render_page = PAGES.get(current_page)
        if render_page is not None:
            render_page()
        else:
            error_display.display_warning_message(f"Page '{current_page}' not found.")

            if st.button("🏠 Back to home", use_container_width=True, type="primary"):
                st.session_state.current_page = "home"
                st.rerun()


def main() -> None:
    """Main application entry point."""
    st.set_page_config(
        page_title=APP_TITLE,
        page_icon="🧱",
        layout="wide",
        initial_sidebar_state="expanded",
        menu_items={
            "Get Help": None,
            "Report a bug": None,
            "About": f"{APP_TITLE} - Lego creations gallery",
        },
    )

    initialize_session_state()

    with error_context("Authentication failed"):
        authenticate_user()

    logger.info(
        "session_initialized",
        authenticated=st.session_state.authenticated,
        is_admin=st.session_state.is_admin,
        current_page=st.session_state.current_page,
    )

    render_header()
    render_sidebar()

    with st.container():
        render_main_content()

    render_footer()

    if get_debug_mode():
        with st.expander("Debug Info"):
            st.write("Session State:", st.session_state)


if __name__ == "__main__":
    main()
