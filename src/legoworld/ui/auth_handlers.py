"""Authentication handlers for the Lego World application."""

import streamlit as st
import structlog

from legoworld.services.auth import AdminUser, get_auth_service
from legoworld.ui.components.common import render_error_message
from legoworld.ui.handlers.error import AuthenticationError

logger = structlog.get_logger()


def _store_user(user: AdminUser | None, is_admin: bool = False) -> None:
    st.session_state.authenticated = user is not None
    st.session_state.user_id = user.user_id if user else None
    st.session_state.user_email = user.email if user else None
    st.session_state.is_admin = is_admin


def authenticate_user() -> bool:
    """
    Restore the signed-in user, or sign in the development admin automatically.

    Browsing never requires authentication, so a False result only means
    admin features stay hidden.

    Returns:
        bool: True if a user is signed in
    """
    if st.session_state.get("authenticated"):
        return True

    auth_service = get_auth_service()
    dev_user = auth_service.get_development_user()
    if dev_user:
        _store_user(dev_user, is_admin=auth_service.is_admin(dev_user))
        st.session_state.auth_error = None
        logger.info("development_authentication_success", email=dev_user.email)
        return True

    return False


def sign_in(email: str, password: str) -> bool:
    """
    Sign in with email and password and record the result in session state.

    Returns:
        bool: True if sign in succeeded
    """
    auth_service = get_auth_service()

    try:
        user = auth_service.sign_in(email.strip(), password)
    except AuthenticationError as e:
        _store_user(None)
        st.session_state.auth_error = e.user_message
        logger.warning("authentication_failed", email=email)
        return False

    is_admin = auth_service.is_admin(user)
    _store_user(user, is_admin=is_admin)
    st.session_state.auth_error = None if is_admin else "This account cannot edit creations."

    logger.info("authentication_success", user_id=user.user_id, email=user.email, is_admin=is_admin)
    return True


def handle_logout() -> None:
    """Handle user logout."""
    try:
        get_auth_service().sign_out()
    except AuthenticationError as e:
        logger.warning("sign_out_failed", error=str(e))

    _store_user(None)
    st.session_state.auth_error = None
    st.session_state.current_page = "home"

    logger.info("user_logout")
    st.rerun()


def get_current_admin() -> AdminUser | None:
    """The signed-in admin, None for visitors and non-admin accounts."""
    if not st.session_state.get("authenticated") or not st.session_state.get("is_admin"):
        return None
    return AdminUser(user_id=st.session_state.user_id, email=st.session_state.user_email)


def require_admin() -> bool:
    """
    Require an admin for editing pages.

    Returns:
        bool: True if the current user is the admin, False otherwise
    """
    if get_current_admin() is not None:
        return True

    render_error_message(
        error_type="Admin only",
        message="Only the admin can upload and edit creations.",
        details=st.session_state.get("auth_error"),
    )

    col1, col2 = st.columns(2)
    with col1:
        if st.button("🔑 Sign in", use_container_width=True, type="primary"):
            st.session_state.current_page = "login"
            st.rerun()
    with col2:
        if st.button("🏠 Back to home", use_container_width=True):
            st.session_state.current_page = "home"
            st.rerun()

    return False
