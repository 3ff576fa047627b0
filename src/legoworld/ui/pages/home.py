"""Home page for the Lego World application."""

import streamlit as st

from legoworld.ui.components.common import navigate_to, render_empty_state, render_info_card
from legoworld.ui.components.gallery import render_creation_grid, render_degraded_banner
from legoworld.ui.handlers.gallery import get_recent_creations, load_creations


def render_home_page() -> None:
    """Render the welcome text and the three newest creations."""
    render_info_card(
        "Welcome!",
        "This is where Aiden shows off his Lego builds. Every creation has its own photos and videos.",
        "👋",
    )

    result = load_creations()
    if result.degraded:
        render_degraded_banner(result.status_message)

    recent = get_recent_creations(result.creations)
    if not recent:
        render_empty_state(
            title="No creations yet",
            description="The first build is on its way!",
            action_text="📤 Upload a creation" if st.session_state.get("is_admin") else None,
            action_page="upload",
        )
        return

    st.markdown("### 🆕 Latest creations")
    render_creation_grid(recent)

    col1, col2 = st.columns(2)

    with col1:
        if st.button("🖼️ See the whole gallery", use_container_width=True, type="primary"):
            navigate_to("gallery")

    with col2:
        if st.session_state.get("is_admin") and st.button("📤 Upload a creation", use_container_width=True):
            navigate_to("upload")
