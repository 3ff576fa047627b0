"""Gallery page for the Lego World application."""

import streamlit as st
import structlog

from legoworld.ui.components.common import render_empty_state
from legoworld.ui.components.gallery import render_creation_grid, render_degraded_banner, render_media_grid
from legoworld.ui.handlers.gallery import flatten_media, load_creations

logger = structlog.get_logger(__name__)

VIEW_MODES = {"By creation": "by_creation", "All photos & videos": "view_all"}


def render_gallery_page() -> None:
    """Render every creation, grouped by creation or as one flat media grid."""
    col1, col2 = st.columns([3, 1])

    with col1:
        st.markdown("### 🖼️ Gallery")

    with col2:
        view_label = st.selectbox("View", list(VIEW_MODES), index=0)

    view_mode = VIEW_MODES[view_label]

    result = load_creations()
    if result.degraded:
        render_degraded_banner(result.status_message)
    if result.migrated:
        st.info(f"📦 Moved {result.migrated} creation(s) from this device into the database.")

    st.divider()

    if not result.creations:
        render_empty_state(
            title="No creations yet",
            description="There is nothing in the gallery yet.",
            icon="📷",
            action_text="📤 Upload a creation" if st.session_state.get("is_admin") else None,
            action_page="upload",
        )
        return

    logger.info(
        "gallery_rendered",
        view_mode=view_mode,
        creation_count=len(result.creations),
        source=result.source.value,
    )

    if view_mode == "view_all":
        entries = flatten_media(result.creations)
        st.caption(f"{len(entries)} photos and videos")
        render_media_grid(entries)
    else:
        st.caption(f"{len(result.creations)} creations")
        render_creation_grid(result.creations)
