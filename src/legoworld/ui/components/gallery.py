"""Gallery components for the Lego World application."""

import streamlit as st
import structlog

from legoworld.models.creation import Creation, MediaItem
from legoworld.utils.media import get_media_thumbnail

from ..handlers.gallery import format_date_added
from .common import navigate_to

logger = structlog.get_logger(__name__)

COLS_PER_ROW = 3


def render_media(media: MediaItem, caption: str | None = None) -> None:
    """Show one photo or play one video at full width."""
    if media.is_video:
        st.video(media.url)
        if caption:
            st.caption(caption)
    else:
        st.image(media.url, caption=caption, use_container_width=True)


def render_media_tile(media: MediaItem, caption: str | None = None) -> None:
    """
    Render a grid tile: the image itself, or a poster frame for videos.

    Videos hosted outside Cloudinary have no poster frame and are played inline.
    """
    thumbnail_url = get_media_thumbnail(media)

    if media.is_video and not thumbnail_url:
        st.video(media.url)
    elif thumbnail_url:
        st.image(thumbnail_url, use_container_width=True)
    else:
        st.error("📷 Media unavailable")

    label = caption or media.name
    st.caption(f"🎬 {label}" if media.is_video else label)


def render_creation_card(creation: Creation) -> None:
    """Render a creation as its cover media, name and date, linking to the detail page."""
    try:
        cover = creation.photos[0]
        render_media_tile(cover, caption=creation.name)
        st.caption(f"📅 {format_date_added(creation.date_added)} · {creation.media_count} items")

        if st.button("🔍 View", key=f"view_{creation.id}", use_container_width=True):
            navigate_to("creation", selected_creation_id=creation.id)

    except (IndexError, AttributeError) as e:
        logger.error("render_creation_card_error", creation_id=creation.id, error=str(e))
        st.error("❌ Could not show this creation")
        st.caption(creation.name)


def render_creation_grid(creations: list[Creation]) -> None:
    """Render creations in a grid, one card each."""
    for i in range(0, len(creations), COLS_PER_ROW):
        cols = st.columns(COLS_PER_ROW)

        for j, col in enumerate(cols):
            index = i + j
            with col:
                if index < len(creations):
                    render_creation_card(creations[index])
                else:
                    st.empty()


def render_media_grid(entries: list[tuple[Creation, MediaItem]]) -> None:
    """Render every media item, captioned with the creation it belongs to."""
    for i in range(0, len(entries), COLS_PER_ROW):
        cols = st.columns(COLS_PER_ROW)

        for j, col in enumerate(cols):
            index = i + j
            with col:
                if index < len(entries):
                    creation, media = entries[index]
                    render_media_tile(media, caption=creation.name)
                    if st.button("🔍 Open creation", key=f"open_{creation.id}_{index}", use_container_width=True):
                        navigate_to("creation", selected_creation_id=creation.id)
                else:
                    st.empty()


def render_degraded_banner(status_message: str | None) -> None:
    """Tell visitors the gallery is served from this device's copy."""
    st.warning(f"⚠️ {status_message or 'Showing creations saved on this device.'}")


def render_inline_upload_notice(inline_count: int) -> None:
    if inline_count:
        st.info(
            f"💾 {inline_count} file(s) could not reach the media host and were stored inside the creation instead."
        )
