"""Creation detail page: media viewer plus admin editing."""

import streamlit as st
import structlog

from legoworld.models.creation import Creation
from legoworld.ui.auth_handlers import get_current_admin
from legoworld.ui.components.common import navigate_to, render_empty_state
from legoworld.ui.components.error_display import get_error_display_manager
from legoworld.ui.components.gallery import render_inline_upload_notice, render_media
from legoworld.ui.handlers.error import LegoWorldError
from legoworld.ui.handlers.gallery import (
    delete_creation,
    delete_media,
    find_creation,
    format_date_added,
    load_creations,
    rename_creation,
)
from legoworld.ui.handlers.upload import add_media_to_creation, validate_uploaded_files

logger = structlog.get_logger(__name__)
error_display = get_error_display_manager()


def _render_viewer(creation: Creation) -> None:
    """Show one media item at a time with previous/next controls."""
    index_key = f"media_index_{creation.id}"
    index = min(st.session_state.get(index_key, 0), creation.media_count - 1)

    media = creation.photos[index]
    render_media(media, caption=media.name)

    if creation.media_count > 1:
        col1, col2, col3 = st.columns([1, 2, 1])
        with col1:
            if st.button("⬅️ Previous", use_container_width=True, disabled=index == 0):
                st.session_state[index_key] = index - 1
                st.rerun()
        with col2:
            st.markdown(
                f"<div style='text-align: center;'>{index + 1} / {creation.media_count}</div>",
                unsafe_allow_html=True,
            )
        with col3:
            if st.button("Next ➡️", use_container_width=True, disabled=index >= creation.media_count - 1):
                st.session_state[index_key] = index + 1
                st.rerun()


def _render_admin_tools(creation: Creation, user_id: str) -> None:
    st.divider()
    st.markdown("#### 🔧 Edit creation")

    with st.form(f"rename_{creation.id}"):
        new_name = st.text_input("Name", value=creation.name)
        if st.form_submit_button("✏️ Rename"):
            try:
                rename_creation(creation, new_name, user_id=user_id)
                st.success("Creation renamed")
                st.rerun()
            except LegoWorldError as e:
                error_display.display_exception(e, context={"operation": "rename_creation"})

    with st.expander("🗑️ Remove a photo or video"):
        for index, media in enumerate(creation.photos):
            col1, col2 = st.columns([3, 1])
            with col1:
                st.write(f"{'🎬' if media.is_video else '📷'} {media.name}")
            with col2:
                if st.button("Remove", key=f"remove_media_{creation.id}_{index}", disabled=creation.media_count <= 1):
                    try:
                        delete_media(creation, media, user_id=user_id)
                        st.session_state[f"media_index_{creation.id}"] = 0
                        st.rerun()
                    except LegoWorldError as e:
                        error_display.display_exception(e, context={"operation": "delete_media"})

    with st.expander("➕ Add photos or videos"):
        generation = st.session_state.get("uploader_generation", 0)
        uploaded_files = st.file_uploader(
            "Choose files",
            accept_multiple_files=True,
            key=f"add_media_{creation.id}_{generation}",
        )
        if uploaded_files and st.button("📤 Add to creation", type="primary"):
            valid_files, validation_errors = validate_uploaded_files(uploaded_files, creation.media_count)
            for error in validation_errors:
                st.error(f"**{error['filename']}**: {error['details']}")

            if valid_files:
                try:
                    with st.spinner("Uploading..."):
                        result = add_media_to_creation(creation, valid_files, user_id=user_id)
                    st.success(f"Added {len(result['added'])} item(s)")
                    render_inline_upload_notice(result["inline_count"])
                    st.session_state.uploader_generation = generation + 1
                except LegoWorldError as e:
                    error_display.display_exception(e, context={"operation": "add_media"})

    st.markdown("#### ⚠️ Danger zone")
    confirm = st.checkbox("I really want to delete this creation", key=f"confirm_delete_{creation.id}")
    if st.button("🗑️ Delete creation", disabled=not confirm):
        try:
            delete_creation(creation, user_id=user_id)
            logger.info("creation_deleted_from_ui", creation_id=creation.id)
            navigate_to("gallery", selected_creation_id=None)
        except LegoWorldError as e:
            error_display.display_exception(e, context={"operation": "delete_creation"})


def render_creation_page() -> None:
    """Render the selected creation."""
    creation_id = st.session_state.get("selected_creation_id")
    creation = find_creation(load_creations().creations, creation_id)

    if st.button("⬅️ Back to gallery"):
        navigate_to("gallery")

    if creation is None:
        render_empty_state(
            title="Creation not found",
            description="It may have been deleted.",
            icon="🔍",
            action_text="🖼️ Go to gallery",
            action_page="gallery",
        )
        return

    st.markdown(f"### {creation.name}")
    st.caption(f"📅 Added {format_date_added(creation.date_added)} · {creation.media_count} items")

    _render_viewer(creation)

    admin = get_current_admin()
    if admin is not None:
        _render_admin_tools(creation, admin.user_id)
