"""Upload page for the Lego World application."""

import time
from typing import Any

import streamlit as st
import structlog

from legoworld.services.image_processor import MB, get_image_processor
from legoworld.ui.auth_handlers import get_current_admin, require_admin
from legoworld.ui.components.common import format_file_size, navigate_to, render_empty_state, render_info_card
from legoworld.ui.components.error_display import get_error_display_manager
from legoworld.ui.components.gallery import render_inline_upload_notice
from legoworld.ui.handlers.error import LegoWorldError
from legoworld.ui.handlers.upload import clear_upload_session_state, submit_creation, validate_uploaded_files

logger = structlog.get_logger()
error_display = get_error_display_manager()

UPLOAD_EXTENSIONS = ["jpg", "jpeg", "png", "webp", "gif", "mp4", "mov", "avi", "webm", "m4v"]


def _initialize_session_state() -> None:
    """Initialize session state variables for upload management."""
    if "upload_validated" not in st.session_state:
        st.session_state.upload_validated = False
    if "valid_files" not in st.session_state:
        st.session_state.valid_files = []
    if "validation_errors" not in st.session_state:
        st.session_state.validation_errors = []
    if "upload_in_progress" not in st.session_state:
        st.session_state.upload_in_progress = False
    if "last_upload_result" not in st.session_state:
        st.session_state.last_upload_result = None
    if "uploader_generation" not in st.session_state:
        st.session_state.uploader_generation = 0


def _render_upload_header_and_info() -> None:
    st.markdown("### 📤 Upload a new creation")

    image_processor = get_image_processor()
    col1, col2 = st.columns(2)

    with col1:
        render_info_card(
            "Photos",
            f"JPG, PNG, WebP or GIF up to {image_processor.MAX_IMAGE_SIZE / MB:.0f}MB. "
            f"Large photos are shrunk to {image_processor.MAX_DIMENSION}px.",
            "📷",
        )

    with col2:
        render_info_card(
            "Videos",
            f"MP4, MOV, AVI, WebM or M4V up to {image_processor.MAX_VIDEO_SIZE / MB:.0f}MB. "
            f"At most {image_processor.MAX_FILES} files per creation.",
            "🎬",
        )


def _validate_uploaded_files(uploaded_files: list[Any]) -> None:
    """Validate uploaded files when the selection changes."""
    selection = [(uploaded_file.name, uploaded_file.size) for uploaded_file in uploaded_files]
    if st.session_state.upload_validated and st.session_state.get("validated_selection") == selection:
        return

    valid_files, validation_errors = validate_uploaded_files(uploaded_files)
    st.session_state.valid_files = valid_files
    st.session_state.validation_errors = validation_errors
    st.session_state.validated_selection = selection
    st.session_state.upload_validated = True

    logger.info(
        "file_validation_completed",
        total_files=len(uploaded_files),
        valid_files=len(valid_files),
        errors=len(validation_errors),
    )


def _render_validation_results() -> None:
    for error in st.session_state.validation_errors:
        st.error(f"**{error['filename']}**: {error['details']}")

    for file_info in st.session_state.valid_files:
        icon = "🎬" if file_info["media_type"].value == "video" else "📷"
        st.write(f"✅ {icon} {file_info['filename']} ({format_file_size(file_info['size'])})")


def _execute_upload(name: str, user_id: str) -> None:
    st.session_state.upload_in_progress = True
    progress_bar = st.progress(0.0, text="Starting upload...")
    start_time = time.perf_counter()

    def progress_callback(filename: str, completed: int, total: int) -> None:
        progress_bar.progress(completed / total, text=f"Uploaded {filename} ({completed}/{total})")

    try:
        result = submit_creation(
            name, st.session_state.valid_files, user_id=user_id, progress_callback=progress_callback
        )
    except LegoWorldError as e:
        error_display.display_exception(e, context={"operation": "submit_creation"}, show_details=True)
        return
    finally:
        progress_bar.empty()
        st.session_state.upload_in_progress = False

    st.session_state.last_upload_result = {
        "creation_id": result["creation"].id,
        "name": result["creation"].name,
        "hosted_count": result["hosted_count"],
        "inline_count": result["inline_count"],
        "processing_time": time.perf_counter() - start_time,
    }
    st.session_state.uploader_generation += 1
    st.session_state.upload_validated = False
    st.session_state.valid_files = []
    st.session_state.validation_errors = []
    st.rerun()


def _render_last_result() -> None:
    result = st.session_state.last_upload_result
    st.success(
        f"🎉 **{result['name']}** saved with {result['hosted_count'] + result['inline_count']} item(s) "
        f"in {result['processing_time']:.1f}s"
    )
    render_inline_upload_notice(result["inline_count"])

    col1, col2 = st.columns(2)
    with col1:
        if st.button("🔍 View creation", use_container_width=True, type="primary"):
            creation_id = result["creation_id"]
            clear_upload_session_state()
            navigate_to("creation", selected_creation_id=creation_id)
    with col2:
        if st.button("🗑️ Clear", use_container_width=True):
            clear_upload_session_state()
            st.rerun()


def render_upload_page() -> None:
    """Render the upload page for the admin."""
    if not require_admin():
        return

    _initialize_session_state()
    _render_upload_header_and_info()

    if st.session_state.last_upload_result:
        _render_last_result()
        st.divider()

    name = st.text_input("Creation name", key="creation_name", placeholder="e.g. Space Station")

    uploaded_files = st.file_uploader(
        "Drag photos and videos here or click to browse",
        type=UPLOAD_EXTENSIONS,
        accept_multiple_files=True,
        key=f"media_uploader_{st.session_state.uploader_generation}",
    )

    if not uploaded_files:
        render_empty_state(
            title="Nothing selected",
            description="Pick the photos and videos of one build.",
            icon="📁",
        )
        return

    _validate_uploaded_files(uploaded_files)

    st.divider()
    _render_validation_results()

    if not st.session_state.valid_files:
        return

    can_upload = bool(name.strip()) and not st.session_state.upload_in_progress
    if st.button(
        f"🚀 Save creation with {len(st.session_state.valid_files)} file(s)",
        use_container_width=True,
        type="primary",
        disabled=not can_upload,
        help=None if name.strip() else "Give the creation a name first",
    ):
        admin = get_current_admin()
        _execute_upload(name, admin.user_id if admin else None)
