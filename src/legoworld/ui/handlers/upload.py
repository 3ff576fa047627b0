"""Upload handlers: validate a selection, upload it concurrently and save the creation."""

import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from typing import Any

import streamlit as st
import structlog

from legoworld.logging_config import log_performance
from legoworld.models.creation import Creation, MediaItem, MediaType, generate_creation_id, now_iso
from legoworld.services.image_processor import ImageProcessor, get_image_processor
from legoworld.services.media_host import MediaHostClient, UploadMetadata, get_media_host_client
from legoworld.services.sync import SyncService, get_sync_service
from legoworld.ui.handlers.error import ConfigError, UploadError, ValidationError

logger = structlog.get_logger()

ProgressCallback = Callable[[str, int, int], None]


def _read_uploaded_file(uploaded_file: Any) -> bytes:
    if hasattr(uploaded_file, "getvalue"):
        return uploaded_file.getvalue()

    file_data = uploaded_file.read()
    if hasattr(uploaded_file, "seek"):
        uploaded_file.seek(0)
    return file_data


def validate_uploaded_files(uploaded_files: list, already_selected: int = 0) -> tuple[list, list]:
    """
    Validate uploaded files for count, format and size.

    Args:
        uploaded_files: Uploaded file objects from Streamlit (anything with ``name`` and ``read``)
        already_selected: Files already attached to the creation being edited

    Returns:
        tuple: (valid_files, validation_errors)
    """
    if not uploaded_files:
        return [], []

    image_processor = get_image_processor()

    total = already_selected + len(uploaded_files)
    if total > image_processor.MAX_FILES:
        logger.warning("file_validation_too_many", total=total, max_files=image_processor.MAX_FILES)
        return [], [
            {
                "filename": f"{len(uploaded_files)} files",
                "error": "Too many files",
                "details": f"You can add up to {image_processor.MAX_FILES} files per creation "
                f"({already_selected} already selected).",
            }
        ]

    valid_files = []
    validation_errors = []

    for uploaded_file in uploaded_files:
        filename = uploaded_file.name
        file_data = _read_uploaded_file(uploaded_file)
        content_type = image_processor.detect_content_type(filename, getattr(uploaded_file, "type", None))

        errors = image_processor.validate_file(filename, len(file_data), content_type)
        if errors:
            for error in errors:
                validation_errors.append({"filename": filename, "error": error.code, "details": str(error)})
            logger.warning("file_validation_failed", filename=filename, errors=[error.code for error in errors])
            continue

        valid_files.append(
            {
                "file_object": uploaded_file,
                "filename": filename,
                "size": len(file_data),
                "data": file_data,
                "content_type": content_type,
                "media_type": image_processor.media_type_for(content_type),
            }
        )
        logger.info("file_validation_success", filename=filename, size=len(file_data))

    return valid_files, validation_errors


def process_single_upload(
    file_info: dict[str, Any],
    metadata: UploadMetadata,
    media_host: MediaHostClient,
    image_processor: ImageProcessor,
) -> dict[str, Any]:
    """
    Compress and upload one file.

    When the media host is unconfigured or rejects the file, the media is
    embedded as a data URI instead, so a creation is never lost to a
    hosting failure.

    Returns:
        dict: Upload result with the resulting ``media_item``
    """
    filename = file_info["filename"]
    file_data = file_info["data"]
    content_type = file_info["content_type"]
    media_type = file_info["media_type"]
    width = height = None

    if media_type == MediaType.IMAGE:
        try:
            file_data, width, height = image_processor.compress_image(file_data)
            content_type = "image/jpeg"
        except ValidationError as e:
            logger.warning("compression_skipped", filename=filename, error=str(e))

    try:
        result = media_host.upload(file_data, filename, metadata, content_type=content_type, media_type=media_type)
        return {
            "success": True,
            "filename": filename,
            "media_item": result.to_media_item(filename),
            "is_local": False,
        }
    except (UploadError, ConfigError) as e:
        logger.warning("upload_fallback_inline", filename=filename, error=str(e))
        media_item = MediaItem(
            url=image_processor.to_data_uri(file_data, content_type),
            name=filename,
            width=width,
            height=height,
            media_type=media_type,
        )
        return {"success": True, "filename": filename, "media_item": media_item, "is_local": True, "error": str(e)}


def upload_media_batch(
    valid_files: list[dict[str, Any]],
    metadata: UploadMetadata,
    media_host: MediaHostClient | None = None,
    progress_callback: ProgressCallback | None = None,
) -> list[dict[str, Any]]:
    """
    Upload all files concurrently.

    Each file is handled independently; results come back in selection order.

    Args:
        valid_files: Files returned by ``validate_uploaded_files``
        metadata: Creation the files belong to
        media_host: Media host client (defaults to the global client)
        progress_callback: Called with (filename, completed, total) as uploads finish

    Returns:
        list: One upload result per file
    """
    if not valid_files:
        return []

    media_host = media_host or get_media_host_client()
    image_processor = get_image_processor()
    total_files = len(valid_files)
    start_time = time.perf_counter()

    with ThreadPoolExecutor(max_workers=total_files, thread_name_prefix="media-upload") as executor:
        futures = [
            executor.submit(process_single_upload, file_info, metadata, media_host, image_processor)
            for file_info in valid_files
        ]

        results = []
        for index, future in enumerate(futures):
            result = future.result()
            results.append(result)
            if progress_callback:
                progress_callback(result["filename"], index + 1, total_files)

    log_performance(
        "upload_media_batch",
        time.perf_counter() - start_time,
        file_count=total_files,
        inline_count=sum(1 for result in results if result["is_local"]),
    )
    return results


def _summarize(results: list[dict[str, Any]]) -> dict[str, Any]:
    hosted = sum(1 for result in results if not result["is_local"])
    inline = len(results) - hosted
    return {"hosted_count": hosted, "inline_count": inline, "results": results}


def submit_creation(
    name: str,
    valid_files: list[dict[str, Any]],
    sync_service: SyncService | None = None,
    media_host: MediaHostClient | None = None,
    user_id: str | None = None,
    progress_callback: ProgressCallback | None = None,
) -> dict[str, Any]:
    """
    Upload the selected files and save them as a new creation.

    Returns:
        dict: ``creation`` plus hosted and inline counts

    Raises:
        ValidationError: If the name is blank or nothing was selected
        ConfigError: If the database is not configured
        PersistenceError: If the database rejects the creation
    """
    name = name.strip()
    if not name:
        raise ValidationError("Creation name is required", user_message="Please give your creation a name.")
    if not valid_files:
        raise ValidationError("No files selected", user_message="Please select at least one photo or video.")

    sync_service = sync_service or get_sync_service()
    creation_id = generate_creation_id()
    date_added = now_iso()
    metadata = UploadMetadata(creation_id=creation_id, creation_name=name, date_added=date_added)

    results = upload_media_batch(valid_files, metadata, media_host, progress_callback)

    creation = Creation(id=creation_id, name=name, date_added=date_added)
    creation.add_media(result["media_item"] for result in results)
    sync_service.save(creation, user_id=user_id)

    summary = _summarize(results)
    logger.info("creation_submitted", creation_id=creation_id, **{k: v for k, v in summary.items() if k != "results"})
    return {"creation": creation, **summary}


def add_media_to_creation(
    creation: Creation,
    valid_files: list[dict[str, Any]],
    sync_service: SyncService | None = None,
    media_host: MediaHostClient | None = None,
    user_id: str | None = None,
    progress_callback: ProgressCallback | None = None,
) -> dict[str, Any]:
    """
    Upload more files into an existing creation.

    Returns:
        dict: ``added`` media items plus hosted and inline counts
    """
    if not valid_files:
        raise ValidationError("No files selected", user_message="Please select at least one photo or video.")

    sync_service = sync_service or get_sync_service()
    metadata = UploadMetadata(creation_id=creation.id, creation_name=creation.name, date_added=creation.date_added)

    results = upload_media_batch(valid_files, metadata, media_host, progress_callback)
    items = [result["media_item"] for result in results if not creation.has_media(result["media_item"].url)]
    added = sync_service.add_media(creation.id, items, user_id=user_id)
    creation.add_media(added)

    return {"added": added, **_summarize(results)}


def clear_upload_session_state() -> None:
    """Clear upload-related session state variables."""
    session_keys_to_clear = [
        "valid_files",
        "validation_errors",
        "upload_validated",
        "upload_in_progress",
        "last_upload_result",
        "creation_name",
    ]

    for key in session_keys_to_clear:
        if key in st.session_state:
            del st.session_state[key]

    # File uploader widgets are reset by changing their key
    st.session_state["uploader_generation"] = st.session_state.get("uploader_generation", 0) + 1
