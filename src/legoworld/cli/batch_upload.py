import io
import os

import structlog
from dotenv import load_dotenv
from invoke import Context, task

from legoworld.config import get_config
from legoworld.services.image_processor import get_image_processor
from legoworld.ui.handlers.error import LegoWorldError
from legoworld.ui.handlers.upload import submit_creation, validate_uploaded_files

logger = structlog.get_logger()


def find_media_files(directory: str, recursive: bool = False) -> list[str]:
    """List files under ``directory`` with a supported photo or video extension, sorted by path."""
    supported_extensions = set(get_image_processor().EXTENSION_TYPES)
    media_files = []

    if recursive:
        for root, _, files in os.walk(directory):
            for name in files:
                if os.path.splitext(name)[1].lower() in supported_extensions:
                    media_files.append(os.path.join(root, name))
    else:
        for name in os.listdir(directory):
            path = os.path.join(directory, name)
            if os.path.isfile(path) and os.path.splitext(name)[1].lower() in supported_extensions:
                media_files.append(path)

    return sorted(media_files)


def open_media_file(file_path: str) -> io.BytesIO:
    """Load a file into memory with a ``name`` attribute, like a browser upload."""
    with open(file_path, "rb") as f:
        buffer = io.BytesIO(f.read())
    buffer.name = os.path.basename(file_path)
    return buffer


@task
def batch_upload(
    c: Context,
    directory: str,
    name: str,
    env_file: str = ".env",
    recursive: bool = False,
    dry_run: bool = False,
    user_id: str = "cli",
):
    """
    Upload a local directory of photos and videos as one creation.

    Args:
        c (Context): Invoke context.
        directory (str): Path to the directory containing the media.
        name (str): Name of the new creation.
        env_file (str): Path to the environment file. Default is '.env'.
        recursive (bool): Search for media in subdirectories. Default is False.
        dry_run (bool): If True, lists files to be processed without uploading. Default is False.
        user_id (str): Owner recorded on the creation. Default is 'cli'.
    """
    # 1. Load environment variables
    if os.path.exists(env_file):
        logger.info("loading_env_file", env_file=env_file)
        load_dotenv(dotenv_path=env_file)
        get_config().clear_cache()
    else:
        logger.warning("env_file_not_found", env_file=env_file)

    # 2. Validate arguments
    if not os.path.isdir(directory):
        logger.error("directory_not_found", directory=directory)
        return
    if not name.strip():
        logger.error("creation_name_missing")
        return

    logger.info("batch_upload_starting", directory=directory, name=name, recursive=recursive, dry_run=dry_run)

    # 3. Find media files
    media_files = find_media_files(directory, recursive)
    if not media_files:
        logger.warning("no_media_files_found", directory=directory)
        return

    # 4. If dry-run, print files and exit
    if dry_run:
        print("\n--- Dry Run Mode: Files to be processed ---")
        for file_path in media_files:
            print(f"- {file_path}")
        print("--- End of Dry Run ---")
        return

    # 5. Validate, upload and save
    valid_files, validation_errors = validate_uploaded_files([open_media_file(path) for path in media_files])
    for error in validation_errors:
        logger.error("file_rejected", filename=error["filename"], details=error["details"])

    if not valid_files:
        print("\nNo valid files to upload.")
        return

    try:
        result = submit_creation(name, valid_files, user_id=user_id)
    except LegoWorldError as e:
        print(f"\nBatch upload failed: {e.user_message}")
        return

    creation = result["creation"]
    logger.info(
        "batch_upload_finished",
        creation_id=creation.id,
        hosted=result["hosted_count"],
        inline=result["inline_count"],
        rejected=len(validation_errors),
    )
    print(
        f"\nCreation '{creation.name}' ({creation.id}) saved. "
        f"Hosted: {result['hosted_count']}, Inline: {result['inline_count']}, Rejected: {len(validation_errors)}"
    )
