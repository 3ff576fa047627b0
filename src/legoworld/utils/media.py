"""
Media URL helpers.

Cloudinary derives resized images and video poster frames from URL
transformations, so thumbnails are computed rather than stored.
"""

from urllib.parse import urlsplit, urlunsplit

from legoworld.models.creation import MediaItem, MediaType

VIDEO_EXTENSIONS = (".mp4", ".mov", ".avi", ".webm", ".m4v")


def is_video(url: str | None, media_type: MediaType | str | None = None) -> bool:
    """
    Check whether media is a video, by its declared type or else its extension.

    Args:
        url: Media URL
        media_type: Declared media type, if known

    Returns:
        bool: True if the media is a video
    """
    if media_type in (MediaType.VIDEO, MediaType.VIDEO.value):
        return True
    if not url:
        return False
    return any(extension in url.lower() for extension in VIDEO_EXTENSIONS)


def generate_video_thumbnail(url: str | None, width: int = 300, height: int = 200, file_format: str = "jpg") -> str | None:
    """
    Build a poster-frame URL for a Cloudinary video.

    ``.../video/upload/v123/folder/clip.mp4`` becomes
    ``.../video/upload/c_thumb,w_300,h_200/v123/folder/clip.jpg``.

    Returns:
        Thumbnail URL, or None for URLs not served by Cloudinary
    """
    if not url or "cloudinary.com" not in url:
        return None

    parts = urlsplit(url)
    segments = parts.path.split("/")
    if "upload" not in segments:
        return None

    upload_index = segments.index("upload")
    file_path = "/".join(segments[upload_index + 1 :])
    stem, dot, _ = file_path.rpartition(".")
    if not dot:
        stem = file_path

    transformation = f"c_thumb,w_{width},h_{height}"
    path = "/".join([*segments[: upload_index + 1], transformation, f"{stem}.{file_format}"])
    return urlunsplit((parts.scheme, parts.netloc, path, "", ""))


def get_optimized_image_url(
    cloud_name: str,
    public_id: str,
    width: int | str = "auto",
    height: int | str = "auto",
    quality: str = "auto",
    file_format: str = "auto",
) -> str:
    """Delivery URL for an image with automatic quality and format selection."""
    return (
        f"https://res.cloudinary.com/{cloud_name}/image/upload/"
        f"w_{width},h_{height},q_{quality},f_{file_format}/{public_id}"
    )


def get_media_thumbnail(media: MediaItem | None, width: int = 300, height: int = 200) -> str | None:
    """
    Pick the URL to show in a grid tile.

    Images are shown as-is; videos use a generated poster frame.
    """
    if media is None or not media.url:
        return None

    if is_video(media.url, media.media_type):
        return generate_video_thumbnail(media.url, width=width, height=height)

    return media.url
