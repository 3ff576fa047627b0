"""Media validation and image compression for uploads."""

import base64
import io
import mimetypes
import os
import time
from pathlib import Path

from PIL import Image, ImageOps, UnidentifiedImageError

from ..logging_config import get_logger, log_performance
from ..models.creation import MediaType
from ..ui.handlers.error import ValidationError

logger = get_logger(__name__)

MB = 1024 * 1024


class ImageProcessor:
    """Validates selected media and shrinks images before upload."""

    IMAGE_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/webp", "image/gif"}
    VIDEO_TYPES = {"video/mp4", "video/quicktime", "video/x-msvideo", "video/webm", "video/x-m4v"}

    # Extension fallback when the browser reports no MIME type
    EXTENSION_TYPES = {
        ".jpg": "image/jpeg",
        ".jpeg": "image/jpeg",
        ".png": "image/png",
        ".webp": "image/webp",
        ".gif": "image/gif",
        ".mp4": "video/mp4",
        ".mov": "video/quicktime",
        ".avi": "video/x-msvideo",
        ".webm": "video/webm",
        ".m4v": "video/x-m4v",
    }

    def __init__(self) -> None:
        """Initialize limits, each overridable through the environment."""
        self.MAX_IMAGE_SIZE = int(os.getenv("MAX_IMAGE_SIZE", 10 * MB))
        self.MAX_VIDEO_SIZE = int(os.getenv("MAX_VIDEO_SIZE", 50 * MB))
        self.MAX_FILES = int(os.getenv("MAX_FILES", 10))

        # Compression settings
        self.MAX_DIMENSION = int(os.getenv("COMPRESS_MAX_DIMENSION", 1200))
        self.JPEG_QUALITY = int(os.getenv("COMPRESS_QUALITY", 80))

    def detect_content_type(self, filename: str, declared: str | None = None) -> str | None:
        """
        Resolve a file's MIME type, preferring the one the browser declared.

        Returns:
            Lowercase MIME type, or None if it cannot be determined
        """
        if declared:
            return declared.lower()

        extension = Path(filename).suffix.lower()
        if extension in self.EXTENSION_TYPES:
            return self.EXTENSION_TYPES[extension]

        guessed, _ = mimetypes.guess_type(filename)
        return guessed

    def media_type_for(self, content_type: str | None) -> MediaType | None:
        """Map a MIME type onto a supported media type."""
        if content_type in self.IMAGE_TYPES:
            return MediaType.IMAGE
        if content_type in self.VIDEO_TYPES:
            return MediaType.VIDEO
        return None

    def max_size_for(self, media_type: MediaType | None) -> int:
        return self.MAX_VIDEO_SIZE if media_type == MediaType.VIDEO else self.MAX_IMAGE_SIZE

    def check_format(self, filename: str, content_type: str | None) -> MediaType:
        """
        Raises:
            ValidationError: If the MIME type is neither a supported image nor video
        """
        media_type = self.media_type_for(content_type)
        if media_type is None:
            raise ValidationError(
                f"{filename}: Unsupported format. Please use JPG, PNG, WebP, GIF, MP4, MOV, AVI, WebM or M4V.",
                code="unsupported_format",
                details={"filename": filename, "content_type": content_type},
            )
        return media_type

    def check_size(self, filename: str, file_size: int, media_type: MediaType | None) -> None:
        """
        Raises:
            ValidationError: If the file is empty or larger than its media type allows
        """
        if file_size <= 0:
            raise ValidationError(
                f"{filename}: File is empty.", code="file_empty", details={"filename": filename, "file_size": file_size}
            )

        max_size = self.max_size_for(media_type)
        if file_size > max_size:
            size_mb = file_size / MB
            max_mb = max_size / MB
            raise ValidationError(
                f"{filename}: File too large ({size_mb:.1f}MB). Maximum size is {max_mb:.0f}MB.",
                code="file_too_large",
                details={"filename": filename, "file_size": file_size, "max_size": max_size},
            )

    def validate_file(self, filename: str, file_size: int, content_type: str | None) -> list[ValidationError]:
        """
        Run every check against one file.

        A file can fail both checks; an unsupported file is held to the image limit.

        Returns:
            list: Validation errors, empty when the file is acceptable
        """
        errors: list[ValidationError] = []
        media_type = None

        try:
            media_type = self.check_format(filename, content_type)
        except ValidationError as e:
            errors.append(e)

        try:
            self.check_size(filename, file_size, media_type)
        except ValidationError as e:
            errors.append(e)

        return errors

    def compress_image(self, image_data: bytes) -> tuple[bytes, int, int]:
        """
        Shrink an image to fit within ``MAX_DIMENSION`` and re-encode as JPEG.

        Images already within bounds are re-encoded but never enlarged.

        Returns:
            tuple: (jpeg_bytes, width, height)

        Raises:
            ValidationError: If the data is not a decodable image
        """
        start_time = time.perf_counter()

        try:
            with Image.open(io.BytesIO(image_data)) as image:
                image = ImageOps.exif_transpose(image)
                if image.mode not in ("RGB", "L"):
                    image = image.convert("RGB")

                image.thumbnail((self.MAX_DIMENSION, self.MAX_DIMENSION), Image.Resampling.LANCZOS)

                buffer = io.BytesIO()
                image.save(buffer, format="JPEG", quality=self.JPEG_QUALITY, optimize=True)
                compressed = buffer.getvalue()
                width, height = image.size
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
            raise ValidationError(
                f"Image could not be decoded: {e}", code="image_decode_failed", original_exception=e
            ) from e

        log_performance(
            "compress_image",
            time.perf_counter() - start_time,
            original_file_size=len(image_data),
            compressed_file_size=len(compressed),
            width=width,
            height=height,
        )
        return compressed, width, height

    @staticmethod
    def to_data_uri(data: bytes, content_type: str) -> str:
        """Embed file bytes as a base64 data URI."""
        return f"data:{content_type};base64,{base64.b64encode(data).decode('ascii')}"


def get_image_processor() -> ImageProcessor:
    """Get an image processor configured from the current environment."""
    return ImageProcessor()
