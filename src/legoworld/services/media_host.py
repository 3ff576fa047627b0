"""Media host client for Cloudinary uploads and creation recovery."""

import re
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import requests

from ..config import (
    get_cloudinary_api_key,
    get_cloudinary_api_secret,
    get_cloudinary_cloud_name,
    get_cloudinary_upload_preset,
)
from ..logging_config import get_logger
from ..models.creation import Creation, MediaItem, MediaType, sort_newest_first
from ..ui.handlers.error import ConfigError, MediaHostError, UploadError

logger = get_logger(__name__)

MEDIA_FOLDER = "lego-creations"
CREATION_TAG_PREFIX = "creation-"
UNTITLED_CREATION = "Untitled Creation"

_SLUG_PATTERN = re.compile(r"[^a-z0-9]+")
_CREATION_ID_PATTERN = re.compile(r"^(\d+)-")


@dataclass
class UploadMetadata:
    """Creation details attached to every uploaded file."""

    creation_id: str
    creation_name: str = ""
    date_added: str = ""


@dataclass
class UploadResult:
    """Canonical location of an uploaded file."""

    url: str
    public_id: str
    width: int | None = None
    height: int | None = None
    media_type: MediaType = MediaType.IMAGE

    def to_media_item(self, name: str) -> MediaItem:
        return MediaItem(
            url=self.url,
            name=name,
            public_id=self.public_id,
            width=self.width,
            height=self.height,
            media_type=self.media_type,
        )


def slugify(value: str) -> str:
    """Lowercase, dash-separated version of ``value`` safe for a public id."""
    return _SLUG_PATTERN.sub("-", value.lower()).strip("-") or "media"


def build_public_id(creation_id: str, filename: str) -> str:
    """
    Public id (inside the media folder) encoding the creation id and file stem.

    Unsigned uploads never overwrite, so a repeated id would return the asset
    already stored under it. The random suffix keeps every file distinct even
    when stems match or slugify to the same value.
    """
    unique_id = str(uuid.uuid4())[:8]
    return f"{creation_id}-{slugify(Path(filename).stem)}-{unique_id}"


def _escape_context_value(value: str) -> str:
    # Cloudinary context is "key=value|key=value", both separators escape with a backslash
    return value.replace("\\", "\\\\").replace("|", "\\|").replace("=", "\\=")


def build_context(metadata: UploadMetadata) -> str:
    parts = []
    if metadata.creation_name:
        parts.append(f"creationName={_escape_context_value(metadata.creation_name)}")
    if metadata.date_added:
        parts.append(f"dateAdded={_escape_context_value(metadata.date_added)}")
    return "|".join(parts)


def _int_or_none(value: Any, error_class: type[UploadError | MediaHostError] = UploadError) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise error_class(f"Media host returned a non-numeric dimension: {value!r}")
    return int(value)


def parse_upload_response(payload: Any, media_type: MediaType) -> UploadResult:
    """
    Parse an upload response strictly.

    Raises:
        UploadError: If ``secure_url`` or ``public_id`` is missing or not a string
    """
    if not isinstance(payload, dict):
        raise UploadError("Media host returned a non-object upload response")

    url = payload.get("secure_url")
    public_id = payload.get("public_id")
    if not isinstance(url, str) or not url or not isinstance(public_id, str) or not public_id:
        raise UploadError(
            "Media host upload response is missing secure_url or public_id",
            details={"keys": sorted(payload.keys())},
        )

    resource_type = payload.get("resource_type")
    if resource_type in (MediaType.IMAGE.value, MediaType.VIDEO.value):
        media_type = MediaType(resource_type)

    return UploadResult(
        url=url,
        public_id=public_id,
        width=_int_or_none(payload.get("width")),
        height=_int_or_none(payload.get("height")),
        media_type=media_type,
    )


def _resource_context(resource: dict[str, Any]) -> dict[str, Any]:
    context = resource.get("context") or {}
    if not isinstance(context, dict):
        raise MediaHostError("Resource context must be an object", details={"public_id": resource.get("public_id")})
    # The list and admin APIs nest user context under "custom", the search API does not
    custom = context.get("custom")
    return custom if isinstance(custom, dict) else context


def _resource_creation_id(resource: dict[str, Any]) -> str | None:
    tags = resource.get("tags") or []
    if not isinstance(tags, list):
        raise MediaHostError("Resource tags must be a list", details={"public_id": resource.get("public_id")})

    for tag in tags:
        if isinstance(tag, str) and tag.startswith(CREATION_TAG_PREFIX):
            return tag[len(CREATION_TAG_PREFIX) :]

    match = _CREATION_ID_PATTERN.match(resource["public_id"].rsplit("/", 1)[-1])
    return match.group(1) if match else None


def _resource_url(resource: dict[str, Any], cloud_name: str | None) -> str:
    url = resource.get("secure_url")
    if isinstance(url, str) and url:
        return url

    # The list API omits URLs but carries everything needed to build the delivery URL
    version = resource.get("version")
    file_format = resource.get("format")
    if cloud_name and version is not None and isinstance(file_format, str):
        resource_type = resource.get("resource_type", "image")
        return (
            f"https://res.cloudinary.com/{cloud_name}/{resource_type}/upload/"
            f"v{version}/{resource['public_id']}.{file_format}"
        )

    raise MediaHostError("Resource has no secure_url", details={"public_id": resource.get("public_id")})


def parse_search_response(payload: Any, cloud_name: str | None = None) -> list[Creation]:
    """
    Group media host resources into creations.

    Resources are grouped by their ``creation-<id>`` tag, or by the creation
    id encoded in the public id when tags are absent. Resources belonging to
    no creation are skipped.

    Args:
        payload: Decoded JSON body of a list or search response
        cloud_name: Used to build delivery URLs for list API resources

    Returns:
        Creations sorted newest first

    Raises:
        MediaHostError: If the payload or a resource does not have the expected shape
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("resources"), list):
        raise MediaHostError("Media host response has no resources list")

    creations: dict[str, Creation] = {}

    for resource in payload["resources"]:
        if not isinstance(resource, dict) or not isinstance(resource.get("public_id"), str):
            raise MediaHostError("Media host resource has no public_id")

        creation_id = _resource_creation_id(resource)
        if creation_id is None:
            continue

        context = _resource_context(resource)

        if creation_id not in creations:
            date_added = context.get("dateAdded") or resource.get("created_at")
            if not isinstance(date_added, str):
                raise MediaHostError(
                    "Resource has neither a dateAdded context nor created_at",
                    details={"public_id": resource["public_id"]},
                )
            creations[creation_id] = Creation(
                id=creation_id,
                name=context.get("creationName") or UNTITLED_CREATION,
                date_added=date_added,
            )

        media_type = MediaType.VIDEO if resource.get("resource_type") == "video" else MediaType.IMAGE
        creations[creation_id].add_media(
            [
                MediaItem(
                    url=_resource_url(resource, cloud_name),
                    name=resource.get("original_filename") or "photo",
                    public_id=resource["public_id"],
                    width=_int_or_none(resource.get("width"), MediaHostError),
                    height=_int_or_none(resource.get("height"), MediaHostError),
                    media_type=media_type,
                )
            ]
        )

    return sort_newest_first(creations.values())


class MediaHostClient:
    """Client for the Cloudinary upload, list and search APIs."""

    UPLOAD_URL = "https://api.cloudinary.com/v1_1/{cloud_name}/{resource_type}/upload"
    LIST_URL = "https://res.cloudinary.com/{cloud_name}/image/list/{tag}.json"
    SEARCH_URL = "https://api.cloudinary.com/v1_1/{cloud_name}/resources/search"

    def __init__(
        self,
        cloud_name: str | None = None,
        upload_preset: str | None = None,
        api_key: str | None = None,
        api_secret: str | None = None,
        session: requests.Session | None = None,
    ) -> None:
        """
        Initialize the media host client.

        Args:
            cloud_name: Cloudinary cloud name (defaults to CLOUDINARY_CLOUD_NAME)
            upload_preset: Unsigned upload preset (defaults to CLOUDINARY_UPLOAD_PRESET)
            api_key: API key for the search API (defaults to CLOUDINARY_API_KEY)
            api_secret: API secret for the search API (defaults to CLOUDINARY_API_SECRET)
            session: HTTP session, one is created when omitted

        Missing values are not an error here; each operation checks the
        credentials it needs so a partially configured host still uploads.
        """
        self.cloud_name = cloud_name or get_cloudinary_cloud_name()
        self.upload_preset = upload_preset or get_cloudinary_upload_preset()
        self.api_key = api_key or get_cloudinary_api_key()
        self.api_secret = api_secret or get_cloudinary_api_secret()
        self.session = session or requests.Session()

        logger.info(
            "media_host_client_initialized",
            has_cloud_name=bool(self.cloud_name),
            has_upload_preset=bool(self.upload_preset),
            has_search_credentials=bool(self.api_key and self.api_secret),
        )

    @property
    def can_upload(self) -> bool:
        return bool(self.cloud_name and self.upload_preset)

    @property
    def can_search(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)

    def upload(
        self,
        file_data: bytes,
        filename: str,
        metadata: UploadMetadata,
        content_type: str | None = None,
        media_type: MediaType = MediaType.IMAGE,
    ) -> UploadResult:
        """
        Upload one file into the creations folder.

        Args:
            file_data: Raw (possibly compressed) file bytes
            filename: Original filename, used for the public id
            metadata: Creation the file belongs to
            content_type: MIME type sent with the file
            media_type: Selects the image or video upload endpoint

        Returns:
            UploadResult: Canonical URL, public id and dimensions

        Raises:
            ConfigError: If the cloud name or upload preset is missing
            UploadError: If the host is unreachable or rejects the file
        """
        if not self.can_upload:
            raise ConfigError(
                "Cloudinary configuration missing",
                details={"has_cloud_name": bool(self.cloud_name), "has_upload_preset": bool(self.upload_preset)},
            )

        url = self.UPLOAD_URL.format(cloud_name=self.cloud_name, resource_type=media_type.value)
        data = {
            "upload_preset": self.upload_preset,
            "folder": MEDIA_FOLDER,
            "public_id": build_public_id(metadata.creation_id, filename),
            "tags": f"{MEDIA_FOLDER},{CREATION_TAG_PREFIX}{metadata.creation_id}",
        }
        context = build_context(metadata)
        if context:
            data["context"] = context

        files = {"file": (filename, file_data, content_type or "application/octet-stream")}

        try:
            response = self.session.post(url, data=data, files=files)
        except requests.RequestException as e:
            raise UploadError(
                f"Failed to reach media host: {e}",
                details={"filename": filename, "creation_id": metadata.creation_id},
                original_exception=e,
            ) from e

        if not response.ok:
            raise UploadError(
                self._error_message(response, "Upload failed"),
                details={"filename": filename, "status_code": response.status_code},
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise UploadError("Media host returned invalid JSON", details={"filename": filename}) from e

        result = parse_upload_response(payload, media_type)
        logger.info(
            "media_uploaded",
            filename=filename,
            creation_id=metadata.creation_id,
            public_id=result.public_id,
            media_type=result.media_type.value,
            size=len(file_data),
        )
        return result

    def search_creations(self) -> list[Creation]:
        """
        Rebuild creations from the media host alone.

        The public list API is tried first; when it is disabled the
        authenticated search API is used instead.

        Raises:
            ConfigError: If credentials for the search API are missing
            MediaHostError: If the host fails or returns an unexpected shape
        """
        if not self.cloud_name:
            raise ConfigError("Cloudinary cloud name missing")

        list_url = self.LIST_URL.format(cloud_name=self.cloud_name, tag=MEDIA_FOLDER)
        try:
            response = self.session.get(list_url, headers={"Accept": "application/json"})
            if response.ok:
                creations = parse_search_response(response.json(), self.cloud_name)
                logger.info("media_host_list_api_used", creations=len(creations))
                return creations
            logger.info("media_host_list_api_unavailable", status_code=response.status_code)
        except (requests.RequestException, ValueError) as e:
            logger.info("media_host_list_api_unavailable", error=str(e))

        if not self.can_search:
            raise ConfigError("Cloudinary credentials not configured")

        search_url = self.SEARCH_URL.format(cloud_name=self.cloud_name)
        body = {
            "expression": f"folder:{MEDIA_FOLDER}",
            "with_field": ["context", "tags"],
            "max_results": 100,
            "sort_by": [{"created_at": "desc"}],
        }

        try:
            response = self.session.post(search_url, json=body, auth=(self.api_key, self.api_secret))
        except requests.RequestException as e:
            raise MediaHostError(f"Failed to reach media host: {e}", status_code=502, original_exception=e) from e

        if not response.ok:
            raise MediaHostError(
                "Cloudinary API error",
                status_code=response.status_code,
                details={"details": response.text},
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise MediaHostError("Media host returned invalid JSON", status_code=502) from e

        return parse_search_response(payload, self.cloud_name)

    @staticmethod
    def _error_message(response: requests.Response, fallback: str) -> str:
        try:
            error = response.json().get("error") or {}
            return error.get("message") or fallback
        except (ValueError, AttributeError):
            return fallback


_media_host_client: MediaHostClient | None = None


def get_media_host_client() -> MediaHostClient:
    """Get the global media host client."""
    global _media_host_client

    if _media_host_client is None:
        _media_host_client = MediaHostClient()

    return _media_host_client
