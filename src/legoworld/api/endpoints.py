"""
HTTP endpoints served next to the Streamlit app.

``/api/cloudinary-search`` rebuilds the creation list straight from the media
host, for recovery when the database is gone. ``/api/debug-env`` reports
which media host credentials are present, masking their values.
"""

from typing import Any

from flask import Blueprint, Flask, Response, jsonify, request

from legoworld.config import get_cloudinary_api_key, get_cloudinary_api_secret, get_cloudinary_cloud_name
from legoworld.logging_config import configure_structured_logging, get_logger
from legoworld.services.media_host import MediaHostClient, get_media_host_client
from legoworld.ui.handlers.error import ConfigError, MediaHostError

logger = get_logger(__name__)

api = Blueprint("api", __name__, url_prefix="/api")

ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def _mask(value: str | None) -> str:
    return f"{value[:3]}***" if value else "missing"


@api.after_request
def add_cors_headers(response: Response) -> Response:
    response.headers["Access-Control-Allow-Origin"] = "*"
    response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
    response.headers["Access-Control-Allow-Headers"] = "Content-Type"
    return response


@api.route("/cloudinary-search", methods=ALL_METHODS)
def cloudinary_search() -> Any:
    """
    Return every creation found on the media host.

    Responses:
        200 ``{"creations": [...]}``
        405 for anything but GET and OPTIONS
        500 when credentials are missing or something unexpected fails
        upstream status with ``{"error": "Cloudinary API error", ...}`` when the host fails
    """
    if request.method == "OPTIONS":
        return "", 200

    if request.method != "GET":
        return jsonify({"error": "Method not allowed"}), 405

    client: MediaHostClient = get_media_host_client()
    if not client.can_search:
        return jsonify({"error": "Cloudinary credentials not configured"}), 500

    try:
        creations = client.search_creations()
    except ConfigError:
        return jsonify({"error": "Cloudinary credentials not configured"}), 500
    except MediaHostError as e:
        return (
            jsonify({"error": "Cloudinary API error", "status": e.status_code, "details": e.details.get("details", str(e))}),
            e.status_code,
        )
    except Exception as e:
        logger.error("cloudinary_search_failed", error=str(e))
        return jsonify({"error": "Internal server error", "details": str(e)}), 500

    logger.info("cloudinary_search_served", creations=len(creations))
    return jsonify({"creations": [creation.to_dict() for creation in creations]})


@api.route("/debug-env", methods=["GET"])
def debug_env() -> Any:
    """Report which media host credentials are configured."""
    cloud_name = get_cloudinary_cloud_name()
    api_key = get_cloudinary_api_key()
    api_secret = get_cloudinary_api_secret()

    return jsonify(
        {
            "hasCloudName": bool(cloud_name),
            "hasApiKey": bool(api_key),
            "hasApiSecret": bool(api_secret),
            "cloudName": _mask(cloud_name),
            "apiKey": _mask(api_key),
            "apiSecret": "***" if api_secret else "missing",
        }
    )


def create_app() -> Flask:
    """Build the Flask app serving the API blueprint."""
    configure_structured_logging()
    app = Flask(__name__)
    app.register_blueprint(api)
    return app
