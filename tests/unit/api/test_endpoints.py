"""
Unit tests for the HTTP endpoints.
"""

from unittest.mock import MagicMock, patch

import pytest

from legoworld.api.endpoints import create_app
from legoworld.ui.handlers.error import MediaHostError


@pytest.fixture
def client():
    app = create_app()
    app.config["TESTING"] = True
    return app.test_client()


@pytest.fixture
def configured_env(monkeypatch):
    monkeypatch.setenv("CLOUDINARY_CLOUD_NAME", "demo-cloud")
    monkeypatch.setenv("CLOUDINARY_API_KEY", "123456")
    monkeypatch.setenv("CLOUDINARY_API_SECRET", "shh")


class TestCloudinarySearch:
    """Test cases for /api/cloudinary-search."""

    def test_options(self, client):
        response = client.options("/api/cloudinary-search")

        assert response.status_code == 200
        assert response.data == b""
        assert response.headers["Access-Control-Allow-Origin"] == "*"

    @pytest.mark.parametrize("method", ["post", "put", "delete"])
    def test_other_methods_not_allowed(self, client, method):
        response = getattr(client, method)("/api/cloudinary-search")

        assert response.status_code == 405
        assert response.get_json() == {"error": "Method not allowed"}
        assert response.headers["Access-Control-Allow-Methods"] == "GET, POST, OPTIONS"

    def test_missing_credentials(self, client):
        response = client.get("/api/cloudinary-search")

        assert response.status_code == 500
        assert response.get_json() == {"error": "Cloudinary credentials not configured"}
        assert response.headers["Access-Control-Allow-Headers"] == "Content-Type"

    @pytest.mark.usefixtures("configured_env")
    @patch("legoworld.api.endpoints.get_media_host_client")
    def test_success(self, mock_get_client, client, make_creation):
        mock_get_client.return_value = MagicMock(can_search=True)
        mock_get_client.return_value.search_creations.return_value = [make_creation(creation_id="1", photo_count=1)]

        response = client.get("/api/cloudinary-search")

        assert response.status_code == 200
        creations = response.get_json()["creations"]
        assert creations[0]["id"] == "1"
        assert creations[0]["dateAdded"] == "2024-01-01T10:00:00+00:00"
        assert creations[0]["photos"][0]["publicId"] == "lego-creations/1-photo-0"

    @pytest.mark.usefixtures("configured_env")
    @patch("legoworld.api.endpoints.get_media_host_client")
    def test_upstream_error(self, mock_get_client, client):
        mock_get_client.return_value = MagicMock(can_search=True)
        mock_get_client.return_value.search_creations.side_effect = MediaHostError(
            "Cloudinary API error", status_code=401, details={"details": "Invalid signature"}
        )

        response = client.get("/api/cloudinary-search")

        assert response.status_code == 401
        assert response.get_json() == {"error": "Cloudinary API error", "status": 401, "details": "Invalid signature"}

    @pytest.mark.usefixtures("configured_env")
    @patch("legoworld.api.endpoints.get_media_host_client")
    def test_unexpected_error(self, mock_get_client, client):
        mock_get_client.return_value = MagicMock(can_search=True)
        mock_get_client.return_value.search_creations.side_effect = RuntimeError("boom")

        response = client.get("/api/cloudinary-search")

        assert response.status_code == 500
        assert response.get_json() == {"error": "Internal server error", "details": "boom"}

    @pytest.mark.usefixtures("configured_env")
    def test_end_to_end_with_list_api(self, client):
        payload = {
            "resources": [
                {
                    "public_id": "lego-creations/171234-a",
                    "version": 9,
                    "format": "jpg",
                    "created_at": "2024-01-01T00:00:00Z",
                    "tags": ["lego-creations", "creation-171234"],
                    "context": {"custom": {"creationName": "Castle"}},
                }
            ]
        }
        with patch("legoworld.services.media_host.requests.Session") as mock_session_class:
            mock_session_class.return_value.get.return_value = MagicMock(ok=True, json=MagicMock(return_value=payload))

            response = client.get("/api/cloudinary-search")

        assert response.status_code == 200
        creation = response.get_json()["creations"][0]
        assert creation["name"] == "Castle"
        assert creation["photos"][0]["url"] == (
            "https://res.cloudinary.com/demo-cloud/image/upload/v9/lego-creations/171234-a.jpg"
        )


class TestDebugEnv:
    """Test cases for /api/debug-env."""

    def test_missing(self, client):
        response = client.get("/api/debug-env")

        assert response.get_json() == {
            "hasCloudName": False,
            "hasApiKey": False,
            "hasApiSecret": False,
            "cloudName": "missing",
            "apiKey": "missing",
            "apiSecret": "missing",
        }

    @pytest.mark.usefixtures("configured_env")
    def test_masked(self, client):
        response = client.get("/api/debug-env")

        assert response.status_code == 200
        assert response.headers["Access-Control-Allow-Origin"] == "*"
        assert response.get_json() == {
            "hasCloudName": True,
            "hasApiKey": True,
            "hasApiSecret": True,
            "cloudName": "dem***",
            "apiKey": "123***",
            "apiSecret": "***",
        }
