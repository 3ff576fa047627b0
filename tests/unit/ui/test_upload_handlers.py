"""Tests for the upload orchestrator."""

import io
import threading
from unittest.mock import MagicMock, patch

import pytest
from PIL import Image

from legoworld.models.creation import MediaType
from legoworld.services.image_processor import MB
from legoworld.services.media_host import MediaHostClient, UploadMetadata, UploadResult
from legoworld.services.sync import SyncService
from legoworld.ui.handlers.error import ConfigError, PersistenceError, UploadError, ValidationError
from legoworld.ui.handlers.upload import (
    add_media_to_creation,
    clear_upload_session_state,
    submit_creation,
    upload_media_batch,
    validate_uploaded_files,
)


def make_uploaded_file(name, data, content_type=None):
    uploaded_file = io.BytesIO(data)
    uploaded_file.name = name
    if content_type:
        uploaded_file.type = content_type
    return uploaded_file


def make_file_info(filename, data, media_type=MediaType.IMAGE, content_type="image/jpeg"):
    return {"filename": filename, "data": data, "size": len(data), "content_type": content_type, "media_type": media_type}


class FakeMediaHost:
    """Media host that fails for chosen filenames."""

    def __init__(self, failing=()):
        self.failing = set(failing)
        self.calls = []
        self.lock = threading.Lock()

    def upload(self, file_data, filename, metadata, content_type=None, media_type=MediaType.IMAGE):
        with self.lock:
            self.calls.append((filename, metadata.creation_id, content_type))
        if filename in self.failing:
            raise UploadError(f"{filename} rejected")
        return UploadResult(
            url=f"https://res.cloudinary.com/demo/{media_type.value}/upload/{metadata.creation_id}-{filename}",
            public_id=f"lego-creations/{metadata.creation_id}-{filename}",
            width=10,
            height=10,
            media_type=media_type,
        )


class TestValidateUploadedFiles:
    """Test file validation before upload."""

    def test_no_files(self):
        assert validate_uploaded_files([]) == ([], [])

    def test_two_photos_and_oversized_video(self, sample_jpeg_bytes):
        files = [
            make_uploaded_file("a.jpg", sample_jpeg_bytes()),
            make_uploaded_file("b.jpg", sample_jpeg_bytes()),
            make_uploaded_file("clip.mp4", b"\0" * (60 * MB), "video/mp4"),
        ]

        valid_files, errors = validate_uploaded_files(files)

        assert [f["filename"] for f in valid_files] == ["a.jpg", "b.jpg"]
        assert len(errors) == 1
        assert errors[0]["filename"] == "clip.mp4"
        assert errors[0]["error"] == "file_too_large"
        assert "Maximum size is 50MB" in errors[0]["details"]

    def test_valid_file_shape(self, sample_jpeg_bytes):
        data = sample_jpeg_bytes()

        valid_files, _ = validate_uploaded_files([make_uploaded_file("A.JPG", data)])

        file_info = valid_files[0]
        assert file_info["data"] == data
        assert file_info["size"] == len(data)
        assert file_info["content_type"] == "image/jpeg"
        assert file_info["media_type"] == MediaType.IMAGE

    def test_too_many_files(self, sample_jpeg_bytes):
        files = [make_uploaded_file(f"{i}.jpg", sample_jpeg_bytes()) for i in range(3)]

        valid_files, errors = validate_uploaded_files(files, already_selected=8)

        assert valid_files == []
        assert len(errors) == 1
        assert errors[0]["error"] == "Too many files"

    def test_unsupported_format(self):
        valid_files, errors = validate_uploaded_files([make_uploaded_file("notes.txt", b"hello")])

        assert valid_files == []
        assert [e["error"] for e in errors] == ["unsupported_format"]


class TestUploadMediaBatch:
    """Test concurrent uploads with per-file fallback."""

    def setup_method(self):
        """Set up test fixtures."""
        self.metadata = UploadMetadata(creation_id="171234", creation_name="Castle", date_added="2024-01-01T00:00:00Z")

    def test_results_in_selection_order(self, sample_jpeg_bytes):
        files = [make_file_info(f"{i}.jpg", sample_jpeg_bytes()) for i in range(5)]

        results = upload_media_batch(files, self.metadata, FakeMediaHost())

        assert [r["filename"] for r in results] == [f"{i}.jpg" for i in range(5)]
        assert not any(r["is_local"] for r in results)

    def test_one_failure_falls_back_to_data_uri(self, sample_jpeg_bytes):
        files = [make_file_info(f"{i}.jpg", sample_jpeg_bytes()) for i in range(3)]

        results = upload_media_batch(files, self.metadata, FakeMediaHost(failing={"1.jpg"}))

        assert [r["is_local"] for r in results] == [False, True, False]
        assert results[1]["media_item"].url.startswith("data:image/jpeg;base64,")
        assert results[0]["media_item"].url.startswith("https://")
        assert results[2]["media_item"].public_id == "lego-creations/171234-2.jpg"

    def test_unconfigured_host_inlines_everything(self, sample_jpeg_bytes):
        host = MagicMock()
        host.upload.side_effect = ConfigError("Cloudinary configuration missing")

        results = upload_media_batch([make_file_info("a.jpg", sample_jpeg_bytes())], self.metadata, host)

        assert results[0]["is_local"]
        assert results[0]["media_item"].is_inline

    def test_images_are_compressed_videos_are_not(self, sample_jpeg_bytes):
        host = FakeMediaHost()
        files = [
            make_file_info("big.png", sample_jpeg_bytes(2400, 1800), content_type="image/png"),
            make_file_info("clip.mp4", b"video-bytes", media_type=MediaType.VIDEO, content_type="video/mp4"),
        ]

        results = upload_media_batch(files, self.metadata, host)

        assert sorted(call[2] for call in host.calls) == ["image/jpeg", "video/mp4"]
        assert results[1]["media_item"].is_video

    def test_undecodable_image_is_uploaded_as_is(self):
        host = FakeMediaHost()

        upload_media_batch([make_file_info("broken.jpg", b"garbage")], self.metadata, host)

        assert host.calls == [("broken.jpg", "171234", "image/jpeg")]

    def test_oversized_image_does_not_abort_batch(self, monkeypatch, sample_jpeg_bytes):
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)
        host = FakeMediaHost()
        files = [
            make_file_info("huge.png", sample_jpeg_bytes(100, 100), content_type="image/png"),
            make_file_info("small.jpg", sample_jpeg_bytes(20, 20)),
        ]

        results = upload_media_batch(files, self.metadata, host)

        assert [r["filename"] for r in results] == ["huge.png", "small.jpg"]
        assert ("huge.png", "171234", "image/png") in host.calls

    def test_progress_callback(self, sample_jpeg_bytes):
        progress = MagicMock()
        files = [make_file_info(f"{i}.jpg", sample_jpeg_bytes()) for i in range(2)]

        upload_media_batch(files, self.metadata, FakeMediaHost(), progress_callback=progress)

        assert [c.args[1:] for c in progress.call_args_list] == [(1, 2), (2, 2)]

    def test_empty_batch(self):
        assert upload_media_batch([], self.metadata, FakeMediaHost()) == []


class TestSubmitCreation:
    """Test creating a creation from an upload."""

    def test_submit_saves_creation(self, sample_jpeg_bytes):
        sync_service = MagicMock(spec=SyncService)
        files = [make_file_info(f"{i}.jpg", sample_jpeg_bytes()) for i in range(3)]

        result = submit_creation(
            "  Castle ", files, sync_service=sync_service, media_host=FakeMediaHost(failing={"2.jpg"}), user_id="admin"
        )

        creation = result["creation"]
        assert creation.name == "Castle"
        assert creation.media_count == 3
        assert result["hosted_count"] == 2
        assert result["inline_count"] == 1
        assert all(photo.url.startswith(("https://", "data:")) for photo in creation.photos)
        sync_service.save.assert_called_once_with(creation, user_id="admin")

    def test_media_tagged_with_creation_id(self, sample_jpeg_bytes):
        host = FakeMediaHost()

        result = submit_creation("Castle", [make_file_info("a.jpg", sample_jpeg_bytes())], MagicMock(), host)

        assert host.calls[0][1] == result["creation"].id

    def test_blank_name(self, sample_jpeg_bytes):
        with pytest.raises(ValidationError, match="name is required"):
            submit_creation("   ", [make_file_info("a.jpg", sample_jpeg_bytes())], MagicMock(), FakeMediaHost())

    def test_no_files(self):
        with pytest.raises(ValidationError, match="No files selected"):
            submit_creation("Castle", [], MagicMock(), FakeMediaHost())

    def test_persistence_error_propagates(self, sample_jpeg_bytes):
        sync_service = MagicMock()
        sync_service.save.side_effect = PersistenceError("store down")

        with pytest.raises(PersistenceError):
            submit_creation("Castle", [make_file_info("a.jpg", sample_jpeg_bytes())], sync_service, FakeMediaHost())

    def test_end_to_end_through_sync_service(self, sample_jpeg_bytes, memory_cache):
        store = MagicMock()
        store.fetch_all.side_effect = lambda: [store.save.call_args[0][0]]
        sync_service = SyncService(store, memory_cache)

        result = submit_creation("Castle", [make_file_info("a.jpg", sample_jpeg_bytes())], sync_service, FakeMediaHost())

        assert sync_service.fetch_all() == [result["creation"]]
        assert [creation.id for creation in memory_cache.get()] == [result["creation"].id]


class ExistingAssetSession:
    """HTTP session that returns the stored asset when a public id repeats."""

    def __init__(self):
        self.public_ids = []
        self.lock = threading.Lock()

    def post(self, url, data=None, files=None):
        public_id = f"lego-creations/{data['public_id']}"
        with self.lock:
            self.public_ids.append(public_id)
        response = MagicMock()
        response.ok = True
        response.json.return_value = {
            "secure_url": f"https://res.cloudinary.com/demo/image/upload/{public_id}.jpg",
            "public_id": public_id,
        }
        return response


class TestSubmitCreationWithMediaHost:
    """Test a batch going through the real media host client."""

    def test_same_stem_files_all_kept(self, sample_jpeg_bytes):
        session = ExistingAssetSession()
        media_host = MediaHostClient(cloud_name="demo", upload_preset="preset", session=session)
        filenames = ["castle.jpg", "castle.png", "城堡.jpg", "塔.jpg"]
        files = [make_file_info(filename, sample_jpeg_bytes()) for filename in filenames]

        result = submit_creation("Castle", files, MagicMock(), media_host)

        assert len(set(session.public_ids)) == 4
        assert result["creation"].media_count == 4
        assert result["hosted_count"] == 4


class TestAddMediaToCreation:
    """Test adding media to an existing creation."""

    def test_add_media(self, make_creation, sample_jpeg_bytes):
        creation = make_creation(creation_id="42", photo_count=1)
        sync_service = MagicMock()
        sync_service.add_media.side_effect = lambda creation_id, items, user_id=None: items
        host = FakeMediaHost()

        result = add_media_to_creation(creation, [make_file_info("new.jpg", sample_jpeg_bytes())], sync_service, host)

        assert len(result["added"]) == 1
        assert creation.media_count == 2
        assert host.calls[0][1] == "42"
        sync_service.add_media.assert_called_once()

    def test_no_files(self, make_creation):
        with pytest.raises(ValidationError):
            add_media_to_creation(make_creation(), [], MagicMock(), FakeMediaHost())


class TestSessionStateManagement:
    """Test session state management functions."""

    @patch("streamlit.session_state", new_callable=dict)
    def test_clear_upload_session_state(self, mock_session_state):
        mock_session_state.update(
            {
                "valid_files": [],
                "validation_errors": [],
                "last_upload_result": {"name": "Castle"},
                "uploader_generation": 2,
                "other_key": "should_remain",
            }
        )

        clear_upload_session_state()

        assert "valid_files" not in mock_session_state
        assert "validation_errors" not in mock_session_state
        assert "last_upload_result" not in mock_session_state
        assert mock_session_state["uploader_generation"] == 3
        assert mock_session_state["other_key"] == "should_remain"
