import base64
from unittest.mock import MagicMock

import pytest
from structlog.testing import capture_logs

from src.services import upload_relay
from src.services.storage import GCS_MULTIPART_MAX_BYTES, GcsObjectStorage, InMemoryObjectStorage


class TestIsImageDataUri:
    def test_image_data_uri(self) -> None:
        assert upload_relay.is_image_data_uri("data:image/png;base64,aGVsbG8=")

    def test_other_mime(self) -> None:
        assert not upload_relay.is_image_data_uri("data:application/pdf;base64,aGVsbG8=")

    def test_not_a_string(self) -> None:
        assert not upload_relay.is_image_data_uri(b"data:image/png;base64,aGVsbG8=")
        assert not upload_relay.is_image_data_uri(None)

    def test_case_sensitive_prefix(self) -> None:
        assert not upload_relay.is_image_data_uri("DATA:IMAGE/PNG;base64,aGVsbG8=")


class TestNormalizeObjectKey:
    def test_strips_leading_slashes(self) -> None:
        assert upload_relay.normalize_object_key("/a/b.png") == "a/b.png"
        assert upload_relay.normalize_object_key("///a/b.png") == "a/b.png"

    def test_keeps_inner_and_trailing_slashes(self) -> None:
        assert upload_relay.normalize_object_key("a//b/") == "a//b/"

    def test_only_slashes_becomes_empty(self) -> None:
        assert upload_relay.normalize_object_key("//") == ""


class TestExtractContentType:
    def test_png(self) -> None:
        assert upload_relay.extract_content_type("data:image/png;base64") == "image/png"

    def test_subtype_with_plus(self) -> None:
        assert upload_relay.extract_content_type("data:image/svg+xml;base64") == "image/svg+xml"

    def test_missing_base64_marker(self) -> None:
        assert upload_relay.extract_content_type("data:image/png") == "image/jpeg"

    def test_empty_mime(self) -> None:
        assert upload_relay.extract_content_type("data:;base64") == "image/jpeg"


class TestParseUpload:
    def test_splits_at_first_comma(self) -> None:
        parsed = upload_relay.parse_upload("k.png", "data:image/png;base64,aGVs,bG8=")
        assert parsed.content_type == "image/png"
        assert parsed.payload == "aGVs,bG8="

    def test_no_comma(self) -> None:
        parsed = upload_relay.parse_upload("k.png", "data:image/png;base64")
        assert parsed.payload is None

    def test_empty_payload(self) -> None:
        parsed = upload_relay.parse_upload("k.png", "data:image/png;base64,")
        assert parsed.payload == ""


class TestDecodePayload:
    def test_decodes(self) -> None:
        assert upload_relay.decode_payload("aGVsbG8=") == b"hello"

    def test_missing_segment(self) -> None:
        with pytest.raises(ValueError):
            upload_relay.decode_payload(None)

    def test_bad_padding(self) -> None:
        with pytest.raises(ValueError):
            upload_relay.decode_payload("abc")


class TestStoreUpload:
    def test_success(self) -> None:
        storage = InMemoryObjectStorage(bucket="my-bucket")
        parsed = upload_relay.parse_upload("photos/x.png", "data:image/png;base64,aGVsbG8=")
        assert upload_relay.store_upload(storage, parsed) == "/my-bucket/photos/x.png"
        assert storage.objects["photos/x.png"] == (b"hello", "image/png")
        assert storage.public_keys == {"photos/x.png"}

    def test_write_failure_returns_none(self) -> None:
        storage = InMemoryObjectStorage(fail_writes=True)
        parsed = upload_relay.parse_upload("x.png", "data:image/png;base64,aGVsbG8=")
        with capture_logs() as logs:
            assert upload_relay.store_upload(storage, parsed) is None
        assert any(log["event"] == "upload_failed" and log["key"] == "x.png" for log in logs)

    def test_decode_failure_skips_write(self) -> None:
        storage = InMemoryObjectStorage()
        parsed = upload_relay.parse_upload("x.png", "data:image/png;base64,abc")
        assert upload_relay.store_upload(storage, parsed) is None
        assert storage.objects == {}

    def test_make_public_failure_logged(self) -> None:
        storage = InMemoryObjectStorage(bucket="b", fail_make_public=True)
        parsed = upload_relay.parse_upload("x.png", "data:image/png;base64,aGVsbG8=")
        with capture_logs() as logs:
            assert upload_relay.store_upload(storage, parsed) == "/b/x.png"
        events = [log["event"] for log in logs]
        assert "make_public_failed" in events
        assert "upload_stored" in events

    def test_empty_payload_writes_empty_object(self) -> None:
        storage = InMemoryObjectStorage(bucket="b")
        parsed = upload_relay.parse_upload("empty.png", "data:image/png;base64,")
        assert upload_relay.store_upload(storage, parsed) == "/b/empty.png"
        assert storage.objects["empty.png"] == (b"", "image/png")

    def test_oversized_gcs_object_fails(self) -> None:
        client = MagicMock()
        backend = GcsObjectStorage("b", client=client)
        payload = base64.b64encode(b"\0" * (GCS_MULTIPART_MAX_BYTES + 1)).decode()
        parsed = upload_relay.parse_upload("big.png", f"data:image/png;base64,{payload}")
        assert upload_relay.store_upload(backend, parsed) is None
        client.bucket.return_value.blob.return_value.upload_from_string.assert_not_called()

    def test_last_write_wins(self) -> None:
        storage = InMemoryObjectStorage(bucket="b")
        first = base64.b64encode(b"first").decode()
        second = base64.b64encode(b"second").decode()
        upload_relay.store_upload(storage, upload_relay.parse_upload("k", f"data:image/png;base64,{first}"))
        upload_relay.store_upload(storage, upload_relay.parse_upload("k", f"data:image/gif;base64,{second}"))
        assert storage.objects["k"] == (b"second", "image/gif")


class TestPublicObjectPath:
    def test_format(self) -> None:
        assert upload_relay.public_object_path("my-bucket", "photos/x.png") == "/my-bucket/photos/x.png"
