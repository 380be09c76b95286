from dataclasses import dataclass, field
from typing import Protocol

import boto3
import structlog
from botocore.config import Config
from google.cloud import storage as gcs

from src.config import Settings

logger = structlog.get_logger()

# google-cloud-storage switches to a resumable session above this size.
GCS_MULTIPART_MAX_BYTES = 8 * 1024 * 1024


class ObjectStorage(Protocol):
    bucket: str

    def write_object(self, key: str, data: bytes, content_type: str) -> None:
        ...

    def make_public(self, key: str) -> None:
        ...


class GcsObjectStorage:
    """Google Cloud Storage backend using Application Default Credentials."""

    def __init__(self, bucket: str, client: gcs.Client | None = None) -> None:
        self.bucket = bucket
        self._client = client or gcs.Client()
        self._bucket = self._client.bucket(bucket)

    def write_object(self, key: str, data: bytes, content_type: str) -> None:
        if len(data) > GCS_MULTIPART_MAX_BYTES:
            raise ValueError(f"object of {len(data)} bytes exceeds the multipart upload limit")
        # checksum=None skips upload-time integrity checks.
        blob = self._bucket.blob(key)
        blob.upload_from_string(data, content_type=content_type, checksum=None)

    def make_public(self, key: str) -> None:
        self._bucket.blob(key).make_public()


class S3ObjectStorage:
    """S3 or S3-compatible backend (R2, MinIO, COS)."""

    def __init__(
        self,
        bucket: str,
        endpoint_url: str | None = None,
        region: str | None = None,
        client=None,
    ) -> None:
        self.bucket = bucket
        self._client = client or boto3.client(
            "s3",
            endpoint_url=endpoint_url,
            region_name=region,
            config=Config(signature_version="s3v4"),
        )

    def write_object(self, key: str, data: bytes, content_type: str) -> None:
        self._client.put_object(Bucket=self.bucket, Key=key, Body=data, ContentType=content_type)

    def make_public(self, key: str) -> None:
        self._client.put_object_acl(Bucket=self.bucket, Key=key, ACL="public-read")


@dataclass
class InMemoryObjectStorage:
    """In-process backend for local runs and tests."""

    bucket: str = "local-bucket"
    objects: dict[str, tuple[bytes, str]] = field(default_factory=dict)
    public_keys: set[str] = field(default_factory=set)
    fail_writes: bool = False
    fail_make_public: bool = False

    def write_object(self, key: str, data: bytes, content_type: str) -> None:
        if self.fail_writes:
            raise RuntimeError(f"simulated write failure for {key}")
        self.objects[key] = (data, content_type)

    def make_public(self, key: str) -> None:
        if self.fail_make_public:
            raise RuntimeError(f"simulated acl failure for {key}")
        if key not in self.objects:
            raise KeyError(key)
        self.public_keys.add(key)


def build_storage(settings: Settings) -> ObjectStorage:
    match settings.storage_backend:
        case "gcs":
            storage: ObjectStorage = GcsObjectStorage(settings.bucket)
        case "s3":
            storage = S3ObjectStorage(
                settings.bucket,
                endpoint_url=settings.s3_endpoint_url,
                region=settings.s3_region,
            )
        case "memory":
            storage = InMemoryObjectStorage(bucket=settings.bucket)
        case other:
            raise ValueError(f"Unknown storage backend: {other}")
    logger.info("storage_configured", backend=settings.storage_backend, bucket=settings.bucket)
    return storage
