import base64
import re
from dataclasses import dataclass

import structlog

from src.services.storage import ObjectStorage

logger = structlog.get_logger()

DATA_URI_PREFIX = "data:image/"
DEFAULT_CONTENT_TYPE = "image/jpeg"

_MIME_RE = re.compile(r"data:(.*?);base64")


@dataclass(frozen=True)
class ParsedUpload:
    object_key: str
    content_type: str
    payload: str | None


def is_image_data_uri(value: object) -> bool:
    return isinstance(value, str) and value.startswith(DATA_URI_PREFIX)


def normalize_object_key(path: str) -> str:
    return path.lstrip("/")


def extract_content_type(header: str) -> str:
    match = _MIME_RE.search(header)
    if match and match.group(1):
        return match.group(1)
    return DEFAULT_CONTENT_TYPE


def parse_upload(object_key: str, data_url: str) -> ParsedUpload:
    header, sep, payload = data_url.partition(",")
    return ParsedUpload(
        object_key=object_key,
        content_type=extract_content_type(header),
        payload=payload if sep else None,
    )


def decode_payload(payload: str | None) -> bytes:
    if payload is None:
        raise ValueError("data URI has no payload segment")
    return base64.b64decode(payload)


def public_object_path(bucket: str, object_key: str) -> str:
    return f"/{bucket}/{object_key}"


def store_upload(storage: ObjectStorage, upload: ParsedUpload) -> str | None:
    """Returns the public object path, or None when decoding or the write fails."""
    try:
        data = decode_payload(upload.payload)
        storage.write_object(upload.object_key, data, upload.content_type)
    except Exception as e:
        logger.error(
            "upload_failed",
            bucket=storage.bucket,
            key=upload.object_key,
            error=str(e),
            exc_info=True,
        )
        return None

    try:
        storage.make_public(upload.object_key)
    except Exception as e:
        logger.warning("make_public_failed", bucket=storage.bucket, key=upload.object_key, error=str(e))

    logger.info(
        "upload_stored",
        bucket=storage.bucket,
        key=upload.object_key,
        content_type=upload.content_type,
        size=len(data),
    )
    return public_object_path(storage.bucket, upload.object_key)
