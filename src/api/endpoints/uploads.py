import asyncio

import structlog
from fastapi import APIRouter, Depends

from src.api.dependencies import get_storage
from src.core.exceptions import InvalidPayload, UploadFailed
from src.schemas.uploads import UploadRequest, UploadResponse
from src.services import upload_relay
from src.services.storage import ObjectStorage

logger = structlog.get_logger()

router = APIRouter()


def _validate_upload(body: UploadRequest) -> tuple[str, str]:
    if not body.path or not body.data_url:
        raise InvalidPayload()
    if not upload_relay.is_image_data_uri(body.data_url):
        raise InvalidPayload()
    object_key = upload_relay.normalize_object_key(body.path)
    if not object_key:
        raise InvalidPayload()
    return object_key, body.data_url


@router.post("/upload", response_model=UploadResponse)
async def upload(body: UploadRequest, storage: ObjectStorage = Depends(get_storage)) -> UploadResponse:
    try:
        object_key, data_url = _validate_upload(body)
    except InvalidPayload:
        logger.warning("invalid_payload", has_path=bool(body.path), has_data_url=bool(body.data_url))
        raise

    parsed = upload_relay.parse_upload(object_key, data_url)
    object_path = await asyncio.to_thread(upload_relay.store_upload, storage, parsed)
    if not object_path:
        raise UploadFailed()

    return UploadResponse(object_path=object_path)
