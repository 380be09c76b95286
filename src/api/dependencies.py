from fastapi import Request

from src.services.storage import ObjectStorage


def get_storage(request: Request) -> ObjectStorage:
    return request.app.state.storage
