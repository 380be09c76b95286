import sys

import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from src.api.router import router
from src.config import Settings, get_settings
from src.core.exceptions import register_exception_handlers
from src.core.logging import configure_logging
from src.core.middleware import BodySizeLimitMiddleware
from src.services.storage import ObjectStorage, build_storage

logger = structlog.get_logger()


def create_app(settings: Settings | None = None, storage: ObjectStorage | None = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(title=settings.app_name, debug=settings.debug)
    app.state.settings = settings
    app.state.storage = storage if storage is not None else build_storage(settings)

    app.add_middleware(BodySizeLimitMiddleware, max_body_bytes=settings.max_body_bytes)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    app.include_router(router)
    return app


def run() -> None:
    try:
        settings = get_settings()
    except ValidationError as e:
        configure_logging()
        logger.error("invalid_configuration", errors=e.errors(include_url=False, include_input=False))
        sys.exit(1)

    configure_logging(settings.log_level, json=not settings.debug)
    app = create_app(settings)
    logger.info("upload_service_starting", host=settings.host, port=settings.port, bucket=settings.bucket)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level)


if __name__ == "__main__":
    run()
