import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = structlog.get_logger()


class AppError(Exception):
    def __init__(self, status_code: int, detail: str) -> None:
        super().__init__(detail)
        self.status_code = status_code
        self.detail = detail


class InvalidPayload(AppError):
    def __init__(self) -> None:
        super().__init__(status_code=400, detail="Invalid payload")


class UploadFailed(AppError):
    def __init__(self) -> None:
        super().__init__(status_code=500, detail="Upload failed")


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [{"loc": e.get("loc"), "type": e.get("type")} for e in exc.errors()]
    logger.warning("invalid_payload", path=request.url.path, errors=errors)
    return await app_error_handler(request, InvalidPayload())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
