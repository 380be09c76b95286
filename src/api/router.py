from fastapi import APIRouter

from src.api.endpoints import health, uploads

router = APIRouter()
router.include_router(health.router, tags=["health"])
router.include_router(uploads.router, tags=["uploads"])
