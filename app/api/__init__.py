from fastapi import APIRouter

from app.api.dashboard import router as dashboard_router
from app.api.routes import router as app_router

router = APIRouter()
router.include_router(app_router)
router.include_router(dashboard_router)

__all__ = ["router"]
