from fastapi import APIRouter

from app.brandlog.core.config import settings
from app.brandlog.routers.auth import router as auth_router
from app.brandlog.routers.brands import router as brands_router
from app.brandlog.routers.events import router as events_router
from app.brandlog.routers.exports import router as exports_router
from app.brandlog.routers.ops import metrics_router
from app.brandlog.routers.ops import router as ops_router
from app.brandlog.routers.users import router as users_router

api_router = APIRouter()
api_router.include_router(ops_router, tags=["ops"])
api_router.include_router(auth_router, prefix="/auth", tags=["auth"])
api_router.include_router(users_router, prefix="/users", tags=["users"])
api_router.include_router(brands_router, prefix="/brands", tags=["brands"])
api_router.include_router(events_router, prefix="/data", tags=["login-events"])
api_router.include_router(exports_router, prefix="/exports", tags=["exports"])
if settings.METRICS_ENABLED:
    api_router.include_router(metrics_router, tags=["ops"])
