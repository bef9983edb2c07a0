from fastapi import APIRouter

from backend.app.api.v1.endpoints.health import router as health_router
from backend.app.api.v1.endpoints.warehouses import router as warehouses_router

router = APIRouter()
router.include_router(health_router, tags=["health"])
router.include_router(warehouses_router, tags=["warehouses"])
