"""
API v1 router.

Aggregates all v1 endpoints.
"""

from fastapi import APIRouter

from app.api.v1.endpoints import calibration, load, physiology, reflections

api_router = APIRouter()

# Include endpoint routers
api_router.include_router(
    load.router, prefix="/load", tags=["Load"]
)
api_router.include_router(
    calibration.router, prefix="/calibration", tags=["Calibration"]
)
api_router.include_router(
    reflections.router, prefix="/reflections", tags=["Day reflections"]
)
api_router.include_router(
    physiology.router, prefix="/physiology", tags=["Physiological state"]
)
