"""
Shared API dependencies.

Reusable FastAPI dependencies for the process-wide engine state and
the services built on it.
"""

from fastapi import Depends, Request
from sqlmodel import Session

from app.capacity.cache import LoadScoreCache
from app.capacity.calibration import CalibrationManager
from app.core.config import settings
from app.db.session import get_db
from app.services.capacity_service import CapacityService
from app.services.reflection_service import ReflectionService


def get_calibration_manager(request: Request) -> CalibrationManager:
    """The manager created by the application at startup."""
    return request.app.state.calibration_manager


def get_load_cache(request: Request) -> LoadScoreCache:
    return request.app.state.load_cache


def get_capacity_service(db: Session = Depends(get_db),
                         manager: CalibrationManager = Depends(get_calibration_manager),
                         cache: LoadScoreCache = Depends(get_load_cache), ) -> CapacityService:
    return CapacityService(db, manager, cache, history_days=settings.CALIBRATION_HISTORY_DAYS)


def get_reflection_service(db: Session = Depends(get_db),
                           cache: LoadScoreCache = Depends(get_load_cache), ) -> ReflectionService:
    return ReflectionService(db, cache)
