"""Business logic services."""

from app.services.capacity_service import CapacityService
from app.services.reflection_service import ReflectionService

__all__ = [
    "CapacityService",
    "ReflectionService",
]
