"""
Load endpoints — single day, date range and per-source breakdown.
"""

from fastapi import APIRouter, Depends

from app.api.dependencies import get_capacity_service
from app.schemas.events import DayEvents
from app.schemas.load import DayLoadRequest, LoadBreakdown, LoadScore, RangeLoadRequest
from app.services.capacity_service import CapacityService

router = APIRouter()


@router.post(
    "/day",
    summary="Compute one day's load from its events and the previous day's load.",
    response_model=LoadScore,
)
def calculate_day(
    data: DayLoadRequest,
    service: CapacityService = Depends(get_capacity_service),
):
    return service.calculate_day(data)


@router.post(
    "/range",
    summary="Compute daily loads over a date range (first day seeded with zero).",
    response_model=list[LoadScore],
)
def calculate_range(
    data: RangeLoadRequest,
    service: CapacityService = Depends(get_capacity_service),
):
    """Days without events still decay.  Stored reflections apply unless
    ``use_reflections`` is false."""
    return service.calculate_range(data)


@router.post(
    "/breakdown",
    summary="Split one day's own load by source.",
    response_model=LoadBreakdown,
)
def breakdown(
    day: DayEvents,
    service: CapacityService = Depends(get_capacity_service),
):
    return service.breakdown(day)
