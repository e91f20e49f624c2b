"""
Day reflection endpoints.

Per-day reflection CRUD with date-based upsert.
"""

import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from app.api.dependencies import get_reflection_service
from app.schemas.reflection import DayReflectionResponse, DayReflectionUpdate
from app.services.reflection_service import ReflectionService

router = APIRouter()


@router.put("/{date}", summary="Create or update the reflection for a date.", response_model=DayReflectionResponse, )
def upsert_reflection(date: datetime.date, data: DayReflectionUpdate, response: Response,
                      service: ReflectionService = Depends(get_reflection_service), ):
    """Upsert: creates the reflection if it doesn't exist, merges the sent fields if it does."""
    reflection, created = service.upsert(date, data)
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return reflection


@router.get("", summary="List reflections in a date range.", response_model=list[DayReflectionResponse], )
def list_reflections(start: datetime.date = Query(..., description="Range start (inclusive)"),
                     end: datetime.date = Query(..., description="Range end (inclusive)"),
                     service: ReflectionService = Depends(get_reflection_service), ):
    if end < start:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="end must not be before start")
    return service.get_range(start, end)


@router.get("/{date}", summary="Get the reflection for a specific date.", response_model=DayReflectionResponse, )
def get_reflection(date: datetime.date, service: ReflectionService = Depends(get_reflection_service), ):
    return service.get_by_date(date)


@router.delete("/{date}", summary="Delete the reflection for a specific date.",
               status_code=status.HTTP_204_NO_CONTENT, )
def delete_reflection(date: datetime.date, service: ReflectionService = Depends(get_reflection_service), ):
    service.delete_by_date(date)
