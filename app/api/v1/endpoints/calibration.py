"""
Calibration endpoints.

Good-day calibration protocol, capacity profile and explicit load
configuration.
"""

from fastapi import APIRouter, Depends, Query, status

from app.api.dependencies import get_capacity_service
from app.schemas.calibration import (
    CalibrationNeed,
    CalibrationProgress,
    ConfigurationResponse,
    GoodDayRequest,
    PresetDescription,
    ProfileUpdate,
)
from app.schemas.load import LoadConfiguration
from app.services.capacity_service import CapacityService

router = APIRouter()


@router.get("", summary="Get calibration progress and active thresholds.", response_model=CalibrationProgress, )
def get_progress(service: CapacityService = Depends(get_capacity_service), ):
    return service.get_progress()


@router.get("/needed", summary="Check whether a calibration run should be suggested.", response_model=CalibrationNeed, )
def needs_calibration(days_of_history: int = Query(..., ge=0, description="Days of logged history available"),
                      service: CapacityService = Depends(get_capacity_service), ):
    return service.needs_calibration(days_of_history)


@router.post("/start", summary="Start a calibration run (discards pending days).",
             response_model=CalibrationProgress, )
def start_calibration(service: CapacityService = Depends(get_capacity_service), ):
    return service.start_calibration()


@router.post("/good-day", summary="Record a good day.  The third one completes calibration.",
             response_model=CalibrationProgress, )
def record_good_day(data: GoodDayRequest, service: CapacityService = Depends(get_capacity_service), ):
    return service.record_good_day(data)


@router.post("/cancel", summary="Cancel the current calibration run.", response_model=CalibrationProgress, )
def cancel_calibration(service: CapacityService = Depends(get_capacity_service), ):
    return service.cancel_calibration()


@router.delete("/baseline", summary="Forget the personal baseline.", response_model=CalibrationProgress, )
def reset_baseline(service: CapacityService = Depends(get_capacity_service), ):
    return service.reset_baseline()


@router.get("/configuration", summary="Get the active load configuration.", response_model=ConfigurationResponse, )
def get_configuration(service: CapacityService = Depends(get_capacity_service), ):
    return service.get_configuration()


@router.put("/configuration", summary="Set an explicit load configuration.", response_model=ConfigurationResponse, )
def set_configuration(data: LoadConfiguration, service: CapacityService = Depends(get_capacity_service), ):
    return service.set_configuration(data)


@router.delete("/configuration", summary="Drop the explicit configuration and return to the profile.",
               response_model=ConfigurationResponse, status_code=status.HTTP_200_OK, )
def clear_configuration(service: CapacityService = Depends(get_capacity_service), ):
    return service.clear_custom_configuration()


@router.put("/profile", summary="Change condition preset or profile components.",
            response_model=ConfigurationResponse, )
def update_profile(data: ProfileUpdate, service: CapacityService = Depends(get_capacity_service), ):
    return service.update_profile(data)


@router.get("/presets", summary="List the condition presets.", response_model=list[PresetDescription], )
def list_presets():
    return CapacityService.list_presets()
