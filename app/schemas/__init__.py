"""Pydantic schemas for request/response validation."""

from app.schemas.events import (
    ActivityEvent,
    DayEvents,
    MealEvent,
    SleepEvent,
    SymptomRecord,
)
from app.schemas.load import (
    DayLoadInputs,
    DayLoadRequest,
    LoadBreakdown,
    LoadConfiguration,
    LoadScore,
    LoadThresholds,
    RangeLoadRequest,
    RiskLevel,
)
from app.schemas.calibration import (
    CalibrationDay,
    CalibrationNeed,
    CalibrationProgress,
    CalibrationState,
    CapacityLevel,
    CapacityProfile,
    ConditionPreset,
    ConfigurationResponse,
    GoodDayRequest,
    PersonalBaseline,
    PresetDescription,
    ProfileUpdate,
    RecoveryWindow,
    SensitivityProfile,
)
from app.schemas.reflection import DayReflectionResponse, DayReflectionUpdate
from app.schemas.physiology import (
    BaselineRequest,
    BaselineResponse,
    BiometricReadings,
    HealthBaseline,
    HealthBaselines,
    PhysiologicalState,
    PhysiologicalStateResponse,
)

__all__ = [
    "ActivityEvent",
    "DayEvents",
    "MealEvent",
    "SleepEvent",
    "SymptomRecord",
    "DayLoadInputs",
    "DayLoadRequest",
    "LoadBreakdown",
    "LoadConfiguration",
    "LoadScore",
    "LoadThresholds",
    "RangeLoadRequest",
    "RiskLevel",
    "CalibrationDay",
    "CalibrationNeed",
    "CalibrationProgress",
    "CalibrationState",
    "CapacityLevel",
    "CapacityProfile",
    "ConditionPreset",
    "ConfigurationResponse",
    "GoodDayRequest",
    "PersonalBaseline",
    "PresetDescription",
    "ProfileUpdate",
    "RecoveryWindow",
    "SensitivityProfile",
    "DayReflectionResponse",
    "DayReflectionUpdate",
    "BaselineRequest",
    "BaselineResponse",
    "BiometricReadings",
    "HealthBaseline",
    "HealthBaselines",
    "PhysiologicalState",
    "PhysiologicalStateResponse",
]
