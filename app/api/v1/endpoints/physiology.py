"""
Physiology endpoints — state classification and metric baselines.

Stateless: readings and baselines travel in the request body.
"""

from fastapi import APIRouter

from app.capacity.physiology import classify_state, compute_baseline
from app.schemas.physiology import (
    BaselineRequest,
    BaselineResponse,
    BiometricReadings,
    PhysiologicalStateResponse,
)

router = APIRouter()


@router.post(
    "/state",
    summary="Classify the current physiological state from biometric readings.",
    response_model=PhysiologicalStateResponse,
)
def get_state(data: BiometricReadings):
    state = classify_state(data)
    return PhysiologicalStateResponse(
        state=state,
        display_text=state.display_text if state else None,
    )


@router.post(
    "/baseline",
    summary="Compute a personal baseline (mean, population SD) from samples.",
    response_model=BaselineResponse,
)
def get_baseline(data: BaselineRequest):
    return BaselineResponse(metric=data.metric, baseline=compute_baseline(data.samples))
