"""HTTP endpoints for classifying readings and comparing trends."""

from datetime import timedelta
from typing import List

from fastapi import APIRouter, Depends

from app.modules.vitals.schemas import (
    ClassifyRequest,
    ClassifyResponse,
    TrendRequest,
    TrendResponse,
    TrendWindowOut,
    VitalProfileOut,
    WindowTrendRequest,
    WindowTrendResponse,
)
from app.modules.vitals.service import VitalAssessmentService, get_assessment_service
from app.modules.vitals.trends import trend_concern, trend_direction

router = APIRouter()


@router.get("/profiles", response_model=List[VitalProfileOut], summary="List vital type profiles")
def list_profiles(
    service: VitalAssessmentService = Depends(get_assessment_service),
) -> List[VitalProfileOut]:
    """Return the active range table, one entry per configured vital type."""
    return [
        VitalProfileOut(
            vital_type=key,
            display_name=profile.display_name or key,
            unit=profile.unit,
            color=profile.color,
            normal_min=profile.normal_range.min,
            normal_max=profile.normal_range.max,
            critical_min=profile.critical_range.min,
            critical_max=profile.critical_range.max,
            noise_threshold=profile.noise_threshold,
        )
        for key, profile in sorted(service.profiles.profiles.items())
    ]


@router.post("/classify", response_model=ClassifyResponse, summary="Classify vital readings")
def classify_readings(
    payload: ClassifyRequest,
    service: VitalAssessmentService = Depends(get_assessment_service),
) -> ClassifyResponse:
    """Assign a severity tier to each reading and a status badge for the newest per type."""
    assessments, badge = service.assess_batch(payload.readings)
    return ClassifyResponse(assessments=assessments, status_badge=badge)


@router.post("/trend", response_model=TrendResponse, summary="Compare two readings")
def compare_trend(
    payload: TrendRequest,
    service: VitalAssessmentService = Depends(get_assessment_service),
) -> TrendResponse:
    noise = payload.noise_threshold
    if noise is None:
        noise = service.profiles.noise_threshold(payload.vital_type) if payload.vital_type else 0.0
    direction = trend_direction(payload.current, payload.previous, noise)
    concern = trend_concern(payload.vital_type, direction) if payload.vital_type else "neutral"
    return TrendResponse(direction=direction, concern=concern, noise_threshold=noise)


@router.post(
    "/trend/windows",
    response_model=WindowTrendResponse,
    summary="Compare this window against the prior window per vital type",
)
def compare_trend_windows(
    payload: WindowTrendRequest,
    service: VitalAssessmentService = Depends(get_assessment_service),
) -> WindowTrendResponse:
    results = service.trends(
        payload.readings,
        now=payload.now,
        window=timedelta(days=payload.window_days),
        recent_count=payload.recent_count,
    )
    return WindowTrendResponse(
        windows={
            vital_type: TrendWindowOut.from_window(
                window, recent, trend_concern(vital_type, window.direction)
            )
            for vital_type, (window, recent) in results.items()
        }
    )
