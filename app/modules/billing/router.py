"""HTTP endpoints for medication adherence and billing eligibility."""

from fastapi import APIRouter, Depends

from app.modules.billing.schemas import (
    AdherenceRequest,
    AdherenceResponse,
    EligibilityRequest,
    EligibilityResponse,
)
from app.modules.billing.service import BillingService, get_billing_service

router = APIRouter()


@router.post("/adherence", response_model=AdherenceResponse, summary="Medication adherence rate")
def compute_adherence(
    payload: AdherenceRequest,
    service: BillingService = Depends(get_billing_service),
) -> AdherenceResponse:
    sample = service.adherence(payload.taken, payload.total)
    return AdherenceResponse(taken=sample.taken, total=sample.total, rate=sample.rate)


@router.post(
    "/eligibility",
    response_model=EligibilityResponse,
    summary="Billing code eligibility and projected revenue",
)
def compute_eligibility(
    payload: EligibilityRequest,
    service: BillingService = Depends(get_billing_service),
) -> EligibilityResponse:
    return service.eligibility(payload.counters, payload.active_patients)
