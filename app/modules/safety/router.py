"""HTTP endpoint for scanning AI-generated replies."""

from fastapi import APIRouter, Depends

from app.modules.safety.schemas import SafetyScanRequest, SafetyScanResponse
from app.modules.safety.service import SafetyReviewService, get_safety_service

router = APIRouter()


@router.post("/scan", response_model=SafetyScanResponse, summary="Scan an AI reply for safety signals")
def scan_reply(
    payload: SafetyScanRequest,
    service: SafetyReviewService = Depends(get_safety_service),
) -> SafetyScanResponse:
    """Flags are advisory: the caller decides whether to block, warn or log."""
    return service.review(payload.text)
