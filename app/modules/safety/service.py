import structlog

from app.modules.safety.scanner import (
    SafetyFlags,
    SafetyScanner,
    has_any_safety_signal,
    has_policy_violations,
)
from app.modules.safety.schemas import SafetyScanResponse

log = structlog.get_logger()


class SafetyReviewService:
    """Scan replies and log the outcome; acting on the flags is left to the caller."""

    def __init__(self, scanner: SafetyScanner) -> None:
        self._scanner = scanner

    def review(self, text: str) -> SafetyScanResponse:
        flags: SafetyFlags = self._scanner.scan(text)
        response = SafetyScanResponse(
            flags=flags,
            has_policy_violations=has_policy_violations(flags),
            has_any_safety_signal=has_any_safety_signal(flags),
        )
        if response.has_any_safety_signal:
            # Flags only; the reply text itself is never logged
            log.info(
                "safety signal detected",
                emergency_guidance=flags.emergency_guidance,
                provider_escalation=flags.provider_escalation,
                violation_count=len(flags.policy_violations),
                text_length=len(text),
            )
        return response


safety_service = SafetyReviewService(SafetyScanner())


def get_safety_service() -> SafetyReviewService:
    return safety_service
