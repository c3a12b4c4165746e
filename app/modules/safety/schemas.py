from pydantic import Field

from app.modules.safety.scanner import SafetyFlags
from app.shared.schemas import CamelModel


class SafetyScanRequest(CamelModel):
    """Raw AI reply, scanned before it is stored or shown."""

    text: str = Field(default="", description="Reply text; may be empty")


class SafetyScanResponse(CamelModel):
    flags: SafetyFlags
    has_policy_violations: bool
    has_any_safety_signal: bool
