"""Stateless classification of AI-generated text into safety flags."""

from __future__ import annotations

from pydantic import Field

from app.modules.safety.patterns import DEFAULT_PATTERNS, SafetyPatternTable
from app.shared.schemas import FrozenCamelModel


class SafetyFlags(FrozenCamelModel):
    emergency_guidance: bool = False
    provider_escalation: bool = False
    policy_violations: tuple[str, ...] = Field(default_factory=tuple)


class SafetyScanner:
    """
    Scan a reply against three independent pattern categories.

    Emergency guidance and provider escalation are plain booleans. Every
    violation pattern that matches adds its description, in table order and
    without de-duplication. The scanner keeps no state between calls.
    """

    def __init__(self, patterns: SafetyPatternTable = DEFAULT_PATTERNS) -> None:
        self._patterns = patterns

    def scan(self, text: str | None) -> SafetyFlags:
        if text is None:
            text = ""
        elif not isinstance(text, str):
            text = str(text)
        return SafetyFlags(
            emergency_guidance=any(p.search(text) for p in self._patterns.emergency),
            provider_escalation=any(p.search(text) for p in self._patterns.escalation),
            policy_violations=tuple(
                check.violation
                for check in self._patterns.violations
                if check.pattern.search(text)
            ),
        )


_default_scanner = SafetyScanner()


def scan(text: str | None) -> SafetyFlags:
    return _default_scanner.scan(text)


def has_policy_violations(flags: SafetyFlags) -> bool:
    return len(flags.policy_violations) > 0


def has_any_safety_signal(flags: SafetyFlags) -> bool:
    return flags.emergency_guidance or flags.provider_escalation or has_policy_violations(flags)
