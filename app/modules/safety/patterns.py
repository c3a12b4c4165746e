"""Pattern tables for scanning AI-generated replies. Matching is case-insensitive."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True)
class ViolationCheck:
    pattern: re.Pattern[str]
    violation: str


@dataclass(frozen=True)
class SafetyPatternTable:
    emergency: tuple[re.Pattern[str], ...]
    escalation: tuple[re.Pattern[str], ...]
    violations: tuple[ViolationCheck, ...]


def _compile(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern, re.IGNORECASE)


def build_table(
    emergency: Iterable[str],
    escalation: Iterable[str],
    violations: Iterable[tuple[str, str]],
) -> SafetyPatternTable:
    return SafetyPatternTable(
        emergency=tuple(_compile(p) for p in emergency),
        escalation=tuple(_compile(p) for p in escalation),
        violations=tuple(
            ViolationCheck(pattern=_compile(p), violation=description)
            for p, description in violations
        ),
    )


# Directing the patient to emergency services
EMERGENCY_PATTERNS = (
    r"call\s+911",
    r"call\s+emergency",
    r"go\s+to\s+(the\s+)?(emergency\s+room|ER|nearest\s+hospital)",
    r"seek\s+(immediate\s+)?emergency\s+(medical\s+)?(care|help|attention|treatment)",
    r"dial\s+911",
    r"contact\s+emergency\s+services",
    r"life[\s-]threatening",
    r"medical\s+emergency",
)

# Recommending the patient contact their care provider
ESCALATION_PATTERNS = (
    r"contact\s+(your\s+)?(doctor|provider|physician|care\s+team|healthcare)",
    r"reach\s+out\s+to\s+(your\s+)?(doctor|provider|physician|care\s+team)",
    r"speak\s+(with|to)\s+(your\s+)?(doctor|provider|physician|care\s+team)",
    r"schedule\s+(an?\s+)?appointment",
    r"follow\s+up\s+with\s+(your\s+)?(doctor|provider)",
    r"let\s+(your\s+)?(doctor|provider|care\s+team)\s+know",
    r"consult\s+(your\s+)?(doctor|provider|physician)",
)

# Diagnosing, prescribing, or discouraging care-seeking
VIOLATION_CHECKS = (
    (
        r"you\s+(likely\s+)?have\s+[a-zA-Z\s]{0,80}?(disease|disorder|syndrome|condition|infection|cancer)",
        "Possible diagnosis: AI appears to be diagnosing a condition.",
    ),
    (
        r"I\s+diagnose",
        "Explicit diagnosis language detected.",
    ),
    (
        r"you\s+should\s+(take|start|stop|increase|decrease|change)\s+(your\s+)?(?:medication|dosage|dose|prescription|drug)",
        "Possible medication recommendation: AI appears to be advising medication or dosage changes.",
    ),
    (
        r"prescri(be|bing)",
        "Prescribing language detected.",
    ),
    (
        r"I\s+recommend\s+(you\s+)?(take|start|increase|decrease)\s+\d+\s*(mg|mcg|ml|units)",
        "Specific dosage recommendation detected.",
    ),
    (
        r"you\s+don'?t\s+need\s+to\s+(see\s+a\s+doctor|go\s+to\s+(the\s+)?hospital|worry)",
        "Dismissal of medical concern: AI may be discouraging appropriate care-seeking.",
    ),
    (
        r"no\s+need\s+(to\s+)?(see|visit|call)\s+(a\s+|your\s+)?(doctor|provider)",
        "Dismissal of provider contact detected.",
    ),
)

DEFAULT_PATTERNS = build_table(EMERGENCY_PATTERNS, ESCALATION_PATTERNS, VIOLATION_CHECKS)
