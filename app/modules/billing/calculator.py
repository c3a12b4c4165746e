"""Adherence rate and billing eligibility arithmetic."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from pydantic import Field

from app.core.exceptions import InvalidInputError
from app.modules.billing.config import DEFAULT_BILLING_CODES, BillingCode, BillingCodeTable
from app.shared.schemas import FrozenCamelModel

CENTS = Decimal("0.01")


def _require_count(value: int, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInputError(f"{field} must be an integer", field=field, value=repr(value))
    if value < 0:
        raise InvalidInputError(f"{field} must not be negative", field=field, value=value)
    return value


def adherence(taken: int, total: int) -> int:
    """Percent of scheduled doses taken, half rounded up; 100 when nothing was scheduled."""
    taken = _require_count(taken, "taken")
    total = _require_count(total, "total")
    if taken > total:
        raise InvalidInputError(
            "taken cannot exceed total", field="taken", value=taken, total=total
        )
    if total == 0:
        return 100
    rate = (Decimal(100 * taken) / Decimal(total)).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    return int(rate)


class AdherenceSample(FrozenCamelModel):
    taken: int
    total: int
    rate: int

    @classmethod
    def from_counts(cls, taken: int, total: int) -> "AdherenceSample":
        return cls(taken=taken, total=total, rate=adherence(taken, total))


class BillingCounters(FrozenCamelModel):
    """Activity observed for one patient in one billing period."""

    reading_days: int = Field(default=0, ge=0)
    interactive_minutes: int = Field(default=0, ge=0)
    data_review_minutes: int = Field(default=0, ge=0)
    setup_sessions: int = Field(default=0, ge=0)


class CodeEligibility(FrozenCamelModel):
    code: str
    description: str
    reimbursement: Decimal
    requirement: str
    eligible: bool
    observed: int
    required: int
    progress: float
    progress_label: str


def evaluate_code(code: BillingCode, counters: BillingCounters) -> CodeEligibility:
    """Eligibility is the hard threshold; progress is informational and capped at 100."""
    raw = getattr(counters, code.counter)
    observed = max(0, raw - code.offset)
    progress = min(100.0, 100.0 * observed / code.required)
    label = f"{observed}/{code.required}"
    if code.unit_label:
        label = f"{label} {code.unit_label}"
    return CodeEligibility(
        code=code.code,
        description=code.description,
        reimbursement=code.reimbursement,
        requirement=code.requirement,
        eligible=observed >= code.required,
        observed=observed,
        required=code.required,
        progress=progress,
        progress_label=label,
    )


def evaluate_codes(
    counters: BillingCounters, table: BillingCodeTable = DEFAULT_BILLING_CODES
) -> list[CodeEligibility]:
    return [evaluate_code(code, counters) for code in table.codes]


def per_patient_revenue(eligibilities: Iterable[CodeEligibility]) -> Decimal:
    """Sum of reimbursements over distinct eligible codes; a code never counts twice."""
    eligible = {e.code: e.reimbursement for e in eligibilities if e.eligible}
    return sum(eligible.values(), Decimal(0)).quantize(CENTS, rounding=ROUND_HALF_UP)


def projected_revenue(eligibilities: Iterable[CodeEligibility], active_patients: int) -> Decimal:
    active_patients = _require_count(active_patients, "active_patients")
    return (per_patient_revenue(eligibilities) * active_patients).quantize(
        CENTS, rounding=ROUND_HALF_UP
    )
