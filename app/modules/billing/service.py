from pathlib import Path

import structlog

from app.core.config import settings
from app.modules.billing.calculator import (
    AdherenceSample,
    BillingCounters,
    evaluate_codes,
    per_patient_revenue,
    projected_revenue,
)
from app.modules.billing.config import BillingCodeTable, load_billing_codes
from app.modules.billing.schemas import EligibilityResponse

log = structlog.get_logger()


class BillingService:
    """Adherence and billing-eligibility views over caller-supplied period counters."""

    def __init__(self, table: BillingCodeTable) -> None:
        self._table = table

    @property
    def table(self) -> BillingCodeTable:
        return self._table

    def adherence(self, taken: int, total: int) -> AdherenceSample:
        return AdherenceSample.from_counts(taken, total)

    def eligibility(self, counters: BillingCounters, active_patients: int) -> EligibilityResponse:
        codes = evaluate_codes(counters, self._table)
        eligible_count = sum(1 for code in codes if code.eligible)
        log.debug(
            "billing eligibility evaluated",
            eligible=eligible_count,
            total=len(codes),
            active_patients=active_patients,
        )
        return EligibilityResponse(
            codes=codes,
            eligible_count=eligible_count,
            per_patient_revenue=per_patient_revenue(codes),
            active_patients=active_patients,
            projected_revenue=projected_revenue(codes, active_patients),
        )


billing_codes = load_billing_codes(
    Path(settings.BILLING_CODES_PATH) if settings.BILLING_CODES_PATH else None
)
billing_service = BillingService(billing_codes)


def get_billing_service() -> BillingService:
    return billing_service
