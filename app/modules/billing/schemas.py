from decimal import Decimal

from pydantic import Field, model_validator

from app.modules.billing.calculator import BillingCounters, CodeEligibility
from app.shared.schemas import CamelModel


class AdherenceRequest(CamelModel):
    taken: int = Field(ge=0)
    total: int = Field(ge=0)

    @model_validator(mode="after")
    def check_counts(self) -> "AdherenceRequest":
        if self.taken > self.total:
            raise ValueError("taken cannot exceed total")
        return self


class AdherenceResponse(CamelModel):
    taken: int
    total: int
    rate: int


class EligibilityRequest(CamelModel):
    """Period counters for one representative patient and the size of the active panel."""

    counters: BillingCounters = Field(default_factory=BillingCounters)
    active_patients: int = Field(default=1, ge=0)


class EligibilityResponse(CamelModel):
    codes: list[CodeEligibility]
    eligible_count: int
    per_patient_revenue: Decimal
    active_patients: int
    projected_revenue: Decimal
