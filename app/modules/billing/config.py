import json
from decimal import Decimal
from pathlib import Path
from typing import Literal

import structlog
from pydantic import Field, field_validator

from app.shared.schemas import FrozenCamelModel

log = structlog.get_logger()

Counter = Literal["reading_days", "interactive_minutes", "data_review_minutes", "setup_sessions"]


class BillingCode(FrozenCamelModel):
    """A reimbursable code whose requirement is a minimum on one period counter."""

    code: str
    description: str
    reimbursement: Decimal = Field(ge=0, decimal_places=2)
    requirement: str
    counter: Counter
    required: int = Field(ge=1)
    # Amount of the counter already claimed by a preceding code (e.g. 99458 after 99457)
    offset: int = Field(default=0, ge=0)
    unit_label: str = ""


class BillingCodeTable(FrozenCamelModel):
    version: str = "default-v1"
    codes: list[BillingCode] = Field(default_factory=list)

    @field_validator("codes")
    @classmethod
    def ensure_unique(cls, value: list[BillingCode]) -> list[BillingCode]:
        seen: set[str] = set()
        for code in value:
            if code.code in seen:
                raise ValueError(f"duplicate billing code {code.code}")
            seen.add(code.code)
        return value


DEFAULT_BILLING_CODES = BillingCodeTable(
    codes=[
        BillingCode(
            code="99454",
            description="Device supply & daily readings",
            reimbursement=Decimal("55.72"),
            requirement="16+ days of readings per month",
            counter="reading_days",
            required=16,
            unit_label="reading days",
        ),
        BillingCode(
            code="99457",
            description="Interactive communication (first 20 min)",
            reimbursement=Decimal("50.94"),
            requirement="20+ minutes of live interactive communication",
            counter="interactive_minutes",
            required=20,
            unit_label="minutes",
        ),
        BillingCode(
            code="99458",
            description="Additional interactive communication (20 min)",
            reimbursement=Decimal("42.22"),
            requirement="Additional 20+ minutes beyond 99457",
            counter="interactive_minutes",
            required=20,
            offset=20,
            unit_label="additional minutes",
        ),
        BillingCode(
            code="99091",
            description="Data review & interpretation (30 min)",
            reimbursement=Decimal("56.88"),
            requirement="30+ minutes of data analysis per month",
            counter="data_review_minutes",
            required=30,
            unit_label="minutes",
        ),
        BillingCode(
            code="99453",
            description="Initial device setup & patient education",
            reimbursement=Decimal("19.32"),
            requirement="One-time per patient enrollment",
            counter="setup_sessions",
            required=1,
            unit_label="setup sessions",
        ),
    ]
)


def load_billing_codes(path: Path | None) -> BillingCodeTable:
    if path is None:
        return DEFAULT_BILLING_CODES
    try:
        table = BillingCodeTable.model_validate(json.loads(path.read_text()))
    except FileNotFoundError:
        log.info("billing codes file not found, using defaults", path=str(path))
        return DEFAULT_BILLING_CODES
    except Exception as exc:
        log.warning("billing codes load failed, using defaults", path=str(path), error=str(exc))
        return DEFAULT_BILLING_CODES
    log.info("billing codes loaded", path=str(path), version=table.version, count=len(table.codes))
    return table
