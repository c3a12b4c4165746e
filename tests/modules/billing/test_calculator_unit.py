from decimal import Decimal

import pytest
from pydantic import ValidationError

from app.core.exceptions import InvalidInputError
from app.modules.billing.calculator import (
    AdherenceSample,
    BillingCounters,
    adherence,
    evaluate_codes,
    per_patient_revenue,
    projected_revenue,
)
from app.modules.billing.config import BillingCode, BillingCodeTable


@pytest.mark.parametrize(
    ("taken", "total", "expected"),
    [(0, 0, 100), (5, 5, 100), (0, 5, 0), (1, 3, 33), (2, 3, 67), (1, 8, 13), (3, 8, 38)],
)
def test_adherence_rate(taken: int, total: int, expected: int) -> None:
    assert adherence(taken, total) == expected


def test_adherence_is_monotonic_in_taken() -> None:
    for total in range(1, 25):
        rates = [adherence(taken, total) for taken in range(total + 1)]
        assert rates == sorted(rates)
        assert all(0 <= rate <= 100 for rate in rates)


@pytest.mark.parametrize(("taken", "total"), [(4, 3), (-1, 3), (1, -3), (1.5, 3), (True, 3)])
def test_adherence_rejects_invalid_counts(taken, total) -> None:
    with pytest.raises(InvalidInputError):
        adherence(taken, total)


def test_adherence_sample() -> None:
    sample = AdherenceSample.from_counts(7, 8)
    assert (sample.taken, sample.total, sample.rate) == (7, 8, 88)


def test_eligibility_and_progress() -> None:
    counters = BillingCounters(reading_days=12, interactive_minutes=30, data_review_minutes=45)

    codes = {c.code: c for c in evaluate_codes(counters)}

    assert not codes["99454"].eligible
    assert codes["99454"].progress == 75.0
    assert codes["99454"].progress_label == "12/16 reading days"
    assert codes["99457"].eligible
    assert codes["99457"].progress == 100.0
    # 99458 only counts minutes beyond the first 20
    assert codes["99458"].observed == 10
    assert codes["99458"].progress == 50.0
    assert not codes["99458"].eligible
    assert codes["99091"].eligible
    assert codes["99453"].progress == 0.0


def test_progress_never_exceeds_one_hundred() -> None:
    counters = BillingCounters(reading_days=31, interactive_minutes=200, data_review_minutes=300, setup_sessions=4)
    assert all(c.progress == 100.0 and c.eligible for c in evaluate_codes(counters))


def test_revenue_counts_each_eligible_code_once() -> None:
    counters = BillingCounters(reading_days=20, interactive_minutes=45, data_review_minutes=30, setup_sessions=1)
    codes = evaluate_codes(counters)

    assert per_patient_revenue(codes) == Decimal("225.08")
    assert per_patient_revenue(codes + codes) == Decimal("225.08")
    assert projected_revenue(codes, 10) == Decimal("2250.80")
    assert projected_revenue(codes, 0) == Decimal("0.00")


def test_revenue_without_eligible_codes_is_zero() -> None:
    assert per_patient_revenue(evaluate_codes(BillingCounters())) == Decimal("0.00")


def test_counters_reject_negative_values() -> None:
    with pytest.raises(ValidationError):
        BillingCounters(reading_days=-1)


def test_code_table_rejects_duplicates() -> None:
    code = BillingCode(
        code="99454",
        description="Readings",
        reimbursement=Decimal("55.72"),
        requirement="16 days",
        counter="reading_days",
        required=16,
    )
    with pytest.raises(ValidationError):
        BillingCodeTable(codes=[code, code])
