import time

import pytest

from app.modules.safety.patterns import build_table
from app.modules.safety.scanner import (
    SafetyFlags,
    SafetyScanner,
    has_any_safety_signal,
    has_policy_violations,
    scan,
)

MEDICATION_CHANGE = (
    "Possible medication recommendation: AI appears to be advising medication or dosage changes."
)


def test_emergency_guidance() -> None:
    flags = scan("Please call 911 immediately")

    assert flags.emergency_guidance
    assert not flags.provider_escalation
    assert flags.policy_violations == ()
    assert has_any_safety_signal(flags)
    assert not has_policy_violations(flags)


def test_dosage_advice_is_a_violation() -> None:
    flags = scan("You should increase your dosage to 20mg")

    assert flags.policy_violations == (MEDICATION_CHANGE,)
    assert "dosage" in flags.policy_violations[0]
    assert has_policy_violations(flags)


@pytest.mark.parametrize("text", ["", None, "Your readings look steady this week."])
def test_benign_text_has_no_signal(text) -> None:
    flags = scan(text)

    assert flags == SafetyFlags()
    assert not has_any_safety_signal(flags)


def test_scan_is_idempotent() -> None:
    text = "I diagnose hypertension. You should stop your medication and contact your doctor."
    assert scan(text) == scan(text)


def test_matching_ignores_case() -> None:
    assert scan("CALL 911 NOW").emergency_guidance
    assert scan("Please Schedule An Appointment").provider_escalation


def test_every_matching_violation_is_listed_in_table_order() -> None:
    flags = scan("I diagnose hypertension. You should stop your medication.")

    assert flags.policy_violations == (
        "Explicit diagnosis language detected.",
        MEDICATION_CHANGE,
    )


@pytest.mark.parametrize(
    ("text", "violation"),
    [
        ("You likely have a heart condition.", "Possible diagnosis: AI appears to be diagnosing a condition."),
        ("I recommend you take 20 mg twice a day.", "Specific dosage recommendation detected."),
        ("You don't need to worry about that.", "Dismissal of medical concern: AI may be discouraging appropriate care-seeking."),
        ("There's no need to call your doctor.", "Dismissal of provider contact detected."),
    ],
)
def test_individual_violations(text: str, violation: str) -> None:
    assert violation in scan(text).policy_violations


@pytest.mark.parametrize(
    "text",
    [
        "Let your care team know about the dizziness.",
        "Please reach out to your physician today.",
        "Consult your doctor before changing anything.",
    ],
)
def test_provider_escalation(text: str) -> None:
    flags = scan(text)
    assert flags.provider_escalation
    assert not flags.emergency_guidance


def test_non_ascii_and_long_input() -> None:
    assert scan("Señora, por favor call 911 ahora 🚑").emergency_guidance

    long_text = "Tu presión está estable. " * 5000 + "Please contact your doctor."
    assert scan(long_text).provider_escalation


def test_custom_pattern_table() -> None:
    scanner = SafetyScanner(
        build_table(
            emergency=[r"ambulance"],
            escalation=[],
            violations=[(r"stop\s+taking", "Stopping treatment advised.")],
        )
    )

    flags = scanner.scan("Call an ambulance and stop taking the pills")

    assert flags.emergency_guidance
    assert not flags.provider_escalation
    assert flags.policy_violations == ("Stopping treatment advised.",)


def test_repeated_diagnosis_prefix_scans_in_linear_time() -> None:
    text = "you have " * 6000

    started = time.perf_counter()
    flags = scan(text)
    elapsed = time.perf_counter() - started

    assert flags.policy_violations == ()
    assert elapsed < 1.0


def test_diagnosis_filler_is_bounded() -> None:
    near = "You have a long standing heart condition."
    far = "You have " + "very " * 30 + "bad condition."

    assert scan(near).policy_violations
    assert not scan(far).policy_violations
