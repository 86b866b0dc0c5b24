import pytest

from admission.core.ClockValidator import MAX_CLOCK_DRIFT_MS, validate_clock, validate_future_drift
from admission.core.ValidationErrors import ValidationErrorKind

from conftest import NOW_MS

U64_MAX = 2 ** 64 - 1


def test_zero_clock_rejected():
    error = validate_clock(0, NOW_MS)
    assert error is not None
    assert error.kind == ValidationErrorKind.ZERO_CLOCK
    assert error.field == "clock"


def test_zero_clock_rejected_even_when_reference_is_zero():
    assert validate_clock(0, 0).kind == ValidationErrorKind.ZERO_CLOCK


@pytest.mark.parametrize("offset", [0, 1, -1, MAX_CLOCK_DRIFT_MS, -MAX_CLOCK_DRIFT_MS])
def test_clock_within_drift_passes(offset):
    assert validate_clock(NOW_MS + offset, NOW_MS) is None


@pytest.mark.parametrize("offset", [MAX_CLOCK_DRIFT_MS + 1, -(MAX_CLOCK_DRIFT_MS + 1), 10_000_000, -10_000_000])
def test_clock_beyond_drift_rejected(offset):
    error = validate_clock(NOW_MS + offset, NOW_MS)
    assert error is not None
    assert error.kind == ValidationErrorKind.EXCESSIVE_DRIFT


def test_small_clock_against_large_reference_does_not_wrap():
    # An unsigned subtraction would wrap to a huge number; either way this is drift
    assert validate_clock(1, U64_MAX).kind == ValidationErrorKind.EXCESSIVE_DRIFT
    assert validate_clock(U64_MAX, 1).kind == ValidationErrorKind.EXCESSIVE_DRIFT


def test_u64_extremes_close_together_pass():
    assert validate_clock(U64_MAX, U64_MAX - MAX_CLOCK_DRIFT_MS) is None
    assert validate_clock(1, 0) is None


def test_clock_check_is_idempotent():
    first = validate_clock(NOW_MS + 500_000, NOW_MS)
    second = validate_clock(NOW_MS + 500_000, NOW_MS)
    assert first == second


def test_future_drift_rejects_only_far_future():
    assert validate_future_drift([NOW_MS + MAX_CLOCK_DRIFT_MS], NOW_MS) is None
    error = validate_future_drift([NOW_MS + MAX_CLOCK_DRIFT_MS + 1], NOW_MS)
    assert error.kind == ValidationErrorKind.EXCESSIVE_DRIFT


@pytest.mark.parametrize("clock", [0, 1, NOW_MS - 10_000_000, NOW_MS])
def test_future_drift_never_rejects_past_or_zero(clock):
    assert validate_future_drift([clock], NOW_MS) is None


def test_future_drift_empty_sequence_passes():
    assert validate_future_drift([], NOW_MS) is None
