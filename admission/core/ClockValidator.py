from __future__ import annotations

from typing import Iterable, Optional

from admission.core.ValidationErrors import ValidationError, ValidationErrorKind

# How many milliseconds a message clock may differ from the transport timestamp
MAX_CLOCK_DRIFT_MS = 120_000


def validate_clock(clock: int, reference: int) -> Optional[ValidationError]:
    """
    Check a message's logical clock against the transport receipt timestamp.

    The clock rides in the plaintext envelope and is attacker controlled;
    bounding its distance from the transport's own timestamp limits how far a
    peer can backdate or forward-date a message.

    Args:
        clock: LogicalClock carried by the message (u64)
        reference: transport receipt time in epoch ms (u64)

    Returns:
        None if the clock is acceptable, otherwise ZeroClock / ExcessiveDrift
    """
    if clock == 0:
        return ValidationError(ValidationErrorKind.ZERO_CLOCK, "clock can't be 0", "clock")

    # Python ints do not wrap, so the u64 subtraction cannot underflow here
    if abs(clock - reference) > MAX_CLOCK_DRIFT_MS:
        return ValidationError(
            ValidationErrorKind.EXCESSIVE_DRIFT,
            "clock value can't be too different from transport timestamp",
            "clock",
        )

    return None


def validate_future_drift(clocks: Iterable[int], now: int) -> Optional[ValidationError]:
    """
    One-sided check for relayed events that lost their transport timestamp.

    Only clocks more than MAX_CLOCK_DRIFT_MS ahead of ``now`` are rejected.
    Old clocks, including 0, pass.
    """
    for clock in clocks:
        if clock > now and clock - now > MAX_CLOCK_DRIFT_MS:
            return ValidationError(
                ValidationErrorKind.EXCESSIVE_DRIFT,
                "clock value can't be too different from transport timestamp",
                "clock",
            )
    return None
