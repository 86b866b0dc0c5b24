from __future__ import annotations

from dataclasses import dataclass, field as dataclass_field
from enum import Enum
from typing import Optional


class ValidationErrorKind(str, Enum):
    """Why an inbound message was rejected."""
    ZERO_CLOCK = "ZeroClock"
    EXCESSIVE_DRIFT = "ExcessiveDrift"
    EMPTY_FIELD = "EmptyField"
    MISSING_PAYLOAD = "MissingPayload"
    INVALID_ENUM = "InvalidEnum"
    PARSE_ERROR = "ParseError"


@dataclass(frozen=True)
class ValidationError:
    """
    Rejection verdict returned (not raised) by the validators.

    ``detail`` carries the protocol's human readable reason ("name can't be
    empty"); callers branch on ``kind`` only. For ParseError, ``cause`` holds
    the underlying ValueError.
    """
    kind: ValidationErrorKind
    detail: str
    field: Optional[str] = None
    cause: Optional[Exception] = dataclass_field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return self.detail

    @classmethod
    def empty_field(cls, field: str, detail: str) -> ValidationError:
        return cls(ValidationErrorKind.EMPTY_FIELD, detail, field)

    @classmethod
    def missing_payload(cls, field: str, detail: str) -> ValidationError:
        return cls(ValidationErrorKind.MISSING_PAYLOAD, detail, field)

    @classmethod
    def invalid_enum(cls, field: str, detail: str) -> ValidationError:
        return cls(ValidationErrorKind.INVALID_ENUM, detail, field)

    @classmethod
    def parse_error(cls, field: str, exc: ValueError) -> ValidationError:
        return cls(ValidationErrorKind.PARSE_ERROR, str(exc), field, exc)
