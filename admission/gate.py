"""
Admission gate held by the transport layer.

Wraps the pure validators with the caller-side concerns they deliberately
leave out: picking the reference time, logging rejections and keeping
counters for a status snapshot.
"""

from __future__ import annotations

import threading
from collections import Counter
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from admission.core.MessageKinds import MessageKind
from admission.core.Messages import Message
from admission.core.MessageValidators import validate_message
from admission.core.ValidationErrors import ValidationError
from shared.config import AdmissionConfig
from shared.log import get_logger, log_admission
from shared.utils import now_ms

logger = get_logger(__name__)


class AdmissionGate:
    """
    Single entry point for inbound messages.

    Safe to share between threads: the validators are pure and the
    counters are updated under a lock.
    """

    def __init__(
        self,
        config: Optional[AdmissionConfig] = None,
        *,
        clock: Callable[[], int] = now_ms,
    ):
        """
        Args:
            config: logging behaviour; defaults to AdmissionConfig()
            clock: current-time source in epoch ms, used when the caller
                has no transport timestamp (relayed membership events)
        """
        self.config = config or AdmissionConfig()
        self._clock = clock
        self._lock = threading.Lock()
        self._accepted: Counter = Counter()
        self._rejected: Counter = Counter()
        self._reasons: Counter = Counter()

    def check(self, message: Message, reference_ms: Optional[int] = None) -> Optional[ValidationError]:
        """
        Validate one message.

        Args:
            message: decoded inbound message
            reference_ms: transport receipt timestamp; the gate's clock if omitted

        Returns:
            None to admit, otherwise the rejection verdict
        """
        reference = self._clock() if reference_ms is None else reference_ms
        error = validate_message(message, reference)
        kind: MessageKind = type(message).KIND

        with self._lock:
            if error is None:
                self._accepted[kind.value] += 1
            else:
                self._rejected[kind.value] += 1
                self._reasons[error.kind.value] += 1

        if error is not None:
            log_admission(
                logger, "warning", f"Rejected {kind.value}: {error.detail}",
                error=error, msg_kind=kind.value, clock=getattr(message, "clock", None),
            )
        elif self.config.log_accepted:
            log_admission(logger, "debug", f"Admitted {kind.value}", msg_kind=kind.value)

        return error

    def admit(self, message: Message, reference_ms: Optional[int] = None) -> bool:
        """True if the message may enter local state."""
        return self.check(message, reference_ms) is None

    def check_batch(
        self,
        messages: Iterable[Message],
        reference_ms: Optional[int] = None,
    ) -> List[Tuple[Message, Optional[ValidationError]]]:
        """Validate messages independently; results keep input order."""
        reference = self._clock() if reference_ms is None else reference_ms
        return [(message, self.check(message, reference)) for message in messages]

    def stats(self) -> Dict[str, Any]:
        """Snapshot of per-kind accept/reject counts and per-reason rejections."""
        with self._lock:
            return {
                "accepted": dict(self._accepted),
                "rejected": dict(self._rejected),
                "reasons": dict(self._reasons),
                "total": sum(self._accepted.values()) + sum(self._rejected.values()),
            }
