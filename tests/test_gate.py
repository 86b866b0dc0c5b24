import logging
import threading

import pytest

from admission.core.ClockValidator import MAX_CLOCK_DRIFT_MS
from admission.core.Messages import PairInstallation, RequestAddressForTransaction
from admission.core.ValidationErrors import ValidationErrorKind
from admission.gate import AdmissionGate
from shared.config import AdmissionConfig

from conftest import NOW_MS, chat_message, membership_update, valid_messages


def fixed_clock():
    return NOW_MS


def test_check_uses_given_reference():
    gate = AdmissionGate(clock=fixed_clock)
    message = PairInstallation(clock=NOW_MS, name="dev", device_type="mobile", installation_id="abc")
    assert gate.check(message, NOW_MS) is None
    error = gate.check(message, NOW_MS + MAX_CLOCK_DRIFT_MS + 1)
    assert error.kind == ValidationErrorKind.EXCESSIVE_DRIFT


def test_check_falls_back_to_gate_clock():
    gate = AdmissionGate(clock=fixed_clock)
    assert gate.check(membership_update(NOW_MS + 200_000)).kind == ValidationErrorKind.EXCESSIVE_DRIFT
    assert gate.check(membership_update(NOW_MS - 10_000_000)) is None
    assert gate.admit(chat_message())


def test_admit_is_boolean_view_of_check():
    gate = AdmissionGate(clock=fixed_clock)
    assert gate.admit(chat_message()) is True
    assert gate.admit(chat_message(text="")) is False


def test_check_batch_keeps_order_and_shares_reference():
    calls = []

    def counting_clock():
        calls.append(1)
        return NOW_MS

    gate = AdmissionGate(clock=counting_clock)
    messages = valid_messages() + [RequestAddressForTransaction(clock=NOW_MS, value="abc")]
    results = gate.check_batch(messages)

    assert [m for m, _ in results] == messages
    assert all(error is None for _, error in results[:-1])
    assert results[-1][1].kind == ValidationErrorKind.PARSE_ERROR
    assert len(calls) == 1


def test_stats_counts_by_kind_and_reason():
    gate = AdmissionGate(clock=fixed_clock)
    gate.check(chat_message())
    gate.check(chat_message(text=""))
    gate.check(chat_message(clock=0))
    gate.check(RequestAddressForTransaction(clock=NOW_MS, value="abc"))

    stats = gate.stats()
    assert stats["accepted"] == {"CHAT_MESSAGE": 1}
    assert stats["rejected"] == {"CHAT_MESSAGE": 2, "REQUEST_ADDRESS_FOR_TRANSACTION": 1}
    assert stats["reasons"] == {"EmptyField": 1, "ZeroClock": 1, "ParseError": 1}
    assert stats["total"] == 4


def test_non_message_is_not_counted():
    gate = AdmissionGate(clock=fixed_clock)
    with pytest.raises(TypeError):
        gate.check(object())
    assert gate.stats()["total"] == 0


def test_rejection_is_logged_with_context(gate_records):
    gate = AdmissionGate(clock=fixed_clock)
    gate.check(chat_message(text=""))

    records = [r for r in gate_records.records if r.name == "admission.gate"]
    assert len(records) == 1
    record = records[0]
    assert record.levelno == logging.WARNING
    assert record.msg_kind == "CHAT_MESSAGE"
    assert record.reason == "EmptyField"
    assert record.field == "text"
    assert record.clock == NOW_MS
    assert "text can't be empty" in record.getMessage()


def test_accepted_messages_silent_by_default(gate_records):
    AdmissionGate(clock=fixed_clock).check(chat_message())
    assert [r for r in gate_records.records if r.name == "admission.gate"] == []


def test_accepted_messages_logged_when_configured(gate_records):
    gate = AdmissionGate(AdmissionConfig(log_accepted=True), clock=fixed_clock)
    gate.check(chat_message())
    records = [r for r in gate_records.records if r.name == "admission.gate"]
    assert len(records) == 1
    assert records[0].levelno == logging.DEBUG


def test_gate_shared_across_threads():
    gate = AdmissionGate(clock=fixed_clock)

    def worker():
        for _ in range(200):
            gate.check(chat_message())

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert gate.stats()["accepted"] == {"CHAT_MESSAGE": 800}
