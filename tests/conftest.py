import logging

import pytest

from admission.core.MessageKinds import ChatMessageType, ContentType
from admission.core.Messages import (
    AcceptRequestAddressForTransaction,
    ChatMessage,
    DeclineRequestAddressForTransaction,
    DeclineRequestTransaction,
    MembershipUpdateEvent,
    MembershipUpdateMessage,
    PairInstallation,
    RequestAddressForTransaction,
    RequestTransaction,
    SendTransaction,
    StickerMessage,
)


# Fixed reference so drift arithmetic in tests is exact
NOW_MS = 1_700_000_000_000


def chat_message(**overrides) -> ChatMessage:
    fields = dict(
        clock=NOW_MS,
        timestamp=NOW_MS,
        text="hello",
        chat_id="c1",
        content_type=ContentType.TEXT_PLAIN,
        message_type=ChatMessageType.ONE_TO_ONE,
    )
    fields.update(overrides)
    return ChatMessage(**fields)


def sticker_message(**overrides) -> ChatMessage:
    fields = dict(content_type=ContentType.STICKER, payload=StickerMessage(hash="e3010170", pack=1))
    fields.update(overrides)
    return chat_message(**fields)


def membership_update(*clocks: int) -> MembershipUpdateMessage:
    return MembershipUpdateMessage(events=[MembershipUpdateEvent(clock=c) for c in clocks], chat_id="g1")


def valid_messages():
    """One acceptable message of every kind, all clocked at NOW_MS."""
    return [
        PairInstallation(clock=NOW_MS, name="dev", device_type="mobile", installation_id="abc"),
        SendTransaction(clock=NOW_MS, transaction_hash="0xdeadbeef", signature=b"\x01\x02"),
        RequestAddressForTransaction(clock=NOW_MS, value="1.5"),
        RequestTransaction(clock=NOW_MS, value="2", address="0xabc"),
        AcceptRequestAddressForTransaction(clock=NOW_MS, id="msg-1", address="0xabc"),
        DeclineRequestAddressForTransaction(clock=NOW_MS, id="msg-1"),
        DeclineRequestTransaction(clock=NOW_MS, id="msg-1"),
        chat_message(),
        membership_update(NOW_MS),
    ]


@pytest.fixture
def gate_records(caplog):
    """Capture records from the gate logger, which does not propagate to root."""
    gate_logger = logging.getLogger("admission.gate")
    gate_logger.addHandler(caplog.handler)
    caplog.set_level(logging.DEBUG, logger="admission.gate")
    yield caplog
    gate_logger.removeHandler(caplog.handler)
