from __future__ import annotations

from enum import Enum, IntEnum
from typing import Dict, Set, Tuple


class MessageKind(str, Enum):
    """Inbound message kinds that pass through the admission gate."""

    # Device pairing
    PAIR_INSTALLATION = "PAIR_INSTALLATION"

    # Transaction commands exchanged inside a one-to-one chat
    SEND_TRANSACTION = "SEND_TRANSACTION"
    REQUEST_ADDRESS_FOR_TRANSACTION = "REQUEST_ADDRESS_FOR_TRANSACTION"
    REQUEST_TRANSACTION = "REQUEST_TRANSACTION"
    ACCEPT_REQUEST_ADDRESS_FOR_TRANSACTION = "ACCEPT_REQUEST_ADDRESS_FOR_TRANSACTION"
    DECLINE_REQUEST_ADDRESS_FOR_TRANSACTION = "DECLINE_REQUEST_ADDRESS_FOR_TRANSACTION"
    DECLINE_REQUEST_TRANSACTION = "DECLINE_REQUEST_TRANSACTION"

    # Chat
    CHAT_MESSAGE = "CHAT_MESSAGE"

    # Private group membership (relayed events)
    MEMBERSHIP_UPDATE_MESSAGE = "MEMBERSHIP_UPDATE_MESSAGE"

    @classmethod
    def from_string(cls, value: str) -> MessageKind:
        """Convert string to MessageKind enum, raise ValueError if unknown."""
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Unknown message kind: {value}")

    @classmethod
    def is_valid(cls, value: str) -> bool:
        """Check if string is a valid message kind."""
        try:
            cls(value)
            return True
        except ValueError:
            return False


class ContentType(IntEnum):
    """ChatMessage content types as numbered on the wire."""
    UNKNOWN_CONTENT_TYPE = 0
    TEXT_PLAIN = 1
    STICKER = 2
    STATUS = 3
    EMOJI = 4
    TRANSACTION_COMMAND = 5
    SYSTEM_MESSAGE_CONTENT_PRIVATE_GROUP = 6
    IMAGE = 7
    AUDIO = 8


class ChatMessageType(IntEnum):
    """ChatMessage message types as numbered on the wire."""
    UNKNOWN_MESSAGE_TYPE = 0
    ONE_TO_ONE = 1
    PUBLIC_GROUP = 2
    PRIVATE_GROUP = 3
    SYSTEM_MESSAGE_PRIVATE_GROUP = 4


class MembershipEventType(IntEnum):
    """Private group membership event types."""
    UNKNOWN = 0
    CHAT_CREATED = 1
    NAME_CHANGED = 2
    MEMBERS_ADDED = 3
    MEMBER_JOINED = 4
    MEMBER_REMOVED = 5
    ADMINS_ADDED = 6
    ADMIN_REMOVED = 7


# Content types a peer may never send us
DISALLOWED_CONTENT_TYPES: Set[ContentType] = {
    ContentType.UNKNOWN_CONTENT_TYPE,
    ContentType.TRANSACTION_COMMAND,  # only ever generated locally
}

# Message types a peer may never send as ordinary chat
DISALLOWED_MESSAGE_TYPES: Set[ChatMessageType] = {
    ChatMessageType.UNKNOWN_MESSAGE_TYPE,
    ChatMessageType.SYSTEM_MESSAGE_PRIVATE_GROUP,
}

# Kinds whose clock is compared against the transport timestamp in both directions.
# Membership events are relayed without that timestamp and only get a future bound.
TRANSPORT_CLOCKED_KINDS: Set[MessageKind] = set(MessageKind) - {MessageKind.MEMBERSHIP_UPDATE_MESSAGE}

# Required fields per kind, in the order they are checked
REQUIRED_FIELDS: Dict[MessageKind, Tuple[str, ...]] = {
    MessageKind.PAIR_INSTALLATION: ("name", "device_type", "installation_id"),
    MessageKind.SEND_TRANSACTION: ("transaction_hash", "signature"),
    MessageKind.REQUEST_ADDRESS_FOR_TRANSACTION: ("value",),
    MessageKind.REQUEST_TRANSACTION: ("value", "address"),
    MessageKind.ACCEPT_REQUEST_ADDRESS_FOR_TRANSACTION: ("id", "address"),
    MessageKind.DECLINE_REQUEST_ADDRESS_FOR_TRANSACTION: ("id",),
    MessageKind.DECLINE_REQUEST_TRANSACTION: ("id",),
    MessageKind.CHAT_MESSAGE: ("timestamp", "text", "chat_id", "content_type", "message_type"),
    MessageKind.MEMBERSHIP_UPDATE_MESSAGE: ("events",),
}
