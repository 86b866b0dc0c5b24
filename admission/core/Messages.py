from __future__ import annotations
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Callable, ClassVar, Dict, List, Optional, Type, TypeVar, Union

from admission.core.MessageKinds import ChatMessageType, ContentType, MembershipEventType, MessageKind
from shared.utils import b64url_decode, is_base64url

U64_MAX = 2 ** 64 - 1


class MalformedMessageError(ValueError):
    """Raised when a decoded JSON object cannot be turned into a message."""
    pass


# ========================================
#           CHAT PAYLOADS
# ========================================

@dataclass
class StickerMessage:
    hash: str
    pack: int = 0


@dataclass
class ImageMessage:
    payload: bytes
    type: int = 0


@dataclass
class AudioMessage:
    payload: bytes
    type: int = 0
    duration_ms: int = 0


# One-of carried by ChatMessage.payload
ChatPayload = Union[StickerMessage, ImageMessage, AudioMessage]


# ========================================
#           MESSAGE KINDS
# ========================================

@dataclass
class PairInstallation:
    KIND: ClassVar[MessageKind] = MessageKind.PAIR_INSTALLATION
    clock: int
    name: str
    device_type: str
    installation_id: str


@dataclass
class SendTransaction:
    KIND: ClassVar[MessageKind] = MessageKind.SEND_TRANSACTION
    clock: int
    transaction_hash: str
    signature: Optional[bytes] = None
    value: str = ""
    contract: str = ""
    chat_id: str = ""


@dataclass
class RequestAddressForTransaction:
    KIND: ClassVar[MessageKind] = MessageKind.REQUEST_ADDRESS_FOR_TRANSACTION
    clock: int
    value: str
    contract: str = ""
    chat_id: str = ""


@dataclass
class RequestTransaction:
    KIND: ClassVar[MessageKind] = MessageKind.REQUEST_TRANSACTION
    clock: int
    value: str
    address: str
    contract: str = ""
    chat_id: str = ""


@dataclass
class AcceptRequestAddressForTransaction:
    KIND: ClassVar[MessageKind] = MessageKind.ACCEPT_REQUEST_ADDRESS_FOR_TRANSACTION
    clock: int
    id: str                 # id of the request being answered
    address: str
    chat_id: str = ""


@dataclass
class DeclineRequestAddressForTransaction:
    KIND: ClassVar[MessageKind] = MessageKind.DECLINE_REQUEST_ADDRESS_FOR_TRANSACTION
    clock: int
    id: str
    chat_id: str = ""


@dataclass
class DeclineRequestTransaction:
    KIND: ClassVar[MessageKind] = MessageKind.DECLINE_REQUEST_TRANSACTION
    clock: int
    id: str
    chat_id: str = ""


@dataclass
class ChatMessage:
    """
    Chat text plus optional rich payload.

    content_type / message_type are plain ints so that values a newer peer
    sends (or garbage) survive decoding and are judged by the validator.
    """
    KIND: ClassVar[MessageKind] = MessageKind.CHAT_MESSAGE
    clock: int
    timestamp: int          # sender wall clock, ms
    text: str
    chat_id: str
    content_type: int
    message_type: int
    payload: Optional[ChatPayload] = None
    response_to: str = ""
    ens_name: str = ""

    def get_sticker(self) -> Optional[StickerMessage]:
        """The sticker sub-message, if the payload is one."""
        if isinstance(self.payload, StickerMessage):
            return self.payload
        return None


@dataclass
class MembershipUpdateEvent:
    clock: int
    type: int = MembershipEventType.UNKNOWN
    members: List[str] = field(default_factory=list)
    name: str = ""


@dataclass
class MembershipUpdateMessage:
    KIND: ClassVar[MessageKind] = MessageKind.MEMBERSHIP_UPDATE_MESSAGE
    events: List[MembershipUpdateEvent] = field(default_factory=list)
    chat_id: str = ""


Message = Union[
    PairInstallation,
    SendTransaction,
    RequestAddressForTransaction,
    RequestTransaction,
    AcceptRequestAddressForTransaction,
    DeclineRequestAddressForTransaction,
    DeclineRequestTransaction,
    ChatMessage,
    MembershipUpdateMessage,
]

MESSAGE_CLASSES: Dict[MessageKind, Type[Any]] = {
    cls.KIND: cls
    for cls in (
        PairInstallation,
        SendTransaction,
        RequestAddressForTransaction,
        RequestTransaction,
        AcceptRequestAddressForTransaction,
        DeclineRequestAddressForTransaction,
        DeclineRequestTransaction,
        ChatMessage,
        MembershipUpdateMessage,
    )
}


# ========================================
#           DICT CONSTRUCTION
# ========================================

def message_from_dict(data: Dict[str, Any]) -> Message:
    """
    Build a message from an already-decoded JSON object.

    The object names its kind under "kind"; remaining keys are the message's
    fields. Only structure is checked here (keys present, JSON types right).
    Whether the values are acceptable is decided by the validators.

    Raises:
        MalformedMessageError
    """
    if not isinstance(data, dict):
        raise MalformedMessageError("message must be a JSON object")
    if 'kind' not in data:
        raise MalformedMessageError("Missing required field: 'kind'")
    if not isinstance(data['kind'], str) or not MessageKind.is_valid(data['kind']):
        raise MalformedMessageError(f"Unknown message kind: {data['kind']!r}")

    kind = MessageKind(data['kind'])
    return _BUILDERS[kind](data)


def _require(data: Dict[str, Any], key: str) -> Any:
    if key not in data:
        raise MalformedMessageError(f"Missing required field: {key!r}")
    return data[key]


def _str(data: Dict[str, Any], key: str, default: Optional[str] = None) -> str:
    value = data.get(key, default) if default is not None else _require(data, key)
    if not isinstance(value, str):
        raise MalformedMessageError(f"{key!r} must be a string")
    return value


def _u64(data: Dict[str, Any], key: str, default: Optional[int] = None) -> int:
    value = data.get(key, default) if default is not None else _require(data, key)
    # bool is an int subclass; JSON true/false is not a number
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedMessageError(f"{key!r} must be an integer")
    if not 0 <= value <= U64_MAX:
        raise MalformedMessageError(f"{key!r} must fit in an unsigned 64-bit integer")
    return value


_E = TypeVar("_E", bound=IntEnum)


def _enum(data: Dict[str, Any], key: str, enum_cls: Type[_E], default: Optional[int] = None) -> int:
    """Accept the member name or the raw wire number. Unknown numbers pass through."""
    value = data.get(key, default) if default is not None else _require(data, key)
    if isinstance(value, str):
        try:
            return enum_cls[value]
        except KeyError:
            raise MalformedMessageError(f"{key!r}: unknown {enum_cls.__name__} {value!r}")
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedMessageError(f"{key!r} must be a {enum_cls.__name__} name or number")
    return value


def _bytes(value: Any, key: str) -> bytes:
    if not isinstance(value, str):
        raise MalformedMessageError(f"{key!r} must be a base64url string")
    if value == "":
        return b""
    if not is_base64url(value):
        raise MalformedMessageError(f"{key!r} must be valid base64url")
    try:
        return b64url_decode(value)
    except ValueError as e:
        raise MalformedMessageError(f"{key!r} must be valid base64url: {e}") from e


def _chat_payload(data: Dict[str, Any]) -> Optional[ChatPayload]:
    raw = data.get('payload')
    if raw is None:
        return None
    if not isinstance(raw, dict) or len(raw) != 1:
        raise MalformedMessageError("'payload' must be an object with exactly one of: sticker, image, audio")

    (variant, body), = raw.items()
    if not isinstance(body, dict):
        raise MalformedMessageError(f"'payload.{variant}' must be an object")

    if variant == 'sticker':
        return StickerMessage(hash=_str(body, 'hash'), pack=_u64(body, 'pack', 0))
    if variant == 'image':
        return ImageMessage(payload=_bytes(_require(body, 'payload'), 'payload'), type=_u64(body, 'type', 0))
    if variant == 'audio':
        return AudioMessage(
            payload=_bytes(_require(body, 'payload'), 'payload'),
            type=_u64(body, 'type', 0),
            duration_ms=_u64(body, 'duration_ms', 0),
        )
    raise MalformedMessageError(f"Unknown chat payload variant: {variant!r}")


def _pair_installation(data: Dict[str, Any]) -> PairInstallation:
    return PairInstallation(
        clock=_u64(data, 'clock'),
        name=_str(data, 'name'),
        device_type=_str(data, 'device_type'),
        installation_id=_str(data, 'installation_id'),
    )


def _send_transaction(data: Dict[str, Any]) -> SendTransaction:
    raw_sig = data.get('signature')
    return SendTransaction(
        clock=_u64(data, 'clock'),
        transaction_hash=_str(data, 'transaction_hash'),
        signature=None if raw_sig is None else _bytes(raw_sig, 'signature'),
        value=_str(data, 'value', ""),
        contract=_str(data, 'contract', ""),
        chat_id=_str(data, 'chat_id', ""),
    )


def _request_address_for_transaction(data: Dict[str, Any]) -> RequestAddressForTransaction:
    return RequestAddressForTransaction(
        clock=_u64(data, 'clock'),
        value=_str(data, 'value'),
        contract=_str(data, 'contract', ""),
        chat_id=_str(data, 'chat_id', ""),
    )


def _request_transaction(data: Dict[str, Any]) -> RequestTransaction:
    return RequestTransaction(
        clock=_u64(data, 'clock'),
        value=_str(data, 'value'),
        address=_str(data, 'address'),
        contract=_str(data, 'contract', ""),
        chat_id=_str(data, 'chat_id', ""),
    )


def _accept_request_address_for_transaction(data: Dict[str, Any]) -> AcceptRequestAddressForTransaction:
    return AcceptRequestAddressForTransaction(
        clock=_u64(data, 'clock'),
        id=_str(data, 'id'),
        address=_str(data, 'address'),
        chat_id=_str(data, 'chat_id', ""),
    )


def _decline_request_address_for_transaction(data: Dict[str, Any]) -> DeclineRequestAddressForTransaction:
    return DeclineRequestAddressForTransaction(
        clock=_u64(data, 'clock'),
        id=_str(data, 'id'),
        chat_id=_str(data, 'chat_id', ""),
    )


def _decline_request_transaction(data: Dict[str, Any]) -> DeclineRequestTransaction:
    return DeclineRequestTransaction(
        clock=_u64(data, 'clock'),
        id=_str(data, 'id'),
        chat_id=_str(data, 'chat_id', ""),
    )


def _chat_message(data: Dict[str, Any]) -> ChatMessage:
    return ChatMessage(
        clock=_u64(data, 'clock'),
        timestamp=_u64(data, 'timestamp'),
        text=_str(data, 'text'),
        chat_id=_str(data, 'chat_id'),
        content_type=_enum(data, 'content_type', ContentType),
        message_type=_enum(data, 'message_type', ChatMessageType),
        payload=_chat_payload(data),
        response_to=_str(data, 'response_to', ""),
        ens_name=_str(data, 'ens_name', ""),
    )


def _membership_update_message(data: Dict[str, Any]) -> MembershipUpdateMessage:
    raw_events = _require(data, 'events')
    if not isinstance(raw_events, list):
        raise MalformedMessageError("'events' must be a list")

    events = []
    for index, raw in enumerate(raw_events):
        if not isinstance(raw, dict):
            raise MalformedMessageError(f"'events[{index}]' must be an object")
        members = raw.get('members', [])
        if not isinstance(members, list) or not all(isinstance(m, str) for m in members):
            raise MalformedMessageError(f"'events[{index}].members' must be a list of strings")
        events.append(MembershipUpdateEvent(
            clock=_u64(raw, 'clock'),
            type=_enum(raw, 'type', MembershipEventType, MembershipEventType.UNKNOWN),
            members=list(members),
            name=_str(raw, 'name', ""),
        ))

    return MembershipUpdateMessage(events=events, chat_id=_str(data, 'chat_id', ""))


_BUILDERS: Dict[MessageKind, Callable[[Dict[str, Any]], Any]] = {
    MessageKind.PAIR_INSTALLATION: _pair_installation,
    MessageKind.SEND_TRANSACTION: _send_transaction,
    MessageKind.REQUEST_ADDRESS_FOR_TRANSACTION: _request_address_for_transaction,
    MessageKind.REQUEST_TRANSACTION: _request_transaction,
    MessageKind.ACCEPT_REQUEST_ADDRESS_FOR_TRANSACTION: _accept_request_address_for_transaction,
    MessageKind.DECLINE_REQUEST_ADDRESS_FOR_TRANSACTION: _decline_request_address_for_transaction,
    MessageKind.DECLINE_REQUEST_TRANSACTION: _decline_request_transaction,
    MessageKind.CHAT_MESSAGE: _chat_message,
    MessageKind.MEMBERSHIP_UPDATE_MESSAGE: _membership_update_message,
}
