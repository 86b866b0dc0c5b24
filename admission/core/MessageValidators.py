from __future__ import annotations

from typing import Any, Callable, Dict, Optional, Set

from admission.core.ClockValidator import validate_clock, validate_future_drift
from admission.core.MessageKinds import (
    DISALLOWED_CONTENT_TYPES,
    DISALLOWED_MESSAGE_TYPES,
    ContentType,
    MessageKind,
)
from admission.core.Messages import (
    MESSAGE_CLASSES,
    AcceptRequestAddressForTransaction,
    ChatMessage,
    DeclineRequestAddressForTransaction,
    DeclineRequestTransaction,
    MembershipUpdateMessage,
    Message,
    PairInstallation,
    RequestAddressForTransaction,
    RequestTransaction,
    SendTransaction,
)
from admission.core.ValidationErrors import ValidationError
from shared.utils import is_blank, is_empty, parse_decimal

# Type alias for validator functions
MessageValidator = Callable[[Any, int], Optional[ValidationError]]


class GenericValidators:
    """
    Generic reusable field checks.
    Each returns None when the field is acceptable, else the verdict.
    """

    @staticmethod
    def non_blank(value: str, field: str) -> Optional[ValidationError]:
        """Human-entered text: trimmed value must not be empty."""
        if is_blank(value):
            return ValidationError.empty_field(field, f"{field.replace('_', ' ')} can't be empty")
        return None

    @staticmethod
    def non_empty_id(value: str, field: str) -> Optional[ValidationError]:
        """Identifiers: zero length only, whitespace is content."""
        if is_empty(value):
            return ValidationError.empty_field(field, "messageID can't be empty")
        return None

    @staticmethod
    def decimal(value: str, field: str) -> Optional[ValidationError]:
        """Must parse as a base-10 float; surfaces the parser's own message."""
        try:
            parse_decimal(value)
        except ValueError as exc:
            return ValidationError.parse_error(field, exc)
        return None

    @staticmethod
    def not_disallowed(
        value: int,
        field: str,
        disallowed: Set[Any],
        detail: str,
    ) -> Optional[ValidationError]:
        """
        Membership test only. Numbers this build does not know about pass,
        so content from newer peers is not dropped.
        """
        if value in disallowed:
            return ValidationError.invalid_enum(field, detail)
        return None


class MessageValidators:
    """
    One validator per message kind.

    Every validator runs the clock check first and then the kind's field
    checks in a fixed order, returning the first failure. None means accept.
    """

    @staticmethod
    def validate_pair_installation(message: PairInstallation, reference: int) -> Optional[ValidationError]:
        return (
            validate_clock(message.clock, reference)
            or GenericValidators.non_blank(message.name, "name")
            or GenericValidators.non_blank(message.device_type, "device_type")
            or GenericValidators.non_blank(message.installation_id, "installation_id")
        )

    @staticmethod
    def validate_send_transaction(message: SendTransaction, reference: int) -> Optional[ValidationError]:
        error = (
            validate_clock(message.clock, reference)
            or GenericValidators.non_blank(message.transaction_hash, "transaction_hash")
        )
        if error:
            return error
        if message.signature is None:
            return ValidationError.missing_payload("signature", "signature can't be nil")
        return None

    @staticmethod
    def validate_request_address_for_transaction(
        message: RequestAddressForTransaction, reference: int
    ) -> Optional[ValidationError]:
        return (
            validate_clock(message.clock, reference)
            or GenericValidators.non_blank(message.value, "value")
            or GenericValidators.decimal(message.value, "value")
        )

    @staticmethod
    def validate_request_transaction(message: RequestTransaction, reference: int) -> Optional[ValidationError]:
        # Address is checked before the value is parsed
        return (
            validate_clock(message.clock, reference)
            or GenericValidators.non_blank(message.value, "value")
            or GenericValidators.non_blank(message.address, "address")
            or GenericValidators.decimal(message.value, "value")
        )

    @staticmethod
    def validate_accept_request_address_for_transaction(
        message: AcceptRequestAddressForTransaction, reference: int
    ) -> Optional[ValidationError]:
        return (
            validate_clock(message.clock, reference)
            or GenericValidators.non_empty_id(message.id, "id")
            or GenericValidators.non_blank(message.address, "address")
        )

    @staticmethod
    def validate_decline_request_address_for_transaction(
        message: DeclineRequestAddressForTransaction, reference: int
    ) -> Optional[ValidationError]:
        return (
            validate_clock(message.clock, reference)
            or GenericValidators.non_empty_id(message.id, "id")
        )

    @staticmethod
    def validate_decline_request_transaction(
        message: DeclineRequestTransaction, reference: int
    ) -> Optional[ValidationError]:
        return (
            validate_clock(message.clock, reference)
            or GenericValidators.non_empty_id(message.id, "id")
        )

    @staticmethod
    def validate_chat_message(message: ChatMessage, reference: int) -> Optional[ValidationError]:
        error = validate_clock(message.clock, reference)
        if error:
            return error

        if message.timestamp == 0:
            return ValidationError.empty_field("timestamp", "timestamp can't be 0")

        error = GenericValidators.non_blank(message.text, "text")
        if error:
            return error

        if is_empty(message.chat_id):
            return ValidationError.empty_field("chat_id", "chatId can't be empty")

        error = (
            GenericValidators.not_disallowed(
                message.content_type, "content_type",
                {ContentType.UNKNOWN_CONTENT_TYPE}, "unknown content type",
            )
            # Transaction commands are only ever created locally
            or GenericValidators.not_disallowed(
                message.content_type, "content_type",
                DISALLOWED_CONTENT_TYPES, "can't receive request address for transaction from others",
            )
            or GenericValidators.not_disallowed(
                message.message_type, "message_type",
                DISALLOWED_MESSAGE_TYPES, "unknown message type",
            )
        )
        if error:
            return error

        if message.content_type == ContentType.STICKER:
            return MessageValidators._validate_sticker(message)

        return None

    @staticmethod
    def _validate_sticker(message: ChatMessage) -> Optional[ValidationError]:
        if message.payload is None:
            return ValidationError.missing_payload("payload", "no sticker content")
        sticker = message.get_sticker()
        if sticker is None:
            return ValidationError.missing_payload("sticker", "no sticker content")
        if is_empty(sticker.hash):
            return ValidationError.missing_payload("sticker.hash", "sticker hash not set")
        return None

    @staticmethod
    def validate_membership_update_message(
        message: MembershipUpdateMessage, now: int
    ) -> Optional[ValidationError]:
        """
        Relayed without the original transport timestamp, so only a future
        bound against the local clock applies. Old events always pass.
        """
        return validate_future_drift((event.clock for event in message.events), now)


# Validator registry mapping message kinds to their validators
VALIDATOR_REGISTRY: Dict[MessageKind, MessageValidator] = {
    MessageKind.PAIR_INSTALLATION: MessageValidators.validate_pair_installation,
    MessageKind.SEND_TRANSACTION: MessageValidators.validate_send_transaction,
    MessageKind.REQUEST_ADDRESS_FOR_TRANSACTION: MessageValidators.validate_request_address_for_transaction,
    MessageKind.REQUEST_TRANSACTION: MessageValidators.validate_request_transaction,
    MessageKind.ACCEPT_REQUEST_ADDRESS_FOR_TRANSACTION: MessageValidators.validate_accept_request_address_for_transaction,
    MessageKind.DECLINE_REQUEST_ADDRESS_FOR_TRANSACTION: MessageValidators.validate_decline_request_address_for_transaction,
    MessageKind.DECLINE_REQUEST_TRANSACTION: MessageValidators.validate_decline_request_transaction,
    MessageKind.CHAT_MESSAGE: MessageValidators.validate_chat_message,
    # reference is the local "now" for relayed membership events
    MessageKind.MEMBERSHIP_UPDATE_MESSAGE: MessageValidators.validate_membership_update_message,
}


def validate_message(message: Message, reference: int) -> Optional[ValidationError]:
    """
    Validate any inbound message through the validator for its kind.

    Args:
        message: one of the nine decoded message dataclasses
        reference: transport receipt time in epoch ms (local now for
            membership updates)

    Returns:
        None to accept, otherwise the first failing check's verdict

    Raises:
        TypeError: if ``message`` is not a known message dataclass
    """
    kind = getattr(type(message), "KIND", None)
    if kind not in VALIDATOR_REGISTRY or MESSAGE_CLASSES.get(kind) is not type(message):
        raise TypeError(f"Not an inbound message: {type(message).__name__}")

    return VALIDATOR_REGISTRY[kind](message, reference)
