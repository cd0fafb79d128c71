"""Line codec for the flat-file card store.

One card per line, space separated::

    <number> <pin> <balance> true <yyyy-mm-dd> <HH:MM:SS>
    <number> <pin> <balance> false null
"""

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from atm_ledger.exceptions import InvalidCardStateError, MalformedRecordError
from atm_ledger.models.card import TIMESTAMP_FORMAT, Card, is_valid_card_number, is_valid_pin

NULL_TOKEN = "null"


def card_to_line(card: Card) -> str:
    """Encode a card as a store line (without the trailing newline)."""
    fields = [card.number, card.pin, card.balance, card.blocked, card.blocked_at]
    return " ".join(serialize_value(value) for value in fields)


def card_from_line(line: str) -> Card:
    """Decode a store line into a card.

    Raises
    ------
    MalformedRecordError
        If the line does not hold a valid card record.
    """
    parts = line.split()
    if len(parts) < 5:
        raise MalformedRecordError(f"expected at least 5 fields, got {len(parts)}")

    number, pin, raw_balance, raw_blocked = parts[:4]
    if not is_valid_card_number(number):
        raise MalformedRecordError(f"invalid card number {number!r}")
    if not is_valid_pin(pin):
        raise MalformedRecordError(f"invalid PIN for card {number}")

    balance = _parse_balance(raw_balance)

    if raw_blocked == "false":
        if parts[4:] != [NULL_TOKEN]:
            raise MalformedRecordError(f"unblocked card {number} must end with 'null'")
        blocked_at = None
    elif raw_blocked == "true":
        if len(parts) != 6:
            raise MalformedRecordError(f"blocked card {number} needs a date and a time")
        blocked_at = _parse_timestamp(f"{parts[4]} {parts[5]}")
    else:
        raise MalformedRecordError(f"blocked flag must be true or false, got {raw_blocked!r}")

    try:
        return Card(
            number=number,
            pin=pin,
            balance=balance,
            blocked=blocked_at is not None,
            blocked_at=blocked_at,
        )
    except InvalidCardStateError as e:
        raise MalformedRecordError(str(e)) from e


def serialize_value(value: Any) -> str:
    """Serialize a field value as a store token."""
    if value is None:
        return NULL_TOKEN
    elif isinstance(value, bool):
        return "true" if value else "false"
    elif isinstance(value, datetime):
        return value.strftime(TIMESTAMP_FORMAT)
    return str(value)


def _parse_balance(raw: str) -> Decimal:
    try:
        balance = Decimal(raw)
    except InvalidOperation as e:
        raise MalformedRecordError(f"invalid balance {raw!r}") from e
    if not balance.is_finite():
        raise MalformedRecordError(f"invalid balance {raw!r}")
    return balance


def _parse_timestamp(raw: str) -> datetime:
    try:
        return datetime.strptime(raw, TIMESTAMP_FORMAT)
    except ValueError as e:
        raise MalformedRecordError(f"invalid block time {raw!r}") from e
