"""Enumeration types for card ledger entities."""

from enum import Enum


class CardState(str, Enum):
    ACTIVE = "ACTIVE"
    BLOCKED = "BLOCKED"


class ErrorKind(str, Enum):
    INVALID_CARD_NUMBER_FORMAT = "INVALID_CARD_NUMBER_FORMAT"
    INVALID_PIN_FORMAT = "INVALID_PIN_FORMAT"
    DUPLICATE_CARD_NUMBER = "DUPLICATE_CARD_NUMBER"
    CARD_NOT_FOUND = "CARD_NOT_FOUND"
    CARD_BLOCKED = "CARD_BLOCKED"
    INCORRECT_PIN = "INCORRECT_PIN"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
    PERSISTENCE_WRITE_FAILURE = "PERSISTENCE_WRITE_FAILURE"
