"""Card ledger domain models."""

from atm_ledger.models.card import (
    DEPOSIT_CEILING,
    MAX_PIN_ATTEMPTS,
    UNLOCK_AFTER,
    Card,
    CardOperation,
    PinCheck,
    is_valid_card_number,
    is_valid_pin,
)
from atm_ledger.models.enums import CardState, ErrorKind
from atm_ledger.models.results import OperationResult, SessionAuthBudget

__all__ = [
    "DEPOSIT_CEILING",
    "MAX_PIN_ATTEMPTS",
    "UNLOCK_AFTER",
    "Card",
    "CardOperation",
    "CardState",
    "ErrorKind",
    "OperationResult",
    "PinCheck",
    "SessionAuthBudget",
    "is_valid_card_number",
    "is_valid_pin",
]
