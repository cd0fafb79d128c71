"""Card model: PIN lockout and balance state machine."""

import re
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from decimal import Decimal

from atm_ledger.exceptions import InvalidCardStateError
from atm_ledger.models.enums import CardState, ErrorKind

CARD_NUMBER_PATTERN = re.compile(r"\d{4}(-\d{4}){3}", re.ASCII)
PIN_PATTERN = re.compile(r"\d{4}", re.ASCII)

MAX_PIN_ATTEMPTS = 3
UNLOCK_AFTER = timedelta(hours=24)
DEPOSIT_CEILING = Decimal("1000000")
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def is_valid_card_number(number: str) -> bool:
    """Check the XXXX-XXXX-XXXX-XXXX card number format."""
    return CARD_NUMBER_PATTERN.fullmatch(number) is not None


def is_valid_pin(pin: str) -> bool:
    """Check that a PIN is exactly four digits."""
    return PIN_PATTERN.fullmatch(pin) is not None


@dataclass(frozen=True)
class Card:
    """Card account record.

    Cards are immutable values: every transition returns a new ``Card`` and
    leaves the receiver untouched, so a caller either sees the whole
    transition or none of it.

    - ACTIVE: ``failed_attempts`` counts consecutive wrong PINs (0-2)
    - BLOCKED: ``blocked_at`` records when the lock started

    ``failed_attempts`` is session state and is excluded from equality;
    two cards are equal when their persisted fields match.
    """

    number: str
    pin: str
    balance: Decimal
    blocked: bool = False
    blocked_at: datetime | None = None
    failed_attempts: int = field(default=0, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.balance, Decimal):
            object.__setattr__(self, "balance", Decimal(str(self.balance)))
        if self.balance < 0:
            raise InvalidCardStateError(f"Card {self.number} balance cannot be negative")
        if self.blocked != (self.blocked_at is not None):
            raise InvalidCardStateError(
                f"Card {self.number} must have a block time if and only if it is blocked"
            )
        if not 0 <= self.failed_attempts < MAX_PIN_ATTEMPTS:
            raise InvalidCardStateError(
                f"Card {self.number} failed attempts out of range: {self.failed_attempts}"
            )
        if self.blocked and self.failed_attempts:
            raise InvalidCardStateError(f"Card {self.number} is blocked with pending attempts")

    @property
    def state(self) -> CardState:
        return CardState.BLOCKED if self.blocked else CardState.ACTIVE

    def check_pin(self, candidate: str, now: datetime) -> "PinCheck":
        """Check a PIN and advance the lockout counter.

        A blocked card rejects every candidate without changing state.
        The third consecutive failure blocks the card at ``now``.
        """
        if self.blocked:
            return PinCheck(card=self, ok=False)

        if candidate == self.pin:
            return PinCheck(card=replace(self, failed_attempts=0), ok=True)

        attempts = self.failed_attempts + 1
        if attempts >= MAX_PIN_ATTEMPTS:
            return PinCheck(card=self.force_block(now), ok=False, just_blocked=True)
        return PinCheck(card=replace(self, failed_attempts=attempts), ok=False)

    def withdraw(self, amount: Decimal) -> "CardOperation":
        """Take ``amount`` off the balance."""
        if not amount.is_finite() or amount <= 0:
            return CardOperation(card=self, error=ErrorKind.INVALID_AMOUNT)
        if self.blocked:
            return CardOperation(card=self, error=ErrorKind.CARD_BLOCKED)
        if amount > self.balance:
            return CardOperation(card=self, error=ErrorKind.INSUFFICIENT_FUNDS)
        return CardOperation(card=replace(self, balance=self.balance - amount))

    def deposit(self, amount: Decimal) -> "CardOperation":
        """Add ``amount`` (at most ``DEPOSIT_CEILING``) to the balance."""
        if not amount.is_finite() or amount <= 0 or amount > DEPOSIT_CEILING:
            return CardOperation(card=self, error=ErrorKind.INVALID_AMOUNT)
        if self.blocked:
            return CardOperation(card=self, error=ErrorKind.CARD_BLOCKED)
        return CardOperation(card=replace(self, balance=self.balance + amount))

    def is_unlockable(self, now: datetime) -> bool:
        """Return True once a block is at least ``UNLOCK_AFTER`` old."""
        if not self.blocked or self.blocked_at is None:
            return False
        return now - self.blocked_at >= UNLOCK_AFTER

    def unlock(self) -> "Card":
        """Return the card active with a clean attempt counter."""
        return replace(self, blocked=False, blocked_at=None, failed_attempts=0)

    def force_block(self, now: datetime) -> "Card":
        """Return the card blocked since ``now``.

        An already blocked card keeps its original block time.
        """
        if self.blocked:
            return self
        return replace(
            self,
            blocked=True,
            blocked_at=now.replace(microsecond=0),
            failed_attempts=0,
        )

    def __str__(self) -> str:
        if self.blocked and self.blocked_at is not None:
            block_info = f"Blocked since {self.blocked_at.strftime(TIMESTAMP_FORMAT)}"
        else:
            block_info = "Not blocked"
        return f"Card: {self.number}, PIN Code: {self.pin}, Balance: {self.balance}, {block_info}"


@dataclass(frozen=True)
class PinCheck:
    """Outcome of a single PIN check."""

    card: Card
    ok: bool
    just_blocked: bool = False  # this check tripped the lockout


@dataclass(frozen=True)
class CardOperation:
    """Outcome of a balance operation on a single card."""

    card: Card
    error: ErrorKind | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
