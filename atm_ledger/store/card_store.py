"""Card store: lookup, PIN retry budget, auto-unlock sweep and persistence."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Callable, Iterator

from atm_ledger.clock import Clock, SystemClock
from atm_ledger.exceptions import PersistenceWriteError
from atm_ledger.models.card import Card, CardOperation, is_valid_card_number, is_valid_pin
from atm_ledger.models.enums import ErrorKind
from atm_ledger.models.results import OperationResult, SessionAuthBudget
from atm_ledger.sinks.flat_file import FlatFileSink

logger = logging.getLogger(__name__)

# Asked for another PIN after a failure; receives the session attempts left
# (None when the session budget is disabled) and returns None to give up.
RetryPin = Callable[[int | None], str | None]


@dataclass
class CardStore:
    """In-memory card collection kept in sync with a flat file.

    Cards are kept in insertion (or file) order. Every operation reports its
    outcome as an ``OperationResult``; validation and business-rule failures
    are never raised.
    """

    sink: FlatFileSink | None = None
    clock: Clock = field(default_factory=SystemClock)
    cards: dict[str, Card] = field(default_factory=dict)

    @classmethod
    def open(cls, path: str | Path, clock: Clock | None = None) -> "CardStore":
        """Create a store backed by ``path`` and load its cards."""
        store = cls(sink=FlatFileSink(path), clock=clock or SystemClock())
        store.load()
        return store

    def __len__(self) -> int:
        return len(self.cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(list(self.cards.values()))

    def __contains__(self, number: object) -> bool:
        return number in self.cards

    def get_card(self, number: str) -> Card | None:
        return self.cards.get(number)

    def insert(self, card: Card) -> bool:
        """Append an already built card.

        Returns False, leaving the store unchanged, if the number is taken.
        """
        if card.number in self.cards:
            return False
        self.cards[card.number] = card
        return True

    def load(self) -> int:
        """Replace the in-memory cards with the sink's content.

        Later duplicates of a card number are skipped.

        Returns
        -------
        int
            Number of cards loaded.
        """
        self.cards = {}
        if self.sink is None:
            return 0
        for card in self.sink.read_cards():
            if not self.insert(card):
                logger.warning("Skipping duplicate card %s in %s", card.number, self.sink.path)
        logger.info("Loaded %d cards", len(self.cards))
        return len(self.cards)

    def save(self) -> bool | None:
        """Write every card to the sink.

        Returns
        -------
        bool | None
            True when written, False when the write failed (logged, the
            in-memory state is kept), None when the store has no sink.
        """
        if self.sink is None:
            return None
        try:
            self.sink.write_cards(self.cards.values())
        except PersistenceWriteError as e:
            logger.error("Failed to save cards: %s", e)
            return False
        return True

    # Operations
    def add_card(self, number: str, pin: str, balance: Decimal) -> OperationResult:
        """Open a new, unblocked card."""
        if not is_valid_card_number(number):
            return OperationResult.failure(ErrorKind.INVALID_CARD_NUMBER_FORMAT)
        if number in self.cards:
            return OperationResult.failure(ErrorKind.DUPLICATE_CARD_NUMBER)
        if not is_valid_pin(pin):
            return OperationResult.failure(ErrorKind.INVALID_PIN_FORMAT)
        if not balance.is_finite() or balance < 0:
            return OperationResult.failure(ErrorKind.INVALID_AMOUNT)

        card = Card(number=number, pin=pin, balance=balance)
        self.cards[number] = card
        logger.info("Added card %s", number)
        return OperationResult(ok=True, card=card, balance=card.balance, persisted=self.save())

    def get_balance(
        self,
        number: str,
        pin: str,
        budget: SessionAuthBudget | None = None,
        retry: RetryPin | None = None,
    ) -> OperationResult:
        """Authenticate and report the card balance."""
        return self._authenticate(number, pin, budget or SessionAuthBudget(), retry)

    def withdraw(
        self,
        number: str,
        pin: str,
        amount: Decimal,
        budget: SessionAuthBudget | None = None,
        retry: RetryPin | None = None,
    ) -> OperationResult:
        """Authenticate and take ``amount`` off the balance."""
        return self._authenticated_operation(
            number, pin, budget, retry, lambda card: card.withdraw(amount)
        )

    def deposit(
        self,
        number: str,
        pin: str,
        amount: Decimal,
        budget: SessionAuthBudget | None = None,
        retry: RetryPin | None = None,
    ) -> OperationResult:
        """Authenticate and add ``amount`` to the balance."""
        return self._authenticated_operation(
            number, pin, budget, retry, lambda card: card.deposit(amount)
        )

    def list_cards(self) -> list[str]:
        """Return the display form of every card, in insertion order."""
        return [str(card) for card in self.cards.values()]

    def unlock_if_possible(self, now: datetime | None = None) -> list[str]:
        """Unlock every card whose block is old enough.

        Returns
        -------
        list[str]
            Numbers of the cards unlocked by this sweep, in store order.
        """
        now = now or self.clock.now()
        unlocked = []
        for card in list(self.cards.values()):
            if card.is_unlockable(now):
                self.cards[card.number] = card.unlock()
                unlocked.append(card.number)
                logger.info("Card %s automatically unlocked", card.number)
        if unlocked:
            self.save()
        return unlocked

    def block_card(self, number: str) -> OperationResult:
        """Block a card now, whatever its PIN history."""
        card = self.cards.get(number)
        if card is None:
            return OperationResult.failure(ErrorKind.CARD_NOT_FOUND)
        if card.blocked:
            return OperationResult(ok=True, card=card)
        card = card.force_block(self.clock.now())
        self.cards[number] = card
        logger.info("Card %s blocked by operator", number)
        return OperationResult(ok=True, card=card, persisted=self.save())

    def unblock_card(self, number: str) -> OperationResult:
        """Lift a block before the automatic unlock window."""
        card = self.cards.get(number)
        if card is None:
            return OperationResult.failure(ErrorKind.CARD_NOT_FOUND)
        if not card.blocked:
            return OperationResult(ok=True, card=card)
        card = card.unlock()
        self.cards[number] = card
        logger.info("Card %s unblocked by operator", number)
        return OperationResult(ok=True, card=card, persisted=self.save())

    def _authenticated_operation(
        self,
        number: str,
        pin: str,
        budget: SessionAuthBudget | None,
        retry: RetryPin | None,
        operation: Callable[[Card], CardOperation],
    ) -> OperationResult:
        auth = self._authenticate(number, pin, budget or SessionAuthBudget(), retry)
        if not auth.ok or auth.card is None:
            return auth

        outcome = operation(auth.card)
        if not outcome.ok:
            return OperationResult.failure(outcome.error, card=auth.card, budget=auth.budget)

        card = outcome.card
        self.cards[number] = card
        return OperationResult(
            ok=True,
            card=card,
            balance=card.balance,
            budget=auth.budget,
            persisted=self.save(),
        )

    def _authenticate(
        self,
        number: str,
        pin: str,
        budget: SessionAuthBudget,
        retry: RetryPin | None,
    ) -> OperationResult:
        """Run the PIN retry loop for one operation.

        Each failure advances both the card's own counter and the session
        budget. Whichever runs out first blocks the card.
        """
        card = self.cards.get(number)
        if card is None:
            return OperationResult.failure(ErrorKind.CARD_NOT_FOUND, budget=budget)
        if card.blocked:
            return OperationResult.failure(ErrorKind.CARD_BLOCKED, card=card, budget=budget)

        candidate = pin
        while True:
            check = card.check_pin(candidate, self.clock.now())
            card = check.card
            if check.ok:
                self.cards[number] = card
                return OperationResult(ok=True, card=card, balance=card.balance, budget=budget)

            budget = budget.spend()
            if budget.exhausted:
                card = card.force_block(self.clock.now())
                budget = budget.reset()
            if card.blocked:
                self.cards[number] = card
                logger.info("Card %s blocked after repeated incorrect PINs", number)
                return OperationResult(
                    ok=False,
                    error=ErrorKind.CARD_BLOCKED,
                    card=card,
                    budget=budget,
                    just_blocked=True,
                    persisted=self.save(),
                )

            candidate = retry(budget.remaining) if retry is not None else None
            if candidate is None:
                self.cards[number] = card
                return OperationResult.failure(ErrorKind.INCORRECT_PIN, card=card, budget=budget)
