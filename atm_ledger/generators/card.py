"""Sample card generator."""

import random
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Iterator

from atm_ledger.generators.base import BaseGenerator
from atm_ledger.models.card import Card


class CardGenerator(BaseGenerator):
    """Generate valid random cards for demo and test stores."""

    MAX_BALANCE = 50_000
    # Blocks are spread over two days so some are already past the unlock window
    MAX_BLOCK_AGE_HOURS = 48

    def __init__(self, seed: int | None = None) -> None:
        super().__init__(seed)

    def generate(self, blocked: bool = False, now: datetime | None = None) -> Card:
        """Generate a single card.

        Parameters
        ----------
        blocked : bool
            Generate a blocked card with a block time up to two days old.
        now : datetime | None
            Reference time for the block (default: current time).

        Returns
        -------
        Card
            Generated card.
        """
        balance = round(random.uniform(0, self.MAX_BALANCE), 2)
        blocked_at = None
        if blocked:
            now = now or datetime.now()
            age = timedelta(hours=random.uniform(0, self.MAX_BLOCK_AGE_HOURS))
            blocked_at = (now - age).replace(microsecond=0)

        return Card(
            number=self.fake.numerify("####-####-####-####"),
            pin=self.fake.numerify("####"),
            balance=Decimal(str(balance)),
            blocked=blocked,
            blocked_at=blocked_at,
        )

    def generate_batch(
        self,
        count: int,
        blocked_rate: float = 0.0,
        now: datetime | None = None,
    ) -> Iterator[Card]:
        """Generate ``count`` cards with distinct numbers."""
        seen: set[str] = set()
        while len(seen) < count:
            card = self.generate(blocked=random.random() < blocked_rate, now=now)
            if card.number in seen:
                continue
            seen.add(card.number)
            yield card
