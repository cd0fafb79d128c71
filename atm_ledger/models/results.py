"""Result values returned by card store operations."""

from dataclasses import dataclass, replace
from decimal import Decimal

from atm_ledger.models.card import Card
from atm_ledger.models.enums import ErrorKind


@dataclass(frozen=True)
class SessionAuthBudget:
    """PIN failures still allowed in the current operator session.

    The budget is shared by every authenticated operation of a session and
    is not restored by a correct PIN. It is handed to each operation and the
    updated value comes back on the result. ``limit=None`` disables it.
    """

    limit: int | None = 3
    spent: int = 0

    @classmethod
    def unlimited(cls) -> "SessionAuthBudget":
        return cls(limit=None)

    @property
    def remaining(self) -> int | None:
        if self.limit is None:
            return None
        return max(self.limit - self.spent, 0)

    @property
    def exhausted(self) -> bool:
        return self.limit is not None and self.spent >= self.limit

    def spend(self) -> "SessionAuthBudget":
        """Record one failed PIN check."""
        return replace(self, spent=self.spent + 1)

    def reset(self) -> "SessionAuthBudget":
        return replace(self, spent=0)


@dataclass(frozen=True)
class OperationResult:
    """Outcome of a card store operation.

    ``persisted`` is None when the operation did not need to write the store,
    True after a successful write and False when the write failed.
    """

    ok: bool
    error: ErrorKind | None = None
    card: Card | None = None
    balance: Decimal | None = None
    budget: SessionAuthBudget | None = None
    just_blocked: bool = False
    persisted: bool | None = None

    @property
    def write_failure(self) -> ErrorKind | None:
        """Report a failed store write as its own error kind."""
        if self.persisted is False:
            return ErrorKind.PERSISTENCE_WRITE_FAILURE
        return None

    @classmethod
    def failure(
        cls,
        error: ErrorKind,
        card: Card | None = None,
        budget: SessionAuthBudget | None = None,
    ) -> "OperationResult":
        return cls(ok=False, error=error, card=card, budget=budget)
