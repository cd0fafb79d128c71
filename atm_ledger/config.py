"""Configuration management for atm-ledger."""

from dataclasses import dataclass, field
from pathlib import Path

from atm_ledger.exceptions import ConfigurationError

DISABLED_VALUES = ("none", "off", "disabled")


@dataclass
class StorageConfig:
    """Flat-file store configuration."""

    path: Path = field(default_factory=lambda: Path("cards.txt"))


@dataclass
class SessionConfig:
    """Operator session configuration."""

    # PIN failures allowed per session before a block is forced; None disables
    pin_budget: int | None = 3


@dataclass
class LedgerConfig:
    """Main configuration for atm-ledger."""

    storage: StorageConfig = field(default_factory=StorageConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    seed: int | None = None
    log_level: str = "WARNING"
    log_format: str = "standard"

    @classmethod
    def from_env(cls) -> "LedgerConfig":
        """Create config from environment variables."""
        import os

        storage = StorageConfig(path=Path(os.getenv("CARDS_FILE", "cards.txt")))
        session = SessionConfig(
            pin_budget=parse_pin_budget(os.getenv("SESSION_PIN_BUDGET", "3")),
        )

        seed = os.getenv("SEED")
        try:
            seed_value = int(seed) if seed else None
        except ValueError as e:
            raise ConfigurationError(f"SEED must be an integer, got {seed!r}") from e

        return cls(
            storage=storage,
            session=session,
            seed=seed_value,
            log_level=os.getenv("LOG_LEVEL", "WARNING"),
            log_format=os.getenv("LOG_FORMAT", "standard"),
        )


def parse_pin_budget(raw: str) -> int | None:
    """Parse a session PIN budget setting.

    Parameters
    ----------
    raw : str
        A positive integer, or one of ``none``/``off``/``disabled``.

    Returns
    -------
    int | None
        The budget, or None when the session-level counter is disabled.
    """
    value = raw.strip().lower()
    if value in DISABLED_VALUES:
        return None
    try:
        budget = int(value)
    except ValueError as e:
        raise ConfigurationError(f"Session PIN budget must be an integer, got {raw!r}") from e
    if budget < 1:
        raise ConfigurationError(f"Session PIN budget must be at least 1, got {budget}")
    return budget
