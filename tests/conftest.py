"""Pytest configuration and fixtures."""

import logging
from datetime import datetime
from pathlib import Path

import pytest

from atm_ledger.clock import DeterministicClock
from atm_ledger.sinks import FlatFileSink
from atm_ledger.store import CardStore


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def now() -> datetime:
    """Fixed reference instant."""
    return datetime(2024, 6, 15, 10, 30, 0)


@pytest.fixture
def clock(now: datetime) -> DeterministicClock:
    """Clock frozen at ``now``."""
    return DeterministicClock(now)


@pytest.fixture
def sample_card_number() -> str:
    """Sample card number."""
    return "1234-5678-9012-3456"


@pytest.fixture
def other_card_number() -> str:
    """Second sample card number."""
    return "9999-8888-7777-6666"


@pytest.fixture
def cards_path(tmp_path: Path) -> Path:
    """Location of a cards file that does not exist yet."""
    return tmp_path / "cards.txt"


@pytest.fixture
def store(cards_path: Path, clock: DeterministicClock) -> CardStore:
    """Empty store backed by ``cards_path``."""
    return CardStore(sink=FlatFileSink(cards_path), clock=clock)


@pytest.fixture
def restore_root_logger():
    """Put the root logger back the way pytest configured it."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    package_level = logging.getLogger("atm_ledger").level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("atm_ledger").setLevel(package_level)
