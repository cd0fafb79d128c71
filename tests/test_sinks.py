"""Tests for the flat-file sink."""

import logging
from datetime import datetime
from decimal import Decimal
from pathlib import Path

import pytest

from atm_ledger.exceptions import PersistenceWriteError, SinkError
from atm_ledger.models import Card
from atm_ledger.sinks import FlatFileSink


@pytest.fixture
def cards(now: datetime) -> list[Card]:
    """One active and one blocked card."""
    return [
        Card(number="1111-2222-3333-4444", pin="0000", balance=Decimal("100.0")),
        Card(number="5555-6666-7777-8888", pin="1234", balance=Decimal("7.25")).force_block(now),
    ]


class TestFlatFileSinkRead:
    """Tests for FlatFileSink.read_cards."""

    def test_missing_file(self, cards_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        """A missing file reads as an empty store."""
        sink = FlatFileSink(cards_path)

        with caplog.at_level(logging.INFO, logger="atm_ledger"):
            assert list(sink.read_cards()) == []

        assert "not found" in caplog.text
        assert not cards_path.exists()

    def test_reads_in_file_order(self, cards_path: Path) -> None:
        cards_path.write_text(
            "5555-6666-7777-8888 1234 7.25 true 2024-06-15 10:30:00\n"
            "1111-2222-3333-4444 0000 100.0 false null\n",
            encoding="utf-8",
        )

        numbers = [card.number for card in FlatFileSink(cards_path).read_cards()]

        assert numbers == ["5555-6666-7777-8888", "1111-2222-3333-4444"]

    def test_skips_malformed_lines(self, cards_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        cards_path.write_text(
            "1111-2222-3333-4444 0000 100.0 false null\n"
            "garbage\n"
            "\n"
            "5555-6666-7777-8888 1234 -1 false null\n"
            "9999-8888-7777-6666 4321 3 false null\n",
            encoding="utf-8",
        )
        sink = FlatFileSink(cards_path)

        with caplog.at_level(logging.WARNING, logger="atm_ledger"):
            cards = list(sink.read_cards())

        assert [card.number for card in cards] == ["1111-2222-3333-4444", "9999-8888-7777-6666"]
        assert sink.skipped_lines == 2
        assert "line 2" in caplog.text
        assert "line 4" in caplog.text

    def test_unreadable_path(self, tmp_path: Path) -> None:
        """Read failures other than a missing file are raised."""
        with pytest.raises(SinkError):
            list(FlatFileSink(tmp_path).read_cards())


class TestFlatFileSinkWrite:
    """Tests for FlatFileSink.write_cards."""

    def test_write(self, cards_path: Path, cards: list[Card]) -> None:
        FlatFileSink(cards_path).write_cards(cards)

        assert cards_path.read_text(encoding="utf-8") == (
            "1111-2222-3333-4444 0000 100.0 false null\n"
            "5555-6666-7777-8888 1234 7.25 true 2024-06-15 10:30:00\n"
        )

    def test_write_overwrites_whole_file(self, cards_path: Path, cards: list[Card]) -> None:
        sink = FlatFileSink(cards_path)
        sink.write_cards(cards)
        sink.write_cards(cards[:1])

        assert cards_path.read_text(encoding="utf-8").splitlines() == [
            "1111-2222-3333-4444 0000 100.0 false null",
        ]

    def test_write_empty(self, cards_path: Path) -> None:
        FlatFileSink(cards_path).write_cards([])
        assert cards_path.read_text(encoding="utf-8") == ""

    def test_round_trip(self, cards_path: Path, cards: list[Card]) -> None:
        sink = FlatFileSink(cards_path)
        sink.write_cards(cards)

        assert list(sink.read_cards()) == cards

    def test_write_failure(self, tmp_path: Path, cards: list[Card]) -> None:
        with pytest.raises(PersistenceWriteError, match="Could not write"):
            FlatFileSink(tmp_path).write_cards(cards)
