"""Flat text file sink for the card store."""

import logging
from pathlib import Path
from typing import Iterable, Iterator

from atm_ledger.exceptions import MalformedRecordError, PersistenceWriteError, SinkError
from atm_ledger.models.card import Card
from atm_ledger.sinks.serialization import card_from_line, card_to_line

logger = logging.getLogger(__name__)


class FlatFileSink:
    """Read and rewrite the whole card store file."""

    def __init__(self, path: str | Path) -> None:
        """Initialize flat file sink.

        Parameters
        ----------
        path : str | Path
            Location of the store file. It does not need to exist yet.
        """
        self.path = Path(path)
        self.skipped_lines = 0

    def read_cards(self) -> Iterator[Card]:
        """Yield the cards stored in the file, in file order.

        A missing file yields nothing. Malformed lines are logged and
        skipped; blank lines are ignored.
        """
        self.skipped_lines = 0
        try:
            text = self.path.read_text(encoding="utf-8", errors="replace")
        except FileNotFoundError:
            logger.info("Cards file %s not found, starting with an empty card list", self.path)
            return
        except OSError as e:
            raise SinkError(f"Could not read {self.path}: {e}") from e

        for lineno, line in enumerate(text.splitlines(), start=1):
            if not line.strip():
                continue
            try:
                yield card_from_line(line)
            except MalformedRecordError as e:
                self.skipped_lines += 1
                logger.warning("Skipping line %d of %s: %s", lineno, self.path, e)

    def write_cards(self, cards: Iterable[Card]) -> None:
        """Overwrite the file with one line per card.

        Raises
        ------
        PersistenceWriteError
            If the file cannot be written.
        """
        data = "".join(card_to_line(card) + "\n" for card in cards)
        try:
            with open(self.path, "w", encoding="utf-8") as f:
                f.write(data)
        except OSError as e:
            raise PersistenceWriteError(f"Could not write {self.path}: {e}") from e
        logger.debug("Wrote %d bytes to %s", len(data), self.path)
