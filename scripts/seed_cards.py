#!/usr/bin/env python3
"""Generate a sample cards file.

This script writes random valid cards to a flat-file store so the ATM menu
can be tried without typing cards in by hand. A share of the cards can be
generated blocked, some of them already past the automatic unlock window.
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from atm_ledger.config import LedgerConfig
from atm_ledger.exceptions import ConfigurationError
from atm_ledger.generators import CardGenerator
from atm_ledger.logging import setup_logging
from atm_ledger.sinks import FlatFileSink
from atm_ledger.store import CardStore

logger = logging.getLogger(__name__)


def seed_store(store: CardStore, count: int, seed: int, blocked_rate: float) -> int:
    """Add ``count`` generated cards to ``store``.

    Parameters
    ----------
    store : CardStore
        Store to fill. Numbers already present are skipped.
    count : int
        Number of cards to generate.
    seed : int
        Random seed for reproducibility.
    blocked_rate : float
        Share of generated cards that start blocked (0.0 - 1.0).

    Returns
    -------
    int
        Number of cards actually added.
    """
    generator = CardGenerator(seed=seed)
    added = 0
    for card in generator.generate_batch(count, blocked_rate=blocked_rate):
        if store.insert(card):
            added += 1
        else:
            logger.warning("Card %s already on file, skipped", card.number)
    return added


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Generate a sample cards file")
    parser.add_argument(
        "--cards",
        type=int,
        default=10,
        help="Number of cards to generate (default: 10)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducibility (default: $SEED or 42)",
    )
    parser.add_argument(
        "--blocked-rate",
        type=float,
        default=0.2,
        help="Share of cards generated blocked (default: 0.2)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Cards file to write (default: $CARDS_FILE or cards.txt)",
    )
    parser.add_argument(
        "--append",
        action="store_true",
        help="Keep the cards already in the output file",
    )
    args = parser.parse_args()

    if args.cards < 0:
        parser.error("--cards must not be negative")
    if not 0.0 <= args.blocked_rate <= 1.0:
        parser.error("--blocked-rate must be between 0 and 1")

    try:
        config = LedgerConfig.from_env()
    except ConfigurationError as e:
        parser.error(str(e))

    seed = args.seed if args.seed is not None else (config.seed if config.seed is not None else 42)
    output = Path(args.output) if args.output else config.storage.path

    setup_logging(level="INFO", format_type=config.log_format)

    store = CardStore(sink=FlatFileSink(output))
    if args.append:
        store.load()

    added = seed_store(store, args.cards, seed, args.blocked_rate)
    if store.save() is False:
        sys.exit(1)

    blocked = sum(1 for card in store if card.blocked)
    logger.info("Wrote %d cards (%d new, %d blocked) to %s", len(store), added, blocked, output)


if __name__ == "__main__":
    main()
