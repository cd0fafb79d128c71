"""Sample data generators."""

from atm_ledger.generators.card import CardGenerator

__all__ = ["CardGenerator"]
