"""In-memory card store backed by a flat file."""

from atm_ledger.store.card_store import CardStore, RetryPin

__all__ = ["CardStore", "RetryPin"]
