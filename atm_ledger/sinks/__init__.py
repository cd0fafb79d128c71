"""Persistence sinks for the card store."""

from atm_ledger.sinks.flat_file import FlatFileSink

__all__ = ["FlatFileSink"]
