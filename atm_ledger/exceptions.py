"""Custom exception hierarchy for atm-ledger."""


class LedgerError(Exception):
    """Base exception for all atm-ledger errors."""


class InvalidCardStateError(LedgerError):
    """Raised when a card is constructed in a state that breaks its invariants."""


class ConfigurationError(LedgerError):
    """Raised when configuration is invalid or missing."""


class SinkError(LedgerError):
    """Raised when a sink operation fails."""


class PersistenceWriteError(SinkError):
    """Raised when the card store file cannot be written."""


class MalformedRecordError(SinkError):
    """Raised when a stored line cannot be decoded into a card."""
