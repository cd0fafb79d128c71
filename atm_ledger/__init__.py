"""Card-account ledger with PIN lockout and a flat-file store."""

__version__ = "0.1.0"
