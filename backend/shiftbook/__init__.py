"""Shift booking reservation ledger."""

__version__ = "1.0.0"
