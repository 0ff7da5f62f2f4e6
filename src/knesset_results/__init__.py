"""Knesset election results reconciliation pipeline."""

__version__ = "0.1.0"
