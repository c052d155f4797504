"""SMS ledger: turn bank SMS notifications into categorized transactions."""

__version__ = "1.0.0"
