"""Expense tracking service for a single wedding budget."""

from __future__ import annotations

__all__ = [
    "__version__",
    "crud",
    "database",
    "enums",
    "ledger",
    "models",
    "schemas",
    "server",
    "settings",
]

__version__ = "1.0.0"
