"""
Repositories Package

This package contains interfaces defining storage contracts.
Specific implementations are provided by the infrastructure layer.
"""

from .history_store import IHistoryStore

__all__ = ["IHistoryStore"]
