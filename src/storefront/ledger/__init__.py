"""Ledger Store package."""

from storefront.ledger.store import LedgerStore

__all__ = ["LedgerStore"]
