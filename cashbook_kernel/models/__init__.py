"""ORM models for the cash book."""

from cashbook_kernel.models.cash_entry import CashEntryModel

__all__ = ["CashEntryModel"]
