# accounting/api/views/__init__.py

from accounting.api.views.journal_entries import JournalEntryViewSet
from accounting.api.views.ledgers import LedgerAccountViewSet

__all__ = [
    "JournalEntryViewSet",
    "LedgerAccountViewSet",
]
