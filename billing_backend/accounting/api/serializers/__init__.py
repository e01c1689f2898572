# accounting/api/serializers/__init__.py

from accounting.api.serializers.journal_entries import (
    JournalEntryLineSerializer,
    JournalEntrySerializer,
    ManualJournalEntryCommandSerializer,
)
from accounting.api.serializers.ledgers import LedgerAccountSerializer

__all__ = [
    "JournalEntrySerializer",
    "JournalEntryLineSerializer",
    "ManualJournalEntryCommandSerializer",
    "LedgerAccountSerializer",
]
