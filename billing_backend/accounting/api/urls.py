# accounting/api/urls.py

"""
ACCOUNTING API URLS

    /api/accounting/ledgers/                 (read)
    /api/accounting/ledgers/trial-balance/   (read)
    /api/accounting/journal-entries/         (list, retrieve, manual create)
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from accounting.api.views import JournalEntryViewSet, LedgerAccountViewSet

router = DefaultRouter()
router.register("ledgers", LedgerAccountViewSet, basename="ledger")
router.register("journal-entries", JournalEntryViewSet, basename="journal-entry")

urlpatterns = [
    path("", include(router.urls)),
]
