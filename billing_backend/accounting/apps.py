# accounting/apps.py

"""
ACCOUNTING APP CONFIG

Double-entry core:
- Ledger accounts with running balances
- Immutable journal entries + lines
- Posting engine, numbering, balance reads
"""

from django.apps import AppConfig


class AccountingConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "accounting"
    verbose_name = "Accounting"
