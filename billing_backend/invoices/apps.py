# invoices/apps.py

"""
INVOICES APP CONFIG

Invoice lifecycle core:
- GST tax calculation
- Instant-finalized invoices, 24h edit window, credit notes
- Payments against invoices
- Append-only invoice audit trail
"""

from django.apps import AppConfig


class InvoicesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "invoices"
    verbose_name = "Invoices"
