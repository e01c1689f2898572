# inventory/apps.py

"""
INVENTORY APP CONFIG

Goods dispatch collaborator:
- Holds what physically left the warehouse (quantity + unit cost per line)
- Read-only from the invoicing core; used to cost COGS postings
"""

from django.apps import AppConfig


class InventoryConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "inventory"
    verbose_name = "Inventory Dispatch"
