# companies/apps.py

"""
COMPANIES APP CONFIG

Owns the two parties every document is issued between:
- Company (seller, carries the home state for GST place-of-supply)
- Customer (buyer, carries the place of supply)
"""

from django.apps import AppConfig


class CompaniesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "companies"
    verbose_name = "Companies & Customers"
