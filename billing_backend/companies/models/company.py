# companies/models/company.py

"""
======================================================
PATH: companies/models/company.py
======================================================
COMPANY + CUSTOMER MODELS

Company:
- The seller. Every invoice, ledger and journal entry is scoped to one.
- `state` is the seller's GST registration state.

Customer:
- The buyer. `state` is the place of supply.
- Intra-state vs inter-state GST is resolved by comparing the two states.
"""

from __future__ import annotations

import uuid

from django.core.exceptions import ValidationError
from django.db import models


def normalize_state(value: str | None) -> str:
    return " ".join((value or "").split()).casefold()


class Company(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=255)
    state = models.CharField(
        max_length=100,
        help_text="GST registration state of the seller",
    )
    gstin = models.CharField(max_length=15, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "Companies"

    def __str__(self):
        return self.name

    def clean(self):
        self.name = (self.name or "").strip()
        self.state = (self.state or "").strip()
        if not self.name:
            raise ValidationError("Company name is required")
        if not self.state:
            raise ValidationError("Company state is required")


class Customer(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    company = models.ForeignKey(
        Company,
        on_delete=models.PROTECT,
        related_name="customers",
    )

    name = models.CharField(max_length=255)
    state = models.CharField(
        max_length=100,
        blank=True,
        default="",
        help_text="Place of supply. Blank means same state as the company.",
    )
    gstin = models.CharField(max_length=15, blank=True, default="")
    email = models.EmailField(blank=True, default="")
    phone = models.CharField(max_length=30, blank=True, default="")

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["company", "name"], name="customer_company_name_idx"),
        ]

    def __str__(self):
        return self.name

    def clean(self):
        self.name = (self.name or "").strip()
        if not self.name:
            raise ValidationError("Customer name is required")

    def is_inter_state_for(self, company: Company) -> bool:
        if not self.state:
            return False
        return normalize_state(self.state) != normalize_state(company.state)
