# inventory/models/dispatch.py

"""
GOODS DISPATCH (COLLABORATOR RECORD)

A dispatch is created by the warehouse flow (out of scope here) and
referenced by an invoice. The invoicing core only reads:
- dispatch summary (number, date, customer)
- per-line quantity and unit_cost for COGS
- per-line selling rate and GST rate to prefill invoice lines
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models


class GoodsDispatch(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    company = models.ForeignKey(
        "companies.Company",
        on_delete=models.PROTECT,
        related_name="dispatches",
    )
    customer = models.ForeignKey(
        "companies.Customer",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="dispatches",
    )

    dispatch_number = models.CharField(max_length=50)
    dispatch_date = models.DateField()

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-dispatch_date", "-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["company", "dispatch_number"],
                name="uniq_dispatch_number_per_company",
            )
        ]

    def __str__(self):
        return self.dispatch_number


class GoodsDispatchItem(models.Model):
    dispatch = models.ForeignKey(
        GoodsDispatch,
        on_delete=models.CASCADE,
        related_name="items",
    )

    product_reference = models.CharField(max_length=100)
    description = models.CharField(max_length=255, blank=True, default="")

    quantity = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        validators=[MinValueValidator(Decimal("0.001"))],
    )
    unit_cost = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text="Cost price per unit at dispatch time",
    )
    unit_rate = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text="Selling price per unit; billed at unit_cost when empty",
    )
    gst_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text="Product GST rate; the company default applies when empty",
    )

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.product_reference} x {self.quantity}"
