# accounting/models/ledger_account.py

"""
======================================================
PATH: accounting/models/ledger_account.py
======================================================
LEDGER ACCOUNT MODEL

A named bucket in a company's chart of accounts with a running balance.

Guarantees:
- Ledger names are unique per company (trimmed)
- current_balance is NEVER written through save(); the journal engine moves it
  with an atomic F() increment so concurrent postings cannot lose updates
- Sign convention is resolved by account_type (see normal_side)
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q


class LedgerAccount(models.Model):
    ASSET = "asset"
    LIABILITY = "liability"
    INCOME = "income"
    EXPENSE = "expense"
    EQUITY = "equity"

    ACCOUNT_TYPES = [
        (ASSET, "Asset"),
        (LIABILITY, "Liability"),
        (INCOME, "Income"),
        (EXPENSE, "Expense"),
        (EQUITY, "Equity"),
    ]

    DEBIT_NORMAL_TYPES = {ASSET, EXPENSE}

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    company = models.ForeignKey(
        "companies.Company",
        on_delete=models.PROTECT,
        related_name="ledger_accounts",
    )

    name = models.CharField(max_length=150)
    account_type = models.CharField(max_length=20, choices=ACCOUNT_TYPES)
    group_name = models.CharField(
        max_length=100,
        blank=True,
        default="",
        help_text="Reporting group, e.g. Sundry Debtors, Duties & Taxes",
    )

    opening_balance = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )
    current_balance = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Running balance in the account's normal direction",
    )

    is_system_ledger = models.BooleanField(default=False)
    is_cash_ledger = models.BooleanField(
        default=False,
        help_text="Debits above the cash transaction limit are refused",
    )

    customer = models.OneToOneField(
        "companies.Customer",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="ledger_account",
    )

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        verbose_name = "Ledger Account"
        verbose_name_plural = "Ledger Accounts"
        indexes = [
            models.Index(fields=["company", "account_type"], name="ledger_company_type_idx"),
            models.Index(fields=["company", "is_system_ledger"], name="ledger_company_system_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["company", "name"],
                name="uniq_ledger_company_name",
            ),
            models.CheckConstraint(
                condition=~Q(name=""),
                name="chk_ledger_name_not_blank",
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.account_type})"

    @property
    def normal_side(self) -> str:
        return "debit" if self.account_type in self.DEBIT_NORMAL_TYPES else "credit"

    def signed_delta(self, *, debit: Decimal, credit: Decimal) -> Decimal:
        if self.account_type in self.DEBIT_NORMAL_TYPES:
            return debit - credit
        return credit - debit

    def clean(self):
        self.name = (self.name or "").strip()
        self.group_name = (self.group_name or "").strip()

        if not self.name:
            raise ValidationError("Ledger name is required")

        if self.customer_id and self.customer.company_id != self.company_id:
            raise ValidationError("Customer ledger must belong to the customer's company")

    def save(self, *args, **kwargs):
        self.full_clean()
        if self.pk and not self._state.adding and "update_fields" not in kwargs:
            # current_balance is owned by the journal engine
            fields = [
                f.name
                for f in self._meta.concrete_fields
                if not f.primary_key and f.name not in ("current_balance", "created_at")
            ]
            kwargs["update_fields"] = fields
        return super().save(*args, **kwargs)
