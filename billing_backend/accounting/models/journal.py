# accounting/models/journal.py

"""
======================================================
PATH: accounting/models/journal.py
======================================================
JOURNAL ENTRY + LINE MODELS

JournalEntry: one posted accounting event (invoice, edit delta, COGS,
credit note reversal, payment, manual entry, void).
JournalEntryLine: one debit OR credit against one ledger account.

Guarantees:
- Immutable once created (no updates, no deletes); corrections are new entries
- entry_number unique per company (JE-YYYY-NNNN)
- Idempotency via reference uniqueness (when reference is provided)
- Lines: amounts never negative, exactly one side non-zero
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q
from django.utils import timezone


class JournalEntry(models.Model):
    TYPE_INVOICE = "invoice"
    TYPE_INVOICE_EDIT = "invoice_edit"
    TYPE_CREDIT_NOTE = "credit_note"
    TYPE_COGS = "cogs"
    TYPE_PAYMENT = "payment"
    TYPE_MANUAL = "manual"
    TYPE_VOID = "void"

    TRANSACTION_TYPES = [
        (TYPE_INVOICE, "Invoice"),
        (TYPE_INVOICE_EDIT, "Invoice edit"),
        (TYPE_CREDIT_NOTE, "Credit note"),
        (TYPE_COGS, "Cost of goods sold"),
        (TYPE_PAYMENT, "Payment"),
        (TYPE_MANUAL, "Manual"),
        (TYPE_VOID, "Void"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    company = models.ForeignKey(
        "companies.Company",
        on_delete=models.PROTECT,
        related_name="journal_entries",
    )

    entry_number = models.CharField(max_length=30)
    entry_date = models.DateField(default=timezone.localdate)
    narration = models.TextField()

    transaction_type = models.CharField(max_length=20, choices=TRANSACTION_TYPES)
    transaction_id = models.CharField(
        max_length=64,
        blank=True,
        default="",
        help_text="Id of the source document (invoice, payment, ...)",
    )

    reference = models.CharField(
        max_length=120,
        blank=True,
        null=True,
        help_text="Idempotency key, e.g. INVOICE:<id>",
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="journal_entries",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-entry_date", "-created_at"]
        verbose_name = "Journal Entry"
        verbose_name_plural = "Journal Entries"
        indexes = [
            models.Index(fields=["company", "entry_date"], name="je_company_date_idx"),
            models.Index(fields=["transaction_type", "transaction_id"], name="je_transaction_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["company", "entry_number"],
                name="uniq_journal_entry_number_per_company",
            ),
            models.UniqueConstraint(
                fields=["reference"],
                condition=Q(reference__isnull=False) & ~Q(reference=""),
                name="uniq_journal_reference_not_blank",
            ),
        ]

    def __str__(self):
        return f"{self.entry_number} | {self.entry_date}"

    def clean(self):
        if self.reference is not None:
            self.reference = str(self.reference).strip() or None

        self.narration = (self.narration or "").strip()
        if not self.narration:
            raise ValidationError("Journal entry narration is required")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("JournalEntry records are immutable once created")

        self.full_clean(validate_unique=False, validate_constraints=False)
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("JournalEntry records are immutable and cannot be deleted")


class JournalEntryLine(models.Model):
    journal_entry = models.ForeignKey(
        JournalEntry,
        on_delete=models.PROTECT,
        related_name="lines",
    )

    ledger_account = models.ForeignKey(
        "accounting.LedgerAccount",
        on_delete=models.PROTECT,
        related_name="journal_lines",
    )

    debit_amount = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )
    credit_amount = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )

    bill_reference = models.CharField(max_length=50, blank=True, default="")

    class Meta:
        ordering = ["id"]
        verbose_name = "Journal Entry Line"
        verbose_name_plural = "Journal Entry Lines"
        constraints = [
            models.CheckConstraint(
                condition=Q(debit_amount__gte=0) & Q(credit_amount__gte=0),
                name="chk_journal_line_non_negative",
            ),
            models.CheckConstraint(
                condition=(Q(debit_amount__gt=0) & Q(credit_amount=0))
                | (Q(debit_amount=0) & Q(credit_amount__gt=0)),
                name="chk_journal_line_one_side",
            ),
        ]

    def __str__(self):
        side = "Dr" if self.debit_amount > 0 else "Cr"
        amount = self.debit_amount if self.debit_amount > 0 else self.credit_amount
        return f"{side} {amount} → {self.ledger_account_id}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("JournalEntryLine records are immutable and cannot be modified")
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("JournalEntryLine records are immutable and cannot be deleted")
