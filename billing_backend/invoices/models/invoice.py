# invoices/models/invoice.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

User = settings.AUTH_USER_MODEL


class Invoice(models.Model):
    """
    A finalized GST invoice, or a credit note (is_credit_note=True).

    GUARANTEES:
    - Finalized the moment it exists (no draft state)
    - total_amount == subtotal - discount_amount + gst_amount + adjustment_amount
    - balance_due == total_amount - total_paid
    - Status only moves through invoices.services.lifecycle
      (save() refuses any status change)
    - document_number unique per company (INV-YYYY-NNNN / CN-YYYY-NNNN)

    CREDIT NOTES:
    - Every amount is the negation of the original invoice
    - Self-settling: total_paid == total_amount, balance_due == 0, paid
    """

    class Status(models.TextChoices):
        FINALIZED = "finalized", "Finalized"
        EDITED = "edited", "Edited"
        CREDITED = "credited", "Credited"

    STATUS_FINALIZED = Status.FINALIZED
    STATUS_EDITED = Status.EDITED
    STATUS_CREDITED = Status.CREDITED

    STATUS_CHOICES = Status.choices

    STATUS_ENUM = {
        STATUS_FINALIZED: {"label": "Finalized", "editable": True, "creditable": True},
        STATUS_EDITED: {"label": "Edited", "editable": True, "creditable": True},
        STATUS_CREDITED: {"label": "Credited", "editable": True, "creditable": False},
    }

    PAYMENT_UNPAID = "unpaid"
    PAYMENT_PARTIAL = "partial"
    PAYMENT_PAID = "paid"

    PAYMENT_STATUS_CHOICES = [
        (PAYMENT_UNPAID, "Unpaid"),
        (PAYMENT_PARTIAL, "Partially paid"),
        (PAYMENT_PAID, "Paid"),
    ]

    @classmethod
    def get_status_enum(cls):
        return cls.STATUS_ENUM

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    company = models.ForeignKey(
        "companies.Company",
        on_delete=models.PROTECT,
        related_name="invoices",
    )
    customer = models.ForeignKey(
        "companies.Customer",
        on_delete=models.PROTECT,
        related_name="invoices",
    )
    dispatch = models.ForeignKey(
        "inventory.GoodsDispatch",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="invoices",
        help_text="Goods dispatch this invoice bills (drives COGS)",
    )

    document_number = models.CharField(max_length=30)
    invoice_date = models.DateField(default=timezone.localdate)
    due_date = models.DateField(null=True, blank=True)

    subtotal = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    gst_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    discount_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    adjustment_amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Round-off / other adjustment added to the total",
    )
    total_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    total_paid = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    balance_due = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=STATUS_FINALIZED,
    )
    payment_status = models.CharField(
        max_length=20,
        choices=PAYMENT_STATUS_CHOICES,
        default=PAYMENT_UNPAID,
    )

    is_credit_note = models.BooleanField(default=False)
    credit_note_for = models.ForeignKey(
        "self",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="credit_notes",
    )

    notes = models.TextField(blank=True, default="")
    revision = models.PositiveIntegerField(
        default=0,
        help_text="Bumped on every edit; guards concurrent edits",
    )

    finalized_at = models.DateTimeField(default=timezone.now)
    finalized_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="finalized_invoices",
    )
    edited_at = models.DateTimeField(null=True, blank=True)
    edited_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="edited_invoices",
    )
    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_invoices",
    )

    # Edit window is measured from here
    created_at = models.DateTimeField(default=timezone.now, editable=False)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["company", "invoice_date"], name="invoice_company_date_idx"),
            models.Index(fields=["company", "status"], name="invoice_company_status_idx"),
            models.Index(fields=["customer"], name="invoice_customer_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["company", "document_number"],
                name="uniq_invoice_number_per_company",
            ),
        ]

    # ======================================================
    # INVARIANTS
    # ======================================================

    def expected_total(self) -> Decimal:
        return (
            Decimal(self.subtotal)
            - Decimal(self.discount_amount)
            + Decimal(self.gst_amount)
            + Decimal(self.adjustment_amount)
        )

    def clean(self):
        if Decimal(self.total_amount) != self.expected_total():
            raise ValidationError(
                f"Invoice total {self.total_amount} does not equal "
                f"subtotal - discount + gst + adjustment ({self.expected_total()})"
            )

        if Decimal(self.balance_due) != Decimal(self.total_amount) - Decimal(self.total_paid):
            raise ValidationError("Invoice balance_due must equal total_amount - total_paid")

        if self.is_credit_note and self.credit_note_for_id is None:
            raise ValidationError("A credit note must reference the invoice it credits")

        if not self.is_credit_note and self.credit_note_for_id is not None:
            raise ValidationError("Only credit notes can reference another invoice")

    # Set only by invoices.services.lifecycle: (from_status, to_status)
    _lifecycle_stamp = None

    def save(self, *args, **kwargs):
        if not self._state.adding:
            previous_status = (
                Invoice.objects.filter(pk=self.pk).values_list("status", flat=True).first()
            )
            if (
                previous_status is not None
                and previous_status != self.status
                and self._lifecycle_stamp != (previous_status, self.status)
            ):
                raise ValidationError(
                    f"Invoice status cannot change {previous_status} -> {self.status} "
                    "outside the invoice lifecycle"
                )

        # Unique constraints are left to the database so numbering can retry
        self.full_clean(validate_unique=False, validate_constraints=False)
        super().save(*args, **kwargs)
        self._lifecycle_stamp = None

    @property
    def is_editable_status(self) -> bool:
        return self.STATUS_ENUM.get(self.status, {}).get("editable", False)

    def __str__(self):
        return f"{self.document_number} | {self.total_amount}"
