# invoices/models/payment.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from .invoice import Invoice

User = settings.AUTH_USER_MODEL


class Payment(models.Model):
    """
    Money received against an invoice.

    - payment_number unique per company (PMT-YYYY-NNNN)
    - journal_entry links the Dr Cash/Bank, Cr Customer posting
    """

    MODE_CASH = "cash"
    MODE_BANK = "bank"
    MODE_UPI = "upi"
    MODE_CHEQUE = "cheque"

    PAYMENT_MODES = [
        (MODE_CASH, "Cash"),
        (MODE_BANK, "Bank transfer"),
        (MODE_UPI, "UPI"),
        (MODE_CHEQUE, "Cheque"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    company = models.ForeignKey(
        "companies.Company",
        on_delete=models.PROTECT,
        related_name="payments",
    )
    invoice = models.ForeignKey(
        Invoice,
        on_delete=models.PROTECT,
        related_name="payments",
    )

    payment_number = models.CharField(max_length=30)
    payment_date = models.DateField(default=timezone.localdate)
    amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    payment_mode = models.CharField(max_length=20, choices=PAYMENT_MODES, default=MODE_CASH)
    reference_number = models.CharField(max_length=100, blank=True, default="")
    notes = models.TextField(blank=True, default="")

    journal_entry = models.ForeignKey(
        "accounting.JournalEntry",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="payments",
    )

    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="recorded_payments",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["company", "payment_number"],
                name="uniq_payment_number_per_company",
            ),
        ]

    def __str__(self):
        return f"{self.payment_number} | {self.amount}"
