# invoices/models/invoice_item.py

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models

from .invoice import Invoice


class InvoiceItem(models.Model):
    """
    One billed line, with its tax split frozen at the time of billing.

    RULES:
    - Intra-state lines carry CGST + SGST (half the GST rate each)
    - Inter-state lines carry IGST only
    - line_total == taxable_amount + cgst + sgst + igst
    - Credit note lines mirror the original with negated quantity and amounts
    """

    invoice = models.ForeignKey(
        Invoice,
        on_delete=models.CASCADE,
        related_name="items",
    )

    product_reference = models.CharField(max_length=100, blank=True, default="")
    description = models.CharField(max_length=255, blank=True, default="")

    quantity = models.DecimalField(max_digits=12, decimal_places=3)
    unit_rate = models.DecimalField(max_digits=12, decimal_places=2)

    discount_percent = models.DecimalField(
        max_digits=5, decimal_places=2, default=Decimal("0.00")
    )
    discount_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    taxable_amount = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )

    cgst_rate = models.DecimalField(max_digits=6, decimal_places=3, default=Decimal("0.000"))
    cgst_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    sgst_rate = models.DecimalField(max_digits=6, decimal_places=3, default=Decimal("0.000"))
    sgst_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    igst_rate = models.DecimalField(max_digits=6, decimal_places=3, default=Decimal("0.000"))
    igst_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    line_total = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )

    class Meta:
        ordering = ["id"]

    @property
    def is_inter_state(self) -> bool:
        return Decimal(self.igst_amount) != 0 or Decimal(self.igst_rate) != 0

    def clean(self):
        split = Decimal(self.cgst_amount) != 0 or Decimal(self.sgst_amount) != 0
        integrated = Decimal(self.igst_amount) != 0
        if split and integrated:
            raise ValidationError("A line cannot carry both CGST/SGST and IGST")

        expected = (
            Decimal(self.taxable_amount)
            + Decimal(self.cgst_amount)
            + Decimal(self.sgst_amount)
            + Decimal(self.igst_amount)
        )
        if Decimal(self.line_total) != expected:
            raise ValidationError(
                f"Line total {self.line_total} does not equal taxable + taxes ({expected})"
            )

    def __str__(self):
        return f"{self.description or self.product_reference} x {self.quantity}"
