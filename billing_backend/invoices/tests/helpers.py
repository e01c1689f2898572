# invoices/tests/helpers.py

from datetime import timedelta
from decimal import Decimal

from django.utils import timezone

from invoices.models import Invoice
from invoices.services.invoice_service import create_invoice

# 10 × 100 intra-state @18% + 5 × 200 inter-state @18% = 2000 + 360 = 2360
MIXED_ITEMS = [
    {"product_reference": "WIDGET", "quantity": Decimal("10"), "unit_rate": Decimal("100.00"), "gst_rate": Decimal("18")},
    {
        "product_reference": "GADGET",
        "quantity": Decimal("5"),
        "unit_rate": Decimal("200.00"),
        "gst_rate": Decimal("18"),
        "is_inter_state": True,
    },
]

SINGLE_ITEM = [
    {"product_reference": "WIDGET", "quantity": Decimal("10"), "unit_rate": Decimal("100.00"), "gst_rate": Decimal("18")},
]


def issue_invoice(actor, customer, items=None, **kwargs):
    return create_invoice(
        actor=actor,
        company=customer.company,
        customer=customer,
        items=items or MIXED_ITEMS,
        **kwargs,
    )


def age_invoice(invoice, delta: timedelta):
    """Pretend the invoice was created `delta` ago."""
    created_at = timezone.now() - delta
    Invoice.objects.filter(pk=invoice.pk).update(created_at=created_at)
    invoice.created_at = created_at
    return invoice
