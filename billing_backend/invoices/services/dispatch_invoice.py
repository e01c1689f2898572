# invoices/services/dispatch_invoice.py

"""
======================================================
PATH: invoices/services/dispatch_invoice.py
======================================================
INVOICING A GOODS DISPATCH

PREVIEW (read-only):
    dispatch items -> invoice line input -> TaxCalculator
    Nothing is numbered, stored or posted.

CREATE:
    Same line input handed to invoice_service.create_invoice, with the
    dispatch attached (so COGS is posted for it).

Line prefill per dispatched item:
    quantity     = dispatched quantity
    unit_rate    = item.unit_rate, else item.unit_cost
    gst_rate     = item.gst_rate, else ACCOUNTING["DEFAULT_GST_RATE"]

A dispatch is billed once: a live invoice (not credited, not a credit
note) for it blocks both preview and create.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.utils import timezone

from accounting.services.exceptions import NotFoundError, ValidationError
from inventory.models import GoodsDispatch
from inventory.services.dispatch_cost import dispatch_summary
from invoices.models import Invoice
from invoices.services.exceptions import DispatchAlreadyInvoicedError
from invoices.services.invoice_service import create_invoice
from invoices.services.tax_calculator import calculate_invoice_totals
from permissions.roles import CAP_INVOICE_CREATE, require

logger = logging.getLogger(__name__)


def default_gst_rate() -> Decimal:
    return Decimal(str(settings.ACCOUNTING.get("DEFAULT_GST_RATE", "18")))


def get_dispatch_for_actor(actor, dispatch_id) -> GoodsDispatch:
    qs = GoodsDispatch.objects.select_related("company", "customer")
    if not getattr(actor, "is_superuser", False):
        qs = qs.filter(company_id=getattr(actor, "company_id", None))
    try:
        return qs.get(pk=dispatch_id)
    except (GoodsDispatch.DoesNotExist, DjangoValidationError, ValueError) as exc:
        raise NotFoundError("Goods dispatch not found") from exc


def dispatch_line_items(dispatch: GoodsDispatch) -> list[dict]:
    fallback_rate = default_gst_rate()
    lines = []
    for item in dispatch.items.all():
        lines.append(
            {
                "product_reference": item.product_reference,
                "description": item.description,
                "quantity": Decimal(item.quantity),
                "unit_rate": Decimal(item.unit_rate if item.unit_rate is not None else item.unit_cost),
                "gst_rate": Decimal(item.gst_rate) if item.gst_rate is not None else fallback_rate,
            }
        )
    return lines


def _assert_billable(dispatch: GoodsDispatch) -> None:
    if dispatch.customer_id is None:
        raise ValidationError(f"Dispatch {dispatch.dispatch_number} has no customer assigned")

    existing = (
        Invoice.objects.filter(dispatch=dispatch, is_credit_note=False)
        .exclude(status=Invoice.Status.CREDITED)
        .values_list("document_number", flat=True)
        .first()
    )
    if existing:
        raise DispatchAlreadyInvoicedError(
            f"Dispatch {dispatch.dispatch_number} is already billed on invoice {existing}"
        )


def preview_invoice_from_dispatch(*, actor, dispatch: GoodsDispatch) -> dict:
    """
    Prefilled invoice for review. Amounts are exactly what create would store.
    """
    require(actor, CAP_INVOICE_CREATE, dispatch)
    _assert_billable(dispatch)

    company = dispatch.company
    customer = dispatch.customer
    inter_state = customer.is_inter_state_for(company)
    totals = calculate_invoice_totals(dispatch_line_items(dispatch), inter_state=inter_state)

    return {
        "invoice_date": timezone.localdate().isoformat(),
        "customer": {
            "id": str(customer.id),
            "name": customer.name,
            "state": customer.state,
            "gstin": customer.gstin,
        },
        "dispatch": dispatch_summary(dispatch),
        "place_of_supply": customer.state or company.state,
        "is_inter_state": inter_state,
        "invoice_type": "B2B" if customer.gstin else "B2C",
        "items": [
            {key: str(value) for key, value in line.as_item_fields().items()}
            for line in totals.lines
        ],
        "subtotal": str(totals.subtotal),
        "cgst_amount": str(totals.cgst_amount),
        "sgst_amount": str(totals.sgst_amount),
        "igst_amount": str(totals.igst_amount),
        "gst_amount": str(totals.gst_amount),
        "discount_amount": str(totals.discount_amount),
        "adjustment_amount": str(totals.adjustment_amount),
        "total_amount": str(totals.total_amount),
    }


def create_invoice_from_dispatch(
    *,
    actor,
    dispatch: GoodsDispatch,
    invoice_date=None,
    due_date=None,
    notes: str = "",
) -> Invoice:
    require(actor, CAP_INVOICE_CREATE, dispatch)
    _assert_billable(dispatch)

    invoice = create_invoice(
        actor=actor,
        company=dispatch.company,
        customer=dispatch.customer,
        items=dispatch_line_items(dispatch),
        invoice_date=invoice_date,
        due_date=due_date,
        notes=notes,
        dispatch=dispatch,
    )
    logger.info("Invoice %s billed dispatch %s", invoice.document_number, dispatch.dispatch_number)
    return invoice
