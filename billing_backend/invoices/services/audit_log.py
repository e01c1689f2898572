# invoices/services/audit_log.py

"""
Append-only invoice audit trail. Rows are written here and nowhere else;
business rules never read them.
"""

from __future__ import annotations

from decimal import Decimal

from invoices.models import Invoice, InvoiceAuditLog


def append(invoice: Invoice, actor, change_type: str, payload: dict | None = None) -> InvoiceAuditLog:
    return InvoiceAuditLog.objects.create(
        invoice=invoice,
        changed_by=actor if getattr(actor, "pk", None) else None,
        change_type=change_type,
        changes=payload or {},
    )


def invoice_snapshot(invoice: Invoice) -> dict[str, Decimal | str]:
    """Aggregates recorded as the old/new sides of an edit."""
    return {
        "subtotal": invoice.subtotal,
        "gst_amount": invoice.gst_amount,
        "discount_amount": invoice.discount_amount,
        "adjustment_amount": invoice.adjustment_amount,
        "total_amount": invoice.total_amount,
        "items_count": invoice.items.count(),
        "notes": invoice.notes,
    }


def trail(invoice: Invoice):
    return invoice.audit_logs.select_related("changed_by").order_by("created_at")
