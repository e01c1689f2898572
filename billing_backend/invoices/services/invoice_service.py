# invoices/services/invoice_service.py

"""
======================================================
PATH: invoices/services/invoice_service.py
======================================================
INVOICE SERVICE (CREATE + EDIT)

CREATE (saga):
    1. capability check (invoice.create)
    2. tax calculation (pure)
    3. number + persist invoice and items      (one savepoint)
    4. post invoice journal entry              -> undo: void entry
    5. post COGS for the dispatch (best-effort; failure is logged, not fatal)
    6. audit 'created'
    Steps 3/4 undo in reverse on any later failure (invoice is deleted).

EDIT (saga):
    1. capability check (invoice.edit)
    2. window / payment / status eligibility
    3. replace items + totals, bump revision, lifecycle 'edit'
                                               -> undo: restore snapshot
    4. post net-delta journal entry (skipped when nothing moved)
                                               -> undo: void entry
       A credited invoice was fully reversed by its credit note, so its
       edits are document corrections and post nothing.
    5. audit 'edited' with old/new aggregates
"""

from __future__ import annotations

import logging
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError, transaction
from django.db.models import F
from django.utils import timezone

from accounting.services import posting
from accounting.services.exceptions import AccountingServiceError, NotFoundError
from accounting.services.journal_entry_service import void_journal_entry
from accounting.services.sequence_generator import KIND_INVOICE, create_with_document_number
from inventory.services.dispatch_cost import dispatch_cost_amount
from invoices.models import Invoice, InvoiceAuditLog, InvoiceItem
from invoices.services import audit_log, lifecycle
from invoices.services.exceptions import ConcurrentModificationError
from invoices.services.saga import Saga
from invoices.services.tax_calculator import InvoiceTotals, calculate_invoice_totals
from permissions.roles import CAP_INVOICE_CREATE, CAP_INVOICE_EDIT, require

logger = logging.getLogger(__name__)

ITEM_SNAPSHOT_FIELDS = (
    "product_reference",
    "description",
    "quantity",
    "unit_rate",
    "discount_percent",
    "discount_amount",
    "taxable_amount",
    "cgst_rate",
    "cgst_amount",
    "sgst_rate",
    "sgst_amount",
    "igst_rate",
    "igst_amount",
    "line_total",
)

INVOICE_SNAPSHOT_FIELDS = (
    "subtotal",
    "gst_amount",
    "discount_amount",
    "adjustment_amount",
    "total_amount",
    "total_paid",
    "balance_due",
    "notes",
    "invoice_date",
    "due_date",
    "revision",
    "edited_at",
    "edited_by",
)


# ============================================================
# HELPERS
# ============================================================


def _create_items(invoice: Invoice, totals: InvoiceTotals) -> list[InvoiceItem]:
    items = [InvoiceItem(invoice=invoice, **line.as_item_fields()) for line in totals.lines]
    for item in items:
        item.clean()
    return InvoiceItem.objects.bulk_create(items)


def _apply_totals(invoice: Invoice, totals: InvoiceTotals) -> None:
    invoice.subtotal = totals.subtotal
    invoice.gst_amount = totals.gst_amount
    invoice.discount_amount = totals.discount_amount
    invoice.adjustment_amount = totals.adjustment_amount
    invoice.total_amount = totals.total_amount
    invoice.balance_due = totals.total_amount - Decimal(invoice.total_paid)


def _delete_invoice(invoice: Invoice) -> None:
    with transaction.atomic():
        InvoiceItem.objects.filter(invoice_id=invoice.pk).delete()
        Invoice.objects.filter(pk=invoice.pk).delete()


def _void(actor, reason: str):
    def inverse(entry):
        void_journal_entry(entry, created_by=actor, reason=reason)

    return inverse


def _post_cogs_best_effort(invoice: Invoice, actor):
    if invoice.dispatch_id is None or not settings.ACCOUNTING["COGS_POSTING_ENABLED"]:
        return None

    try:
        amount = dispatch_cost_amount(invoice.dispatch)
        return posting.post_cogs_to_ledger(invoice=invoice, amount=amount, created_by=actor)
    except (AccountingServiceError, DatabaseError):
        logger.exception(
            "COGS posting failed for invoice %s (dispatch %s); invoice kept",
            invoice.document_number,
            invoice.dispatch_id,
        )
        return None


# ============================================================
# CREATE
# ============================================================


def create_invoice(
    *,
    actor,
    company,
    customer,
    items: list[dict],
    invoice_date=None,
    due_date=None,
    discount_amount=Decimal("0.00"),
    adjustment_amount=Decimal("0.00"),
    notes: str = "",
    dispatch=None,
) -> Invoice:
    require(actor, CAP_INVOICE_CREATE, company)

    if customer is None or customer.company_id != company.pk:
        raise NotFoundError("Customer not found")
    if dispatch is not None and dispatch.company_id != company.pk:
        raise NotFoundError("Dispatch not found")

    totals = calculate_invoice_totals(
        items,
        discount_amount=discount_amount,
        adjustment_amount=adjustment_amount,
        inter_state=customer.is_inter_state_for(company),
    )
    now = timezone.now()

    def _insert(number: str) -> Invoice:
        invoice = Invoice(
            company=company,
            customer=customer,
            dispatch=dispatch,
            document_number=number,
            invoice_date=invoice_date or timezone.localdate(),
            due_date=due_date,
            notes=notes or "",
            status=Invoice.Status.FINALIZED,
            payment_status=Invoice.PAYMENT_UNPAID,
            finalized_at=now,
            finalized_by=actor,
            created_by=actor,
            created_at=now,
        )
        _apply_totals(invoice, totals)
        invoice.save()
        _create_items(invoice, totals)
        return invoice

    saga = Saga("create_invoice")
    with saga:
        invoice = saga.step(
            "persist_invoice",
            lambda: create_with_document_number(
                company_id=company.pk, kind=KIND_INVOICE, create=_insert
            ),
            compensate=_delete_invoice,
        )
        saga.step(
            "post_invoice",
            lambda: posting.post_invoice_to_ledger(invoice=invoice, created_by=actor),
            compensate=_void(actor, "invoice creation rolled back"),
        )
        saga.step(
            "post_cogs",
            lambda: _post_cogs_best_effort(invoice, actor),
            compensate=_void(actor, "invoice creation rolled back"),
        )
        saga.step(
            "audit",
            lambda: audit_log.append(
                invoice,
                actor,
                InvoiceAuditLog.CHANGE_CREATED,
                {
                    "action": "created",
                    "invoice_number": invoice.document_number,
                    "total_amount": invoice.total_amount,
                    "items_count": len(totals.lines),
                },
            ),
        )

    logger.info(
        "Invoice %s created total=%s company=%s",
        invoice.document_number,
        invoice.total_amount,
        company.pk,
    )
    return invoice


# ============================================================
# EDIT
# ============================================================


def _snapshot(invoice: Invoice) -> dict:
    return {
        "status": invoice.status,
        "fields": {f: getattr(invoice, f) for f in INVOICE_SNAPSHOT_FIELDS},
        "items": list(invoice.items.values(*ITEM_SNAPSHOT_FIELDS)),
    }


def _restore_snapshot(invoice: Invoice, snapshot: dict) -> None:
    with transaction.atomic():
        lifecycle.restore_status(invoice, snapshot["status"])
        InvoiceItem.objects.filter(invoice_id=invoice.pk).delete()
        InvoiceItem.objects.bulk_create(
            [InvoiceItem(invoice=invoice, **data) for data in snapshot["items"]]
        )
        Invoice.objects.filter(pk=invoice.pk).update(**snapshot["fields"])
        for field, value in snapshot["fields"].items():
            setattr(invoice, field, value)


def edit_invoice(
    *,
    actor,
    invoice: Invoice,
    items: list[dict],
    discount_amount=Decimal("0.00"),
    adjustment_amount=Decimal("0.00"),
    notes: str | None = None,
    invoice_date=None,
    due_date=None,
) -> Invoice:
    require(actor, CAP_INVOICE_EDIT, invoice)

    invoice = Invoice.objects.select_related("company", "customer").get(pk=invoice.pk)
    lifecycle.assert_editable(invoice)

    totals = calculate_invoice_totals(
        items,
        discount_amount=discount_amount,
        adjustment_amount=adjustment_amount,
        inter_state=invoice.customer.is_inter_state_for(invoice.company),
    )

    snapshot = _snapshot(invoice)
    old_amounts = posting.invoice_amounts(invoice)
    # A credit note already reversed this invoice in full
    ledger_settled = invoice.status == Invoice.Status.CREDITED
    old_aggregates = audit_log.invoice_snapshot(invoice)

    def _persist_edit() -> Invoice:
        with transaction.atomic():
            claimed = Invoice.objects.filter(
                pk=invoice.pk,
                revision=snapshot["fields"]["revision"],
                payment_status=Invoice.PAYMENT_UNPAID,
            ).update(revision=F("revision") + 1)
            if not claimed:
                raise ConcurrentModificationError(
                    f"Invoice {invoice.document_number} changed while editing; reload and retry"
                )

            lifecycle.apply_transition(invoice, lifecycle.ACTION_EDIT)

            InvoiceItem.objects.filter(invoice_id=invoice.pk).delete()
            _create_items(invoice, totals)

            _apply_totals(invoice, totals)
            invoice.revision = snapshot["fields"]["revision"] + 1
            if notes is not None:
                invoice.notes = notes
            if invoice_date is not None:
                invoice.invoice_date = invoice_date
            if due_date is not None:
                invoice.due_date = due_date
            invoice.edited_at = timezone.now()
            invoice.edited_by = actor
            invoice.save()
        return invoice

    saga = Saga("edit_invoice")
    with saga:
        saga.step(
            "persist_edit",
            _persist_edit,
            compensate=lambda inv: _restore_snapshot(inv, snapshot),
        )
        entry = None
        if not ledger_settled:
            entry = saga.step(
                "post_edit_delta",
                lambda: posting.post_invoice_edit_to_ledger(
                    invoice=invoice, old_amounts=old_amounts, created_by=actor
                ),
                compensate=_void(actor, "invoice edit rolled back"),
            )
        saga.step(
            "audit",
            lambda: audit_log.append(
                invoice,
                actor,
                InvoiceAuditLog.CHANGE_EDITED,
                {
                    "action": "edited",
                    "revision": invoice.revision,
                    "old": old_aggregates,
                    "new": audit_log.invoice_snapshot(invoice),
                    "journal_entry": entry.entry_number if entry else None,
                },
            ),
        )

    logger.info(
        "Invoice %s edited revision=%s total=%s",
        invoice.document_number,
        invoice.revision,
        invoice.total_amount,
    )
    return invoice


def get_invoice_for_actor(actor, invoice_id) -> Invoice:
    """Company-scoped lookup; another company's invoice is simply not found."""
    qs = Invoice.objects.select_related("company", "customer", "dispatch")
    if not getattr(actor, "is_superuser", False):
        qs = qs.filter(company_id=getattr(actor, "company_id", None))
    try:
        return qs.get(pk=invoice_id)
    except (Invoice.DoesNotExist, DjangoValidationError, ValueError) as exc:
        raise NotFoundError("Invoice not found") from exc
