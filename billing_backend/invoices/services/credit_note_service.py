# invoices/services/credit_note_service.py

"""
======================================================
PATH: invoices/services/credit_note_service.py
======================================================
CREDIT NOTE REVERSAL (SAGA)

    1. capability check (invoice.credit), reason required
    2. original must be creditable (finalized / edited, not a credit note)
    3. number (CN-YYYY-NNNN) + persist credit note with mirrored items
                                              -> undo: delete credit note
    4. post reversing journal entry            -> undo: void entry
    5. original -> credited (lifecycle guard)  -> undo: restore status
    6. audit 'credited' on the original

Mirror law: every amount on the credit note is the negation of the
original; rates are unchanged. The credit note is self-settling
(total_paid == total_amount, balance_due == 0, payment_status paid).
"""

from __future__ import annotations

import logging

from django.db import transaction
from django.utils import timezone

from accounting.services import posting
from accounting.services.exceptions import ValidationError
from accounting.services.journal_entry_service import void_journal_entry
from accounting.services.sequence_generator import KIND_CREDIT_NOTE, create_with_document_number
from invoices.models import Invoice, InvoiceAuditLog, InvoiceItem
from invoices.services import audit_log, lifecycle
from invoices.services.saga import Saga
from permissions.roles import CAP_INVOICE_CREDIT, require

logger = logging.getLogger(__name__)

NEGATED_ITEM_FIELDS = (
    "quantity",
    "discount_amount",
    "taxable_amount",
    "cgst_amount",
    "sgst_amount",
    "igst_amount",
    "line_total",
)

COPIED_ITEM_FIELDS = (
    "product_reference",
    "description",
    "unit_rate",
    "discount_percent",
    "cgst_rate",
    "sgst_rate",
    "igst_rate",
)


def _mirror_item(credit_note: Invoice, item: InvoiceItem) -> InvoiceItem:
    fields = {f: getattr(item, f) for f in COPIED_ITEM_FIELDS}
    fields.update({f: -getattr(item, f) for f in NEGATED_ITEM_FIELDS})
    return InvoiceItem(invoice=credit_note, **fields)


def _delete_credit_note(credit_note: Invoice) -> None:
    with transaction.atomic():
        InvoiceItem.objects.filter(invoice_id=credit_note.pk).delete()
        Invoice.objects.filter(pk=credit_note.pk).delete()


def create_credit_note(*, actor, invoice: Invoice, reason: str) -> Invoice:
    require(actor, CAP_INVOICE_CREDIT, invoice)

    reason = (reason or "").strip()
    if not reason:
        raise ValidationError("A reason is required to issue a credit note")

    original = Invoice.objects.select_related("company", "customer", "dispatch").get(pk=invoice.pk)
    lifecycle.assert_creditable(original)
    original_items = list(original.items.all())
    now = timezone.now()

    def _insert(number: str) -> Invoice:
        credit_note = Invoice(
            company=original.company,
            customer=original.customer,
            dispatch=original.dispatch,
            document_number=number,
            invoice_date=timezone.localdate(),
            subtotal=-original.subtotal,
            gst_amount=-original.gst_amount,
            discount_amount=-original.discount_amount,
            adjustment_amount=-original.adjustment_amount,
            total_amount=-original.total_amount,
            total_paid=-original.total_amount,
            balance_due=0,
            status=Invoice.Status.FINALIZED,
            payment_status=Invoice.PAYMENT_PAID,
            is_credit_note=True,
            credit_note_for=original,
            notes=f"Credit note for {original.document_number}. Reason: {reason}",
            finalized_at=now,
            finalized_by=actor,
            created_by=actor,
            created_at=now,
        )
        credit_note.save()
        InvoiceItem.objects.bulk_create([_mirror_item(credit_note, i) for i in original_items])
        return credit_note

    def _flip_original() -> str:
        return lifecycle.apply_transition(original, lifecycle.ACTION_CREDIT)

    saga = Saga("create_credit_note")
    with saga:
        credit_note = saga.step(
            "persist_credit_note",
            lambda: create_with_document_number(
                company_id=original.company_id, kind=KIND_CREDIT_NOTE, create=_insert
            ),
            compensate=_delete_credit_note,
        )
        saga.step(
            "post_reversal",
            lambda: posting.post_invoice_to_ledger(invoice=credit_note, created_by=actor),
            compensate=lambda entry: void_journal_entry(
                entry, created_by=actor, reason="credit note rolled back"
            ),
        )
        saga.step(
            "credit_original",
            _flip_original,
            compensate=lambda previous: lifecycle.restore_status(original, previous),
        )
        saga.step(
            "audit",
            lambda: audit_log.append(
                original,
                actor,
                InvoiceAuditLog.CHANGE_CREDITED,
                {
                    "action": "credited",
                    "credit_note_id": str(credit_note.pk),
                    "credit_note_number": credit_note.document_number,
                    "reason": reason,
                },
            ),
        )

    logger.info(
        "Credit note %s issued for invoice %s total=%s",
        credit_note.document_number,
        original.document_number,
        credit_note.total_amount,
    )
    return credit_note


def credit_invoice(*, actor, invoice: Invoice, reason: str) -> Invoice:
    """Lifecycle entry point for 'credit'."""
    return create_credit_note(actor=actor, invoice=invoice, reason=reason)
