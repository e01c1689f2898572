"""
INVOICE LIFECYCLE DOMAIN RULES

This module defines the ONLY allowed lifecycle transitions
for Invoice entities, and is the only code that writes Invoice.status.

STATES:
    finalized -> edited -> credited
    finalized -> credited
    edited    -> edited     (re-edit inside the window)
    credited  -> credited   (edit of a credited invoice keeps it credited)

Credit notes never transition.

Eligibility (edit):
- now - created_at < ACCOUNTING["INVOICE_EDIT_WINDOW_HOURS"]
- payment_status == unpaid
"""

from __future__ import annotations

import logging
from datetime import timedelta

from django.conf import settings
from django.utils import timezone

from invoices.models import Invoice
from invoices.services.exceptions import (
    ConcurrentModificationError,
    InvalidInvoiceTransitionError,
    InvoiceAlreadyCreditedError,
    InvoiceEditWindowExpiredError,
    InvoicePaymentExistsError,
)

logger = logging.getLogger(__name__)

# ============================================================
# ACTIONS + TRANSITION TABLE
# ============================================================

ACTION_EDIT = "edit"
ACTION_CREDIT = "credit"

TRANSITIONS = {
    ACTION_EDIT: {
        Invoice.Status.FINALIZED: Invoice.Status.EDITED,
        Invoice.Status.EDITED: Invoice.Status.EDITED,
        Invoice.Status.CREDITED: Invoice.Status.CREDITED,
    },
    ACTION_CREDIT: {
        Invoice.Status.FINALIZED: Invoice.Status.CREDITED,
        Invoice.Status.EDITED: Invoice.Status.CREDITED,
    },
}


# ============================================================
# DOMAIN RULES
# ============================================================


def target_status(invoice: Invoice, action: str) -> str:
    if invoice.is_credit_note:
        raise InvalidInvoiceTransitionError(
            f"Credit note {invoice.document_number} is final and cannot be {action}ed"
        )

    table = TRANSITIONS.get(action)
    if table is None:
        raise InvalidInvoiceTransitionError(f"Unknown invoice action '{action}'")

    target = table.get(invoice.status)
    if target is None:
        if action == ACTION_CREDIT and invoice.status == Invoice.Status.CREDITED:
            raise InvoiceAlreadyCreditedError(
                f"Invoice {invoice.document_number} has already been credited"
            )
        raise InvalidInvoiceTransitionError(
            f"Invoice {invoice.document_number} cannot '{action}' from '{invoice.status}'"
        )
    return target


def can_transition(invoice: Invoice, action: str) -> bool:
    try:
        target_status(invoice, action)
    except InvalidInvoiceTransitionError:
        return False
    return True


def edit_window() -> timedelta:
    return timedelta(hours=int(settings.ACCOUNTING["INVOICE_EDIT_WINDOW_HOURS"]))


def assert_editable(invoice: Invoice, *, now=None) -> None:
    now = now or timezone.now()

    if invoice.is_credit_note:
        target_status(invoice, ACTION_EDIT)

    if now - invoice.created_at >= edit_window():
        raise InvoiceEditWindowExpiredError(
            f"Invoice {invoice.document_number} can only be edited within "
            f"{settings.ACCOUNTING['INVOICE_EDIT_WINDOW_HOURS']} hours of creation. "
            "Please create a credit note instead."
        )

    if invoice.payment_status != Invoice.PAYMENT_UNPAID:
        raise InvoicePaymentExistsError(
            f"Invoice {invoice.document_number} has payments recorded. "
            "Please create a credit note instead."
        )

    target_status(invoice, ACTION_EDIT)


def assert_creditable(invoice: Invoice) -> None:
    target_status(invoice, ACTION_CREDIT)


# ============================================================
# THE GUARD (ONLY STATUS WRITER)
# ============================================================


def _swap_status(invoice: Invoice, *, from_status: str, to_status: str) -> None:
    if from_status != to_status:
        updated = Invoice.objects.filter(pk=invoice.pk, status=from_status).update(
            status=to_status
        )
        if not updated:
            raise ConcurrentModificationError(
                f"Invoice {invoice.document_number} changed status concurrently"
            )

    invoice.status = to_status
    invoice._lifecycle_stamp = (from_status, to_status)


def apply_transition(invoice: Invoice, action: str) -> str:
    """
    Move `invoice` along the transition table for `action`.

    Writes with a conditional UPDATE on the current status, so two
    concurrent credits cannot both succeed. Returns the previous status.
    """
    previous = invoice.status
    target = target_status(invoice, action)
    _swap_status(invoice, from_status=previous, to_status=target)
    logger.info(
        "Invoice %s %s: %s -> %s", invoice.document_number, action, previous, target
    )
    return previous


def restore_status(invoice: Invoice, previous_status: str) -> None:
    """Compensation only. No-op when the invoice already holds `previous_status`."""
    current = Invoice.objects.filter(pk=invoice.pk).values_list("status", flat=True).first()
    if current is None or current == previous_status:
        invoice.status = previous_status
        return
    _swap_status(invoice, from_status=current, to_status=previous_status)
    logger.warning(
        "Invoice %s status restored %s -> %s", invoice.document_number, current, previous_status
    )
