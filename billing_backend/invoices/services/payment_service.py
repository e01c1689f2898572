# invoices/services/payment_service.py

"""
======================================================
PATH: invoices/services/payment_service.py
======================================================
PAYMENT RECORDING (SAGA)

    1. capability check (payment.record)
    2. amount > 0 and <= balance_due; known payment mode
    3. Section 269ST: cash above ACCOUNTING["CASH_TRANSACTION_LIMIT"] refused
    4. number (PMT-YYYY-NNNN) + persist payment  -> undo: delete payment
    5. post Dr Cash/Bank, Cr Customer             -> undo: void entry
    6. apply to invoice totals (compare-and-swap on total_paid, bounded retry)

Never applies to credit notes or credited invoices.
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from accounting.services import posting
from accounting.services.exceptions import BusinessRuleError, ValidationError
from accounting.services.journal_entry_service import void_journal_entry
from accounting.services.manual_entry_service import cash_transaction_limit
from accounting.services.sequence_generator import KIND_PAYMENT, create_with_document_number
from invoices.models import Invoice, Payment
from invoices.services.exceptions import ConcurrentModificationError
from invoices.services.saga import Saga
from permissions.roles import CAP_PAYMENT_RECORD, require

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")


def _parse_amount(value) -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise ValidationError(f"Invalid payment amount: {value!r}") from exc
    if not amount.is_finite() or amount <= 0:
        raise ValidationError("Payment amount must be greater than zero")
    return amount.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def payment_status_for(total_amount: Decimal, total_paid: Decimal) -> str:
    if total_paid <= 0:
        return Invoice.PAYMENT_UNPAID
    if total_paid >= total_amount:
        return Invoice.PAYMENT_PAID
    return Invoice.PAYMENT_PARTIAL


def _apply_to_invoice(invoice: Invoice, delta: Decimal) -> None:
    """
    total_paid += delta with a conditional UPDATE on the value we read.
    A concurrent payment makes the UPDATE miss; we re-read and try again.
    """
    attempts = int(settings.ACCOUNTING["DOCUMENT_NUMBER_MAX_RETRIES"])

    for _ in range(attempts):
        current = Invoice.objects.filter(pk=invoice.pk).values("total_paid", "total_amount").first()
        total_amount = current["total_amount"]
        new_paid = current["total_paid"] + delta

        if new_paid > total_amount:
            raise BusinessRuleError(
                f"Payment exceeds the balance due on {invoice.document_number}"
            )
        if new_paid < 0:
            raise BusinessRuleError("Invoice total_paid cannot go negative")

        updated = Invoice.objects.filter(
            pk=invoice.pk, total_paid=current["total_paid"]
        ).update(
            total_paid=new_paid,
            balance_due=total_amount - new_paid,
            payment_status=payment_status_for(total_amount, new_paid),
        )
        if updated:
            return

    raise ConcurrentModificationError(
        f"Could not apply payment to {invoice.document_number}; too many concurrent updates"
    )


class _PaymentApplication:
    """Applied at most once, reverted at most once."""

    def __init__(self, invoice: Invoice, amount: Decimal):
        self.invoice = invoice
        self.amount = amount
        self.applied = False

    def apply(self):
        _apply_to_invoice(self.invoice, self.amount)
        self.applied = True
        return self

    def revert(self, _=None):
        if self.applied:
            _apply_to_invoice(self.invoice, -self.amount)
            self.applied = False


def record_payment(
    *,
    actor,
    invoice: Invoice,
    amount,
    payment_mode: str,
    payment_date=None,
    reference_number: str = "",
    notes: str = "",
) -> Payment:
    require(actor, CAP_PAYMENT_RECORD, invoice)

    amount = _parse_amount(amount)
    valid_modes = {m for m, _ in Payment.PAYMENT_MODES}
    if payment_mode not in valid_modes:
        raise ValidationError(f"Unknown payment mode '{payment_mode}'")

    invoice = Invoice.objects.select_related("company", "customer").get(pk=invoice.pk)

    if invoice.is_credit_note:
        raise BusinessRuleError("Credit notes cannot receive payments")
    if invoice.status == Invoice.Status.CREDITED:
        raise BusinessRuleError(f"Invoice {invoice.document_number} has been credited")
    if invoice.payment_status == Invoice.PAYMENT_PAID:
        raise BusinessRuleError(f"Invoice {invoice.document_number} is already fully paid")
    if amount > invoice.balance_due:
        raise ValidationError(
            f"Payment amount {amount} exceeds balance due {invoice.balance_due}"
        )

    if payment_mode == Payment.MODE_CASH and amount > cash_transaction_limit():
        raise BusinessRuleError(
            f"Section 269ST: cash receipts above {cash_transaction_limit()} are not allowed",
            code="CASH_LIMIT_EXCEEDED",
        )

    def _insert(number: str) -> Payment:
        return Payment.objects.create(
            company=invoice.company,
            invoice=invoice,
            payment_number=number,
            payment_date=payment_date or timezone.localdate(),
            amount=amount,
            payment_mode=payment_mode,
            reference_number=reference_number or "",
            notes=notes or "",
            created_by=actor,
        )

    def _delete_payment(payment: Payment) -> None:
        with transaction.atomic():
            Payment.objects.filter(pk=payment.pk).delete()

    saga = Saga("record_payment")
    with saga:
        payment = saga.step(
            "persist_payment",
            lambda: create_with_document_number(
                company_id=invoice.company_id, kind=KIND_PAYMENT, create=_insert
            ),
            compensate=_delete_payment,
        )
        entry = saga.step(
            "post_payment",
            lambda: posting.post_payment_to_ledger(payment=payment, created_by=actor),
            compensate=lambda e: void_journal_entry(
                e, created_by=actor, reason="payment rolled back"
            ),
        )
        Payment.objects.filter(pk=payment.pk).update(journal_entry=entry)
        payment.journal_entry = entry

        application = _PaymentApplication(invoice, amount)
        saga.step("apply_to_invoice", application.apply, compensate=application.revert)

    logger.info(
        "Payment %s of %s recorded against %s (%s)",
        payment.payment_number,
        amount,
        invoice.document_number,
        payment_mode,
    )
    return payment
