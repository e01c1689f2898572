# invoices/tests/test_credit_notes.py

from __future__ import annotations

from decimal import Decimal
from unittest import mock

from django.core.exceptions import PermissionDenied
from django.test import TestCase
from django.utils import timezone

from accounting.models.journal import JournalEntry
from accounting.services.exceptions import BusinessRuleError, PersistenceError, ValidationError
from accounting.services.balance_service import trial_balance_is_balanced
from accounting.tests.helpers import balance, make_company, make_customer, make_user
from inventory.models import GoodsDispatch
from invoices.models import Invoice, InvoiceAuditLog
from invoices.services.credit_note_service import create_credit_note, credit_invoice
from invoices.services.exceptions import (
    InvalidInvoiceTransitionError,
    InvoiceAlreadyCreditedError,
)
from invoices.services.invoice_service import edit_invoice
from invoices.services.payment_service import record_payment
from invoices.tests.helpers import SINGLE_ITEM, issue_invoice

CUSTOMER = "Buyer Pvt Ltd"
LEDGERS = ("Buyer Pvt Ltd", "Sales", "CGST Output", "SGST Output", "IGST Output")


class CreditNoteTests(TestCase):
    """
    GUARANTEES:
    - Credit note mirrors the original (every amount negated, rates kept)
    - Original + credit note leave every ledger at zero
    - An invoice is credited once
    """

    def setUp(self):
        self.company = make_company()
        self.accountant = make_user(self.company, role="accountant")
        self.customer = make_customer(self.company)
        self.invoice = issue_invoice(self.accountant, self.customer)

    def _credit(self, invoice=None, reason="Goods returned", actor=None):
        return create_credit_note(
            actor=actor or self.accountant,
            invoice=invoice or self.invoice,
            reason=reason,
        )

    def test_credit_note_mirrors_original(self):
        credit_note = self._credit()

        year = timezone.localdate().year
        self.assertEqual(credit_note.document_number, f"CN-{year}-0001")
        self.assertTrue(credit_note.is_credit_note)
        self.assertEqual(credit_note.credit_note_for_id, self.invoice.pk)
        self.assertEqual(credit_note.subtotal, Decimal("-2000.00"))
        self.assertEqual(credit_note.gst_amount, Decimal("-360.00"))
        self.assertEqual(credit_note.total_amount, Decimal("-2360.00"))
        self.assertEqual(credit_note.balance_due, Decimal("0.00"))
        self.assertEqual(credit_note.payment_status, Invoice.PAYMENT_PAID)
        self.assertIn(self.invoice.document_number, credit_note.notes)
        self.assertIn("Goods returned", credit_note.notes)

        originals = list(self.invoice.items.order_by("product_reference"))
        mirrored = list(credit_note.items.order_by("product_reference"))
        self.assertEqual(len(originals), len(mirrored))
        for original, mirror in zip(originals, mirrored):
            self.assertEqual(mirror.quantity, -original.quantity)
            self.assertEqual(mirror.line_total, -original.line_total)
            self.assertEqual(mirror.cgst_amount, -original.cgst_amount)
            self.assertEqual(mirror.igst_amount, -original.igst_amount)
            self.assertEqual(mirror.cgst_rate, original.cgst_rate)
            self.assertEqual(mirror.igst_rate, original.igst_rate)
            self.assertEqual(mirror.unit_rate, original.unit_rate)

    def test_original_is_credited_and_audited(self):
        credit_note = self._credit()

        self.invoice.refresh_from_db()
        self.assertEqual(self.invoice.status, Invoice.Status.CREDITED)

        log = self.invoice.audit_logs.get(change_type=InvoiceAuditLog.CHANGE_CREDITED)
        self.assertEqual(log.changes["credit_note_id"], str(credit_note.pk))
        self.assertEqual(log.changes["credit_note_number"], credit_note.document_number)
        self.assertEqual(log.changes["reason"], "Goods returned")

    def test_ledgers_net_to_zero(self):
        credit_note = self._credit()

        entry = JournalEntry.objects.get(reference=f"INVOICE:{credit_note.pk}")
        self.assertEqual(entry.transaction_type, JournalEntry.TYPE_CREDIT_NOTE)
        for name in LEDGERS:
            with self.subTest(ledger=name):
                self.assertEqual(balance(self.company, name), Decimal("0.00"))
        self.assertTrue(trial_balance_is_balanced(self.company))

    def test_credit_note_keeps_the_dispatch(self):
        dispatch = GoodsDispatch.objects.create(
            company=self.company,
            customer=self.customer,
            dispatch_number="DSP-100",
            dispatch_date=timezone.localdate(),
        )
        invoice = issue_invoice(self.accountant, self.customer, items=SINGLE_ITEM, dispatch=dispatch)

        credit_note = self._credit(invoice=invoice)

        credit_note.refresh_from_db()
        self.assertEqual(credit_note.dispatch_id, dispatch.pk)

    def test_edited_invoice_credits_its_current_amounts(self):
        edit_invoice(actor=self.accountant, invoice=self.invoice, items=SINGLE_ITEM)

        credit_note = self._credit()

        self.assertEqual(credit_note.total_amount, Decimal("-1180.00"))
        for name in LEDGERS:
            with self.subTest(ledger=name):
                self.assertEqual(balance(self.company, name), Decimal("0.00"))

    def test_second_credit_is_refused(self):
        self._credit()

        with self.assertRaises(InvoiceAlreadyCreditedError):
            credit_invoice(actor=self.accountant, invoice=self.invoice, reason="Again")

        self.assertEqual(Invoice.objects.filter(is_credit_note=True).count(), 1)

    def test_credit_note_cannot_be_credited_edited_or_paid(self):
        credit_note = self._credit()

        with self.assertRaises(InvalidInvoiceTransitionError):
            self._credit(invoice=credit_note)
        with self.assertRaises(InvalidInvoiceTransitionError):
            edit_invoice(actor=self.accountant, invoice=credit_note, items=SINGLE_ITEM)
        with self.assertRaises(BusinessRuleError):
            record_payment(
                actor=self.accountant,
                invoice=credit_note,
                amount=Decimal("10.00"),
                payment_mode="bank",
            )

    def test_reason_is_required(self):
        with self.assertRaises(ValidationError):
            self._credit(reason="   ")

        self.invoice.refresh_from_db()
        self.assertEqual(self.invoice.status, Invoice.Status.FINALIZED)

    def test_sales_role_cannot_credit(self):
        sales = make_user(self.company, role="sales")

        with self.assertRaises(PermissionDenied):
            self._credit(actor=sales)

    def test_journal_failure_leaves_original_untouched(self):
        with mock.patch(
            "accounting.services.posting.post_invoice_to_ledger",
            side_effect=PersistenceError("ledger unavailable"),
        ):
            with self.assertRaises(PersistenceError):
                self._credit()

        self.invoice.refresh_from_db()
        self.assertEqual(self.invoice.status, Invoice.Status.FINALIZED)
        self.assertFalse(Invoice.objects.filter(is_credit_note=True).exists())
        self.assertEqual(balance(self.company, CUSTOMER), Decimal("2360.00"))

    def test_audit_failure_restores_status_and_voids_reversal(self):
        with mock.patch(
            "invoices.services.audit_log.append",
            side_effect=PersistenceError("audit store down"),
        ):
            with self.assertRaises(PersistenceError):
                self._credit()

        self.invoice.refresh_from_db()
        self.assertEqual(self.invoice.status, Invoice.Status.FINALIZED)
        self.assertFalse(Invoice.objects.filter(is_credit_note=True).exists())
        self.assertEqual(balance(self.company, CUSTOMER), Decimal("2360.00"))
        self.assertEqual(balance(self.company, "Sales"), Decimal("2000.00"))
