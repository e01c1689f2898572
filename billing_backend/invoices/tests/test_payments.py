# invoices/tests/test_payments.py

from __future__ import annotations

from decimal import Decimal
from unittest import mock

from django.core.exceptions import PermissionDenied
from django.test import TestCase
from django.utils import timezone

from accounting.models.journal import JournalEntry
from accounting.services.exceptions import BusinessRuleError, PersistenceError, ValidationError
from accounting.tests.helpers import balance, make_company, make_customer, make_user
from invoices.models import Invoice, Payment
from invoices.services.credit_note_service import create_credit_note
from invoices.services.exceptions import ConcurrentModificationError
from invoices.services.payment_service import payment_status_for, record_payment
from invoices.tests.helpers import issue_invoice

CUSTOMER = "Buyer Pvt Ltd"


class PaymentTests(TestCase):
    def setUp(self):
        self.company = make_company()
        self.accountant = make_user(self.company, role="accountant")
        self.customer = make_customer(self.company)
        self.invoice = issue_invoice(self.accountant, self.customer)

    def _pay(self, amount, mode="bank", invoice=None, actor=None):
        return record_payment(
            actor=actor or self.accountant,
            invoice=invoice or self.invoice,
            amount=amount,
            payment_mode=mode,
        )

    def test_partial_payment(self):
        payment = self._pay(Decimal("1000.00"))

        year = timezone.localdate().year
        self.assertEqual(payment.payment_number, f"PMT-{year}-0001")
        self.assertIsNotNone(payment.journal_entry)
        self.assertEqual(payment.journal_entry.reference, f"PAYMENT:{payment.pk}")

        self.invoice.refresh_from_db()
        self.assertEqual(self.invoice.total_paid, Decimal("1000.00"))
        self.assertEqual(self.invoice.balance_due, Decimal("1360.00"))
        self.assertEqual(self.invoice.payment_status, Invoice.PAYMENT_PARTIAL)

        self.assertEqual(balance(self.company, "Bank"), Decimal("1000.00"))
        self.assertEqual(balance(self.company, CUSTOMER), Decimal("1360.00"))

    def test_cash_payment_hits_cash_ledger(self):
        self._pay(Decimal("360.00"), mode="cash")

        self.assertEqual(balance(self.company, "Cash"), Decimal("360.00"))
        self.assertEqual(balance(self.company, "Bank"), Decimal("0.00"))

    def test_full_payment_settles_invoice(self):
        self._pay(Decimal("1360.00"))
        self._pay(Decimal("1000.00"), mode="upi")

        self.invoice.refresh_from_db()
        self.assertEqual(self.invoice.payment_status, Invoice.PAYMENT_PAID)
        self.assertEqual(self.invoice.balance_due, Decimal("0.00"))
        self.assertEqual(balance(self.company, CUSTOMER), Decimal("0.00"))

        with self.assertRaises(BusinessRuleError):
            self._pay(Decimal("1.00"))

    def test_overpayment_is_refused(self):
        with self.assertRaises(ValidationError):
            self._pay(Decimal("2360.01"))
        self.assertFalse(Payment.objects.exists())

    def test_invalid_amount_or_mode(self):
        for amount in ("0", "-5", "abc"):
            with self.subTest(amount=amount):
                with self.assertRaises(ValidationError):
                    self._pay(amount)

        with self.assertRaises(ValidationError):
            self._pay(Decimal("10.00"), mode="barter")

    def test_cash_above_limit_is_refused(self):
        big = issue_invoice(
            self.accountant,
            self.customer,
            items=[{"quantity": "1", "unit_rate": "300000.00", "gst_rate": "0"}],
        )

        with self.assertRaises(BusinessRuleError) as ctx:
            self._pay(Decimal("200000.01"), mode="cash", invoice=big)
        self.assertEqual(ctx.exception.code, "CASH_LIMIT_EXCEEDED")

        self._pay(Decimal("200000.00"), mode="cash", invoice=big)
        self._pay(Decimal("99999.99"), mode="bank", invoice=big)

    def test_credited_invoice_cannot_be_paid(self):
        create_credit_note(actor=self.accountant, invoice=self.invoice, reason="Cancelled order")

        with self.assertRaises(BusinessRuleError):
            self._pay(Decimal("10.00"))

    def test_sales_role_cannot_record_payment(self):
        sales = make_user(self.company, role="sales")

        with self.assertRaises(PermissionDenied):
            self._pay(Decimal("10.00"), actor=sales)

    def test_journal_failure_removes_payment(self):
        with mock.patch(
            "accounting.services.posting.post_payment_to_ledger",
            side_effect=PersistenceError("ledger unavailable"),
        ):
            with self.assertRaises(PersistenceError):
                self._pay(Decimal("500.00"))

        self.assertFalse(Payment.objects.exists())
        self.invoice.refresh_from_db()
        self.assertEqual(self.invoice.total_paid, Decimal("0.00"))

    def test_apply_failure_voids_payment_entry(self):
        with mock.patch(
            "invoices.services.payment_service._apply_to_invoice",
            side_effect=ConcurrentModificationError("busy"),
        ):
            with self.assertRaises(ConcurrentModificationError):
                self._pay(Decimal("500.00"))

        self.assertFalse(Payment.objects.exists())
        self.assertTrue(JournalEntry.objects.filter(transaction_type=JournalEntry.TYPE_VOID).exists())
        self.assertEqual(balance(self.company, "Bank"), Decimal("0.00"))
        self.assertEqual(balance(self.company, CUSTOMER), Decimal("2360.00"))

    def test_payment_status_for(self):
        total = Decimal("100.00")
        self.assertEqual(payment_status_for(total, Decimal("0.00")), Invoice.PAYMENT_UNPAID)
        self.assertEqual(payment_status_for(total, Decimal("40.00")), Invoice.PAYMENT_PARTIAL)
        self.assertEqual(payment_status_for(total, Decimal("100.00")), Invoice.PAYMENT_PAID)
