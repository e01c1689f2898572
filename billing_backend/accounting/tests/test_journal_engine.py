# accounting/tests/test_journal_engine.py

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase

from accounting.models.journal import JournalEntry, JournalEntryLine
from accounting.services.balance_service import (
    get_account_balance,
    get_trial_balance,
    trial_balance_is_balanced,
)
from accounting.services.exceptions import IdempotencyError, JournalEntryCreationError
from accounting.services.journal_entry_service import (
    create_journal_entry,
    entry_totals,
    void_journal_entry,
)
from accounting.tests.helpers import balance, ledger, make_company


class JournalEngineTests(TestCase):
    """
    GUARANTEES:
    - Every entry balances; anything else is rejected whole
    - Entry + lines + balance moves are one unit
    - Posted rows are immutable
    """

    def setUp(self):
        self.company = make_company()
        self.other_company = make_company(name="Other Co", state="Karnataka")

        self.cash = ledger(self.company, "Cash")
        self.sales = ledger(self.company, "Sales")
        self.bank = ledger(self.company, "Bank")

    def _post(self, postings, **kwargs):
        return create_journal_entry(
            company=self.company,
            narration=kwargs.pop("narration", "Test entry"),
            postings=postings,
            transaction_type=kwargs.pop("transaction_type", JournalEntry.TYPE_MANUAL),
            **kwargs,
        )

    # --------------------------------------------------
    # Balanced postings
    # --------------------------------------------------

    def test_balanced_entry_writes_lines_and_moves_balances(self):
        entry = self._post(
            [
                {"account": self.cash, "debit": Decimal("500.00"), "credit": 0},
                {"account": self.sales, "debit": 0, "credit": Decimal("500.00")},
            ]
        )

        self.assertTrue(entry.entry_number.startswith("JE-"))
        self.assertEqual(entry.lines.count(), 2)
        self.assertEqual(entry_totals(entry), (Decimal("500.00"), Decimal("500.00")))

        # asset: debit increases; income: credit increases
        self.assertEqual(balance(self.company, "Cash"), Decimal("500.00"))
        self.assertEqual(balance(self.company, "Sales"), Decimal("500.00"))

    def test_cached_balance_matches_recomputed_balance(self):
        self._post(
            [
                {"account": self.cash, "debit": "120.50", "credit": 0},
                {"account": self.sales, "debit": 0, "credit": "120.50"},
            ]
        )
        self._post(
            [
                {"account": self.bank, "debit": "20.50", "credit": 0},
                {"account": self.cash, "debit": 0, "credit": "20.50"},
            ]
        )

        cash = ledger(self.company, "Cash")
        self.assertEqual(cash.current_balance, Decimal("100.00"))
        self.assertEqual(get_account_balance(cash), Decimal("100.00"))
        self.assertTrue(trial_balance_is_balanced(self.company))

    # --------------------------------------------------
    # Rejections (nothing persisted)
    # --------------------------------------------------

    def test_unbalanced_entry_is_rejected(self):
        with self.assertRaises(JournalEntryCreationError) as ctx:
            self._post(
                [
                    {"account": self.cash, "debit": "100.00", "credit": 0},
                    {"account": self.sales, "debit": 0, "credit": "99.99"},
                ]
            )

        self.assertIn("not balanced", str(ctx.exception))
        self.assertEqual(JournalEntry.objects.count(), 0)
        self.assertEqual(balance(self.company, "Cash"), Decimal("0.00"))

    def test_line_with_both_sides_is_rejected(self):
        with self.assertRaises(JournalEntryCreationError):
            self._post(
                [
                    {"account": self.cash, "debit": "10.00", "credit": "10.00"},
                    {"account": self.sales, "debit": 0, "credit": "0.00"},
                ]
            )
        self.assertEqual(JournalEntryLine.objects.count(), 0)

    def test_negative_or_zero_lines_are_rejected(self):
        with self.assertRaises(JournalEntryCreationError):
            self._post(
                [
                    {"account": self.cash, "debit": "-10.00", "credit": 0},
                    {"account": self.sales, "debit": "-10.00", "credit": 0},
                ]
            )
        with self.assertRaises(JournalEntryCreationError):
            self._post(
                [
                    {"account": self.cash, "debit": "10.00", "credit": 0},
                    {"account": self.sales, "debit": 0, "credit": "10.00"},
                    {"account": self.bank, "debit": 0, "credit": 0},
                ]
            )

    def test_single_line_entry_is_rejected(self):
        with self.assertRaises(JournalEntryCreationError):
            self._post([{"account": self.cash, "debit": "10.00", "credit": 0}])

    def test_other_company_ledger_is_rejected(self):
        foreign_sales = ledger(self.other_company, "Sales")
        with self.assertRaises(JournalEntryCreationError):
            self._post(
                [
                    {"account": self.cash, "debit": "10.00", "credit": 0},
                    {"account": foreign_sales, "debit": 0, "credit": "10.00"},
                ]
            )
        self.assertEqual(JournalEntry.objects.count(), 0)

    def test_inactive_ledger_is_rejected(self):
        self.bank.is_active = False
        self.bank.save()

        with self.assertRaises(JournalEntryCreationError):
            self._post(
                [
                    {"account": self.bank, "debit": "10.00", "credit": 0},
                    {"account": self.sales, "debit": 0, "credit": "10.00"},
                ]
            )

    # --------------------------------------------------
    # Idempotency + immutability
    # --------------------------------------------------

    def test_duplicate_reference_is_refused(self):
        postings = [
            {"account": self.cash, "debit": "10.00", "credit": 0},
            {"account": self.sales, "debit": 0, "credit": "10.00"},
        ]
        self._post(postings, reference="INVOICE:abc")

        with self.assertRaises(IdempotencyError):
            self._post(postings, reference="INVOICE:abc")

        self.assertEqual(JournalEntry.objects.filter(reference="INVOICE:abc").count(), 1)
        self.assertEqual(balance(self.company, "Cash"), Decimal("10.00"))

    def test_posted_entry_cannot_be_changed_or_deleted(self):
        entry = self._post(
            [
                {"account": self.cash, "debit": "10.00", "credit": 0},
                {"account": self.sales, "debit": 0, "credit": "10.00"},
            ]
        )

        entry.narration = "Rewritten"
        with self.assertRaises(ValidationError):
            entry.save()
        with self.assertRaises(ValidationError):
            entry.delete()

        line = entry.lines.first()
        with self.assertRaises(ValidationError):
            line.save()
        with self.assertRaises(ValidationError):
            line.delete()

    # --------------------------------------------------
    # Void (compensation)
    # --------------------------------------------------

    def test_void_posts_mirror_entry_once(self):
        entry = self._post(
            [
                {"account": self.cash, "debit": "75.00", "credit": 0},
                {"account": self.sales, "debit": 0, "credit": "75.00"},
            ],
            transaction_id="doc-1",
        )

        void = void_journal_entry(entry, reason="rolled back")
        again = void_journal_entry(entry)

        self.assertEqual(void.pk, again.pk)
        self.assertEqual(void.reference, f"VOID:{entry.pk}")
        self.assertEqual(void.transaction_type, JournalEntry.TYPE_VOID)
        self.assertEqual(balance(self.company, "Cash"), Decimal("0.00"))
        self.assertEqual(balance(self.company, "Sales"), Decimal("0.00"))

    def test_trial_balance_lists_company_ledgers_only(self):
        self._post(
            [
                {"account": self.cash, "debit": "40.00", "credit": 0},
                {"account": self.sales, "debit": 0, "credit": "40.00"},
            ]
        )

        rows = get_trial_balance(self.company)
        names = {r["name"] for r in rows}

        self.assertIn("Cash", names)
        self.assertEqual(len(rows), ledger(self.company, "Cash").company.ledger_accounts.count())
        cash_row = next(r for r in rows if r["name"] == "Cash")
        self.assertEqual(cash_row["debit_total"], Decimal("40.00"))
        self.assertEqual(cash_row["balance"], Decimal("40.00"))
