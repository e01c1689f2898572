# accounting/tests/test_manual_entry.py

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import PermissionDenied
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from accounting.models.journal import JournalEntry
from accounting.services.exceptions import AccountResolutionError, BusinessRuleError
from accounting.services.manual_entry_service import post_manual_entry
from accounting.tests.helpers import balance, ledger, make_company, make_user


class ManualEntryServiceTests(TestCase):
    def setUp(self):
        self.company = make_company()
        self.accountant = make_user(self.company, role="accountant")
        self.viewer = make_user(self.company, role="viewer")

        self.cash = ledger(self.company, "Cash")
        self.bank = ledger(self.company, "Bank")
        self.sales = ledger(self.company, "Sales")

    def _lines(self, debit_ledger, credit_ledger, amount):
        return [
            {"ledger_account_id": debit_ledger.pk, "debit_amount": amount, "credit_amount": 0},
            {"ledger_account_id": credit_ledger.pk, "debit_amount": 0, "credit_amount": amount},
        ]

    def test_accountant_posts_balanced_entry(self):
        entry = post_manual_entry(
            actor=self.accountant,
            company=self.company,
            narration="Cash deposited in bank",
            lines=self._lines(self.bank, self.sales, Decimal("1500.00")),
        )

        self.assertEqual(entry.transaction_type, JournalEntry.TYPE_MANUAL)
        self.assertEqual(entry.created_by, self.accountant)
        self.assertEqual(balance(self.company, "Bank"), Decimal("1500.00"))

    def test_viewer_cannot_post(self):
        with self.assertRaises(PermissionDenied):
            post_manual_entry(
                actor=self.viewer,
                company=self.company,
                narration="Nope",
                lines=self._lines(self.bank, self.sales, Decimal("10.00")),
            )
        self.assertFalse(JournalEntry.objects.exists())

    def test_accountant_of_other_company_cannot_post(self):
        outsider = make_user(make_company(name="Other Co"), role="accountant")

        with self.assertRaises(PermissionDenied):
            post_manual_entry(
                actor=outsider,
                company=self.company,
                narration="Nope",
                lines=self._lines(self.bank, self.sales, Decimal("10.00")),
            )

    def test_cash_debit_above_limit_is_refused(self):
        with self.assertRaises(BusinessRuleError) as ctx:
            post_manual_entry(
                actor=self.accountant,
                company=self.company,
                narration="Large cash receipt",
                lines=self._lines(self.cash, self.sales, Decimal("200000.01")),
            )

        self.assertEqual(ctx.exception.code, "CASH_LIMIT_EXCEEDED")
        self.assertEqual(balance(self.company, "Cash"), Decimal("0.00"))

    def test_cash_debit_at_limit_is_allowed(self):
        post_manual_entry(
            actor=self.accountant,
            company=self.company,
            narration="Cash receipt at limit",
            lines=self._lines(self.cash, self.sales, Decimal("200000.00")),
        )
        self.assertEqual(balance(self.company, "Cash"), Decimal("200000.00"))

    def test_ledger_of_other_company_is_not_found(self):
        foreign = ledger(make_company(name="Other Co"), "Sales")

        with self.assertRaises(AccountResolutionError):
            post_manual_entry(
                actor=self.accountant,
                company=self.company,
                narration="Cross company",
                lines=self._lines(self.bank, foreign, Decimal("10.00")),
            )


class JournalEntryApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.company = make_company()
        self.accountant = make_user(self.company, role="accountant")
        self.viewer = make_user(self.company, role="viewer")
        self.url = reverse("journal-entry-list")

        self.bank = ledger(self.company, "Bank")
        self.sales = ledger(self.company, "Sales")

    def _payload(self, debit="250.00", credit="250.00"):
        return {
            "narration": "Manual adjustment",
            "lines": [
                {"ledger_account_id": str(self.bank.pk), "debit_amount": debit},
                {"ledger_account_id": str(self.sales.pk), "credit_amount": credit},
            ],
        }

    def test_post_returns_entry_envelope(self):
        self.client.force_authenticate(self.accountant)

        response = self.client.post(self.url, self._payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data["success"])
        entry = response.data["journal_entry"]
        self.assertEqual(entry["total_debit"], "250.00")
        self.assertEqual(entry["total_credit"], "250.00")
        self.assertEqual(len(entry["lines"]), 2)

    def test_unbalanced_post_returns_error_envelope(self):
        self.client.force_authenticate(self.accountant)

        response = self.client.post(self.url, self._payload(credit="200.00"), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data["success"])
        self.assertEqual(response.data["error"]["code"], "JOURNAL_ENTRY_INVALID")
        self.assertFalse(JournalEntry.objects.exists())

    def test_viewer_cannot_post_but_can_list(self):
        self.client.force_authenticate(self.viewer)

        response = self.client.post(self.url, self._payload(), format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_anonymous_is_rejected(self):
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_trial_balance_endpoint(self):
        self.client.force_authenticate(self.accountant)
        self.client.post(self.url, self._payload(), format="json")

        response = self.client.get(reverse("ledger-trial-balance"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["is_balanced"])
        self.assertEqual(response.data["total_debit"], "250.00")
