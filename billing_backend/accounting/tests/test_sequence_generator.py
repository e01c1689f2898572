# accounting/tests/test_sequence_generator.py

from datetime import date, datetime
from datetime import timezone as dt_timezone
from unittest import mock

from django.db import IntegrityError
from django.test import TestCase

from accounting.models.journal import JournalEntry
from accounting.services.exceptions import DocumentNumberExhaustedError, PersistenceError
from accounting.services.sequence_generator import (
    KIND_CREDIT_NOTE,
    KIND_INVOICE,
    KIND_JOURNAL_ENTRY,
    KIND_PAYMENT,
    KIND_SALES_ORDER,
    create_with_document_number,
    format_number,
    next_number,
    parse_sequence,
)
from accounting.tests.helpers import make_company, make_customer
from sales.models import SalesOrder


def _journal_entry(company, number):
    return JournalEntry.objects.create(
        company=company,
        entry_number=number,
        narration="Seeded",
        transaction_type=JournalEntry.TYPE_MANUAL,
    )


class SequenceFormatTests(TestCase):
    def test_formats_are_exact(self):
        d = date(2025, 3, 7)
        self.assertEqual(format_number(KIND_INVOICE, d, 1), "INV-2025-0001")
        self.assertEqual(format_number(KIND_CREDIT_NOTE, d, 42), "CN-2025-0042")
        self.assertEqual(format_number(KIND_SALES_ORDER, d, 3), "SO-2025-03-00003")
        self.assertEqual(format_number(KIND_JOURNAL_ENTRY, d, 10000), "JE-2025-10000")
        self.assertEqual(format_number(KIND_PAYMENT, d, 7), "PMT-2025-0007")

    def test_parse_sequence(self):
        self.assertEqual(parse_sequence("INV-2025-0042"), 42)
        self.assertEqual(parse_sequence("SO-2025-03-00011"), 11)
        self.assertEqual(parse_sequence(""), 0)
        self.assertEqual(parse_sequence(None), 0)
        self.assertEqual(parse_sequence("garbage"), 0)


class NextNumberTests(TestCase):
    def setUp(self):
        self.company = make_company()
        self.other = make_company(name="Other Co")

    def test_first_number_of_the_year(self):
        self.assertEqual(
            next_number(company_id=self.company.pk, kind=KIND_JOURNAL_ENTRY, on_date=date(2026, 5, 1)),
            "JE-2026-0001",
        )

    def test_increments_from_last_issued(self):
        _journal_entry(self.company, "JE-2026-0009")

        self.assertEqual(
            next_number(company_id=self.company.pk, kind=KIND_JOURNAL_ENTRY, on_date=date(2026, 5, 1)),
            "JE-2026-0010",
        )

    def test_wider_number_wins_when_created_together(self):
        _journal_entry(self.company, "JE-2026-10000")
        _journal_entry(self.company, "JE-2026-9999")
        JournalEntry.objects.filter(company=self.company).update(
            created_at=datetime(2026, 5, 1, 10, 0, tzinfo=dt_timezone.utc)
        )

        self.assertEqual(
            next_number(company_id=self.company.pk, kind=KIND_JOURNAL_ENTRY, on_date=date(2026, 5, 1)),
            "JE-2026-10001",
        )

    def test_sequences_are_per_company(self):
        _journal_entry(self.company, "JE-2026-0009")

        self.assertEqual(
            next_number(company_id=self.other.pk, kind=KIND_JOURNAL_ENTRY, on_date=date(2026, 5, 1)),
            "JE-2026-0001",
        )

    def test_new_year_restarts_at_one(self):
        _journal_entry(self.company, "JE-2026-0123")

        self.assertEqual(
            next_number(company_id=self.company.pk, kind=KIND_JOURNAL_ENTRY, on_date=date(2027, 1, 2)),
            "JE-2027-0001",
        )

    def test_sales_orders_restart_every_month(self):
        customer = make_customer(self.company)
        SalesOrder.objects.create(
            company=self.company,
            customer=customer,
            order_number="SO-2026-12-00007",
        )

        self.assertEqual(
            next_number(company_id=self.company.pk, kind=KIND_SALES_ORDER, on_date=date(2026, 12, 20)),
            "SO-2026-12-00008",
        )
        self.assertEqual(
            next_number(company_id=self.company.pk, kind=KIND_SALES_ORDER, on_date=date(2027, 1, 5)),
            "SO-2027-01-00001",
        )


class CreateWithDocumentNumberTests(TestCase):
    def setUp(self):
        self.company = make_company()

    def _create(self, number):
        return _journal_entry(self.company, number)

    def test_collision_retries_with_next_number(self):
        _journal_entry(self.company, "JE-2026-0001")

        with mock.patch(
            "accounting.services.sequence_generator.next_number",
            side_effect=["JE-2026-0001", "JE-2026-0002"],
        ):
            entry = create_with_document_number(
                company_id=self.company.pk,
                kind=KIND_JOURNAL_ENTRY,
                create=self._create,
            )

        self.assertEqual(entry.entry_number, "JE-2026-0002")
        self.assertEqual(JournalEntry.objects.filter(company=self.company).count(), 2)

    def test_gives_up_after_max_attempts(self):
        _journal_entry(self.company, "JE-2026-0001")

        with mock.patch(
            "accounting.services.sequence_generator.next_number",
            return_value="JE-2026-0001",
        ) as mocked:
            with self.assertRaises(DocumentNumberExhaustedError):
                create_with_document_number(
                    company_id=self.company.pk,
                    kind=KIND_JOURNAL_ENTRY,
                    create=self._create,
                    max_attempts=3,
                )

        self.assertEqual(mocked.call_count, 3)

    def test_unrelated_integrity_error_is_not_retried(self):
        def _broken(number):
            raise IntegrityError("some other constraint")

        with self.assertRaises(PersistenceError):
            create_with_document_number(
                company_id=self.company.pk,
                kind=KIND_JOURNAL_ENTRY,
                create=_broken,
            )

        self.assertFalse(JournalEntry.objects.filter(company=self.company).exists())
