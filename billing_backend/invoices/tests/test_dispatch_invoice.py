# invoices/tests/test_dispatch_invoice.py

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import PermissionDenied
from django.test import TestCase, override_settings
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from accounting.models.journal import JournalEntry
from accounting.services.exceptions import NotFoundError, ValidationError
from accounting.tests.helpers import balance, make_company, make_customer, make_user
from inventory.models import GoodsDispatch, GoodsDispatchItem
from invoices.models import Invoice
from invoices.services.credit_note_service import create_credit_note
from invoices.services.dispatch_invoice import (
    create_invoice_from_dispatch,
    get_dispatch_for_actor,
    preview_invoice_from_dispatch,
)
from invoices.services.exceptions import DispatchAlreadyInvoicedError


def make_dispatch(company, customer, number="DSP-001"):
    dispatch = GoodsDispatch.objects.create(
        company=company,
        customer=customer,
        dispatch_number=number,
        dispatch_date=timezone.localdate(),
    )
    # 10 × 100 @18% + 4 × 50 (cost only, default rate)
    GoodsDispatchItem.objects.create(
        dispatch=dispatch,
        product_reference="WIDGET",
        quantity=Decimal("10"),
        unit_cost=Decimal("60.00"),
        unit_rate=Decimal("100.00"),
        gst_rate=Decimal("18"),
    )
    GoodsDispatchItem.objects.create(
        dispatch=dispatch,
        product_reference="BOLT",
        quantity=Decimal("4"),
        unit_cost=Decimal("50.00"),
    )
    return dispatch


class DispatchInvoiceServiceTests(TestCase):
    """
    GUARANTEES:
    - Preview prices every dispatched item and stores nothing
    - Create bills the dispatch once and posts its cost
    - A credited invoice frees the dispatch for billing again
    """

    def setUp(self):
        self.company = make_company()
        self.accountant = make_user(self.company, role="accountant")
        self.customer = make_customer(self.company)
        self.dispatch = make_dispatch(self.company, self.customer)

    def test_preview_prices_lines_and_writes_nothing(self):
        preview = preview_invoice_from_dispatch(actor=self.accountant, dispatch=self.dispatch)

        # 1000 + 200 taxable, 18% on both
        self.assertEqual(Decimal(preview["subtotal"]), Decimal("1200.00"))
        self.assertEqual(Decimal(preview["gst_amount"]), Decimal("216.00"))
        self.assertEqual(Decimal(preview["total_amount"]), Decimal("1416.00"))
        self.assertFalse(preview["is_inter_state"])
        self.assertEqual(preview["invoice_type"], "B2C")
        self.assertEqual(preview["dispatch"]["dispatch_number"], "DSP-001")
        self.assertEqual(preview["customer"]["id"], str(self.customer.pk))
        self.assertEqual(len(preview["items"]), 2)

        self.assertFalse(Invoice.objects.exists())
        self.assertFalse(JournalEntry.objects.exists())

    def test_missing_rate_falls_back_to_cost_and_default_gst(self):
        preview = preview_invoice_from_dispatch(actor=self.accountant, dispatch=self.dispatch)

        bolt = next(item for item in preview["items"] if item["product_reference"] == "BOLT")
        self.assertEqual(Decimal(bolt["unit_rate"]), Decimal("50.00"))
        self.assertEqual(Decimal(bolt["cgst_rate"]), Decimal("9"))
        self.assertEqual(Decimal(bolt["sgst_rate"]), Decimal("9"))
        self.assertEqual(Decimal(bolt["line_total"]), Decimal("236.00"))

    def test_default_rate_follows_settings(self):
        accounting = {**settings.ACCOUNTING, "DEFAULT_GST_RATE": "5"}
        with override_settings(ACCOUNTING=accounting):
            preview = preview_invoice_from_dispatch(actor=self.accountant, dispatch=self.dispatch)

        bolt = next(item for item in preview["items"] if item["product_reference"] == "BOLT")
        self.assertEqual(Decimal(bolt["cgst_rate"]), Decimal("2.5"))
        self.assertEqual(Decimal(bolt["line_total"]), Decimal("210.00"))

    def test_inter_state_customer_gets_igst(self):
        customer = make_customer(self.company, name="Far Buyer", state="Karnataka")
        dispatch = make_dispatch(self.company, customer, number="DSP-002")

        preview = preview_invoice_from_dispatch(actor=self.accountant, dispatch=dispatch)

        self.assertTrue(preview["is_inter_state"])
        self.assertEqual(Decimal(preview["igst_amount"]), Decimal("216.00"))
        self.assertEqual(Decimal(preview["cgst_amount"]), Decimal("0"))

    def test_dispatch_without_customer_is_refused(self):
        dispatch = make_dispatch(self.company, None, number="DSP-003")

        with self.assertRaises(ValidationError):
            preview_invoice_from_dispatch(actor=self.accountant, dispatch=dispatch)
        with self.assertRaises(ValidationError):
            create_invoice_from_dispatch(actor=self.accountant, dispatch=dispatch)

    def test_create_bills_dispatch_and_posts_cost(self):
        invoice = create_invoice_from_dispatch(
            actor=self.accountant,
            dispatch=self.dispatch,
            notes="Delivered by road",
        )

        self.assertEqual(invoice.dispatch_id, self.dispatch.pk)
        self.assertEqual(invoice.total_amount, Decimal("1416.00"))
        self.assertEqual(invoice.items.count(), 2)
        self.assertEqual(invoice.notes, "Delivered by road")
        self.assertEqual(balance(self.company, "Buyer Pvt Ltd"), Decimal("1416.00"))

        cogs = JournalEntry.objects.get(reference=f"COGS:{invoice.pk}")
        self.assertEqual(cogs.transaction_type, JournalEntry.TYPE_COGS)
        # 10 × 60 + 4 × 50
        self.assertEqual(balance(self.company, "Cost of Goods Sold"), Decimal("800.00"))

    def test_dispatch_is_billed_once(self):
        invoice = create_invoice_from_dispatch(actor=self.accountant, dispatch=self.dispatch)

        with self.assertRaises(DispatchAlreadyInvoicedError) as ctx:
            create_invoice_from_dispatch(actor=self.accountant, dispatch=self.dispatch)
        self.assertEqual(ctx.exception.code, "DISPATCH_ALREADY_INVOICED")
        self.assertIn(invoice.document_number, ctx.exception.message)

        with self.assertRaises(DispatchAlreadyInvoicedError):
            preview_invoice_from_dispatch(actor=self.accountant, dispatch=self.dispatch)

        self.assertEqual(Invoice.objects.filter(dispatch=self.dispatch).count(), 1)

    def test_credited_invoice_frees_the_dispatch(self):
        invoice = create_invoice_from_dispatch(actor=self.accountant, dispatch=self.dispatch)
        create_credit_note(actor=self.accountant, invoice=invoice, reason="Wrong price")

        rebilled = create_invoice_from_dispatch(actor=self.accountant, dispatch=self.dispatch)

        self.assertNotEqual(rebilled.pk, invoice.pk)
        self.assertEqual(rebilled.total_amount, Decimal("1416.00"))
        self.assertEqual(balance(self.company, "Buyer Pvt Ltd"), Decimal("1416.00"))

    def test_viewer_cannot_preview_or_create(self):
        viewer = make_user(self.company, role="viewer")

        with self.assertRaises(PermissionDenied):
            preview_invoice_from_dispatch(actor=viewer, dispatch=self.dispatch)
        with self.assertRaises(PermissionDenied):
            create_invoice_from_dispatch(actor=viewer, dispatch=self.dispatch)

        self.assertFalse(Invoice.objects.exists())

    def test_lookup_is_company_scoped(self):
        other = make_company(name="Other Co")
        outsider = make_user(other, role="accountant")

        self.assertEqual(get_dispatch_for_actor(self.accountant, self.dispatch.pk), self.dispatch)
        with self.assertRaises(NotFoundError):
            get_dispatch_for_actor(outsider, self.dispatch.pk)
        with self.assertRaises(NotFoundError):
            get_dispatch_for_actor(self.accountant, "not-a-uuid")


class DispatchInvoiceApiTests(TestCase):
    """
    GUARANTEES:
    - Preview is a GET that answers with the success envelope
    - From-dispatch creates the invoice and answers 201
    - Another company's dispatch is not found
    """

    def setUp(self):
        self.client = APIClient()
        self.company = make_company()
        self.accountant = make_user(self.company, role="accountant")
        self.customer = make_customer(self.company)
        self.dispatch = make_dispatch(self.company, self.customer)
        self.preview_url = reverse("invoice-dispatch-preview")
        self.create_url = reverse("invoice-from-dispatch")

    def test_preview_endpoint(self):
        self.client.force_authenticate(self.accountant)

        response = self.client.get(self.preview_url, {"dispatch_id": str(self.dispatch.pk)})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["success"])
        self.assertEqual(response.data["preview"]["total_amount"], "1416.00")
        self.assertFalse(Invoice.objects.exists())

    def test_preview_requires_dispatch_id(self):
        self.client.force_authenticate(self.accountant)

        response = self.client.get(self.preview_url)

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_from_dispatch_endpoint(self):
        self.client.force_authenticate(self.accountant)

        response = self.client.post(
            self.create_url,
            {"dispatch_id": str(self.dispatch.pk)},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        invoice = response.data["invoice"]
        self.assertEqual(invoice["total_amount"], "1416.00")
        self.assertEqual(len(invoice["items"]), 2)

        again = self.client.post(
            self.create_url,
            {"dispatch_id": str(self.dispatch.pk)},
            format="json",
        )
        self.assertFalse(again.data["success"])
        self.assertEqual(again.data["error"]["code"], "DISPATCH_ALREADY_INVOICED")

    def test_foreign_dispatch_is_404(self):
        other = make_company(name="Other Co")
        self.client.force_authenticate(make_user(other, role="accountant"))

        response = self.client.get(self.preview_url, {"dispatch_id": str(self.dispatch.pk)})

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_viewer_is_forbidden(self):
        self.client.force_authenticate(make_user(self.company, role="viewer"))

        response = self.client.post(
            self.create_url,
            {"dispatch_id": str(self.dispatch.pk)},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(Invoice.objects.exists())
