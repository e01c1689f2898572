# sales/tests/test_sales_orders.py

from decimal import Decimal

from django.core.exceptions import PermissionDenied
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from accounting.services.exceptions import NotFoundError, ValidationError
from accounting.tests.helpers import make_company, make_customer, make_user
from sales.models import SalesOrder
from sales.services.sales_order_service import create_sales_order

LINES = [
    {"product_reference": "WIDGET", "required_quantity": Decimal("10"), "unit_rate": Decimal("100.00")},
    {"product_reference": "GADGET", "required_quantity": Decimal("2.5"), "unit_rate": Decimal("40.00")},
]


class SalesOrderServiceTests(TestCase):
    def setUp(self):
        self.company = make_company()
        self.sales = make_user(self.company, role="sales")
        self.customer = make_customer(self.company)

    def _create(self, **kwargs):
        return create_sales_order(
            actor=kwargs.pop("actor", self.sales),
            company=self.company,
            customer=kwargs.pop("customer", self.customer),
            items=kwargs.pop("items", LINES),
            **kwargs,
        )

    def test_orders_are_numbered_monthly(self):
        first = self._create()
        second = self._create()

        today = timezone.localdate()
        prefix = f"SO-{today.year}-{today.month:02d}-"
        self.assertEqual(first.order_number, f"{prefix}00001")
        self.assertEqual(second.order_number, f"{prefix}00002")

    def test_total_is_lines_minus_discount(self):
        order = self._create(discount_amount=Decimal("50.00"), advance_amount=Decimal("200.00"))

        self.assertEqual(order.total_amount, Decimal("1050.00"))
        self.assertEqual(order.advance_amount, Decimal("200.00"))
        self.assertEqual(order.status, SalesOrder.STATUS_PENDING)
        self.assertEqual(order.items.count(), 2)

    def test_invalid_orders_are_rejected(self):
        with self.assertRaises(ValidationError):
            self._create(items=[])
        with self.assertRaises(ValidationError):
            self._create(items=[{"product_reference": "X", "required_quantity": "0", "unit_rate": "1"}])
        with self.assertRaises(ValidationError):
            self._create(discount_amount=Decimal("5000.00"))
        self.assertFalse(SalesOrder.objects.exists())

    def test_customer_of_other_company_is_not_found(self):
        stranger = make_customer(make_company(name="Other Co"))

        with self.assertRaises(NotFoundError):
            self._create(customer=stranger)

    def test_accountant_cannot_create_orders(self):
        with self.assertRaises(PermissionDenied):
            self._create(actor=make_user(self.company, role="accountant"))


class SalesOrderApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.company = make_company()
        self.sales = make_user(self.company, role="sales")
        self.customer = make_customer(self.company)
        self.url = reverse("sales-order-list")

    def _payload(self):
        return {
            "customer_id": str(self.customer.pk),
            "discount_amount": "0.00",
            "line_items": [
                {"product_reference": "WIDGET", "required_quantity": "3", "unit_rate": "10.00"},
            ],
        }

    def test_create_and_list(self):
        self.client.force_authenticate(self.sales)

        response = self.client.post(self.url, self._payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data["success"])
        self.assertEqual(response.data["sales_order"]["total_amount"], "30.00")

        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 1)

    def test_unknown_customer_is_404(self):
        self.client.force_authenticate(self.sales)
        payload = self._payload()
        payload["customer_id"] = str(make_customer(make_company(name="Other Co")).pk)

        response = self.client.post(self.url, payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["error"]["code"], "NOT_FOUND")

    def test_viewer_cannot_create(self):
        self.client.force_authenticate(make_user(self.company, role="viewer"))

        response = self.client.post(self.url, self._payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
