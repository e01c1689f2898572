# inventory/tests/test_dispatch_cost.py

from decimal import Decimal

from django.test import TestCase
from django.utils import timezone

from companies.models import Company
from inventory.models import GoodsDispatch, GoodsDispatchItem
from inventory.services.dispatch_cost import dispatch_cost_amount, dispatch_summary


class DispatchCostTests(TestCase):
    def setUp(self):
        company = Company.objects.create(name="Acme Traders", state="Maharashtra")
        self.dispatch = GoodsDispatch.objects.create(
            company=company,
            dispatch_number="DSP-001",
            dispatch_date=timezone.localdate(),
        )

    def test_cost_is_sum_of_rounded_lines(self):
        GoodsDispatchItem.objects.create(
            dispatch=self.dispatch, product_reference="A", quantity=Decimal("1.5"), unit_cost=Decimal("3.33")
        )
        GoodsDispatchItem.objects.create(
            dispatch=self.dispatch, product_reference="B", quantity=Decimal("2"), unit_cost=Decimal("10.00")
        )

        # 4.995 -> 5.00
        self.assertEqual(dispatch_cost_amount(self.dispatch), Decimal("25.00"))

    def test_empty_dispatch_costs_nothing(self):
        self.assertEqual(dispatch_cost_amount(self.dispatch), Decimal("0.00"))

    def test_summary(self):
        summary = dispatch_summary(self.dispatch)

        self.assertEqual(summary["dispatch_number"], "DSP-001")
        self.assertEqual(summary["items_count"], 0)
        self.assertIsNone(dispatch_summary(None))
