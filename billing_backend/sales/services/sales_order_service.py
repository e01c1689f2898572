# sales/services/sales_order_service.py

"""
SALES ORDER SERVICE

create_sales_order:
- capability check (sales_order.create) on the company
- customer must belong to the company
- at least one line; total = Σ required_quantity × unit_rate - discount
- number SO-YYYY-MM-NNNNN through the shared sequence generator
  (order + items are one savepoint; numbering retries on collision)
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.utils import timezone

from accounting.services.exceptions import NotFoundError, ValidationError
from accounting.services.sequence_generator import KIND_SALES_ORDER, create_with_document_number
from permissions.roles import CAP_SALES_ORDER_CREATE, require
from sales.models import SalesOrder, SalesOrderItem

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")


def _amount(value, field: str) -> Decimal:
    if value is None or value == "":
        return Decimal("0.00")
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise ValidationError(f"Invalid {field}: {value!r}") from exc
    if not amount.is_finite() or amount < 0:
        raise ValidationError(f"{field} cannot be negative")
    return amount


def create_sales_order(
    *,
    actor,
    company,
    customer,
    items: list[dict],
    order_date=None,
    expected_delivery_date=None,
    advance_amount=Decimal("0.00"),
    discount_amount=Decimal("0.00"),
    notes: str = "",
) -> SalesOrder:
    require(actor, CAP_SALES_ORDER_CREATE, company)

    if customer is None or customer.company_id != company.pk:
        raise NotFoundError("Customer not found")

    if not items:
        raise ValidationError("At least one line item is required")

    lines = []
    gross = Decimal("0.00")
    for item in items:
        product_reference = str(item.get("product_reference") or "").strip()
        if not product_reference:
            raise ValidationError("product_reference is required on every line")

        quantity = _amount(item.get("required_quantity"), "required_quantity")
        if quantity <= 0:
            raise ValidationError("required_quantity must be greater than zero")

        unit_rate = _amount(item.get("unit_rate"), "unit_rate")
        gross += (quantity * unit_rate).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
        lines.append(
            {
                "product_reference": product_reference,
                "required_quantity": quantity,
                "unit_rate": unit_rate,
                "notes": str(item.get("notes") or ""),
            }
        )

    discount = _amount(discount_amount, "discount_amount")
    if discount > gross:
        raise ValidationError("Discount cannot exceed the order amount")

    order_date = order_date or timezone.localdate()

    def _insert(number: str) -> SalesOrder:
        order = SalesOrder.objects.create(
            company=company,
            customer=customer,
            order_number=number,
            order_date=order_date,
            expected_delivery_date=expected_delivery_date,
            advance_amount=_amount(advance_amount, "advance_amount"),
            discount_amount=discount,
            total_amount=gross - discount,
            status=SalesOrder.STATUS_PENDING,
            notes=notes or "",
            created_by=actor,
        )
        SalesOrderItem.objects.bulk_create([SalesOrderItem(order=order, **line) for line in lines])
        return order

    order = create_with_document_number(
        company_id=company.pk,
        kind=KIND_SALES_ORDER,
        create=_insert,
    )
    logger.info("Sales order %s created total=%s", order.order_number, order.total_amount)
    return order
