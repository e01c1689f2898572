# inventory/services/dispatch_cost.py

"""
DISPATCH COSTING

Cost of goods for a dispatch = Σ quantity × unit_cost, rounded once per line
to currency precision. Pure read; never mutates stock.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from inventory.models import GoodsDispatch

TWOPLACES = Decimal("0.01")


def dispatch_cost_amount(dispatch: GoodsDispatch) -> Decimal:
    total = Decimal("0.00")
    for item in dispatch.items.all():
        line = (Decimal(item.quantity) * Decimal(item.unit_cost)).quantize(
            TWOPLACES, rounding=ROUND_HALF_UP
        )
        total += line
    return total


def dispatch_summary(dispatch: GoodsDispatch | None) -> dict | None:
    if dispatch is None:
        return None
    return {
        "id": str(dispatch.id),
        "dispatch_number": dispatch.dispatch_number,
        "dispatch_date": dispatch.dispatch_date.isoformat(),
        "items_count": dispatch.items.count(),
    }
