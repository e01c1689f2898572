# invoices/services/tax_calculator.py

"""
======================================================
PATH: invoices/services/tax_calculator.py
======================================================
GST TAX CALCULATOR (PURE)

No database access. Same input -> identical output.

Per line:
    gross          = quantity × unit_rate                (0.01, HALF_UP)
    line_discount  = discount_amount, else gross × discount_percent / 100
    taxable        = gross - line_discount
    intra-state    CGST = SGST = taxable × (rate / 2) / 100
    inter-state    IGST = taxable × rate / 100
    line_total     = taxable + CGST + SGST + IGST

Each tax amount is quantized at the line. Aggregates are plain sums.

Invoice:
    total = subtotal - discount_amount + gst_amount + adjustment_amount

Regime is resolved per line, so one invoice may mix intra- and
inter-state lines.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable, Mapping

from companies.models.company import normalize_state
from accounting.services.exceptions import ValidationError

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")
# Rates are stored with three decimals (0.25% GST splits into 0.125 + 0.125)
RATE_PLACES = Decimal("0.001")


@dataclass(frozen=True)
class LineTax:
    product_reference: str
    description: str
    quantity: Decimal
    unit_rate: Decimal
    discount_percent: Decimal
    discount_amount: Decimal
    taxable_amount: Decimal
    cgst_rate: Decimal
    cgst_amount: Decimal
    sgst_rate: Decimal
    sgst_amount: Decimal
    igst_rate: Decimal
    igst_amount: Decimal
    line_total: Decimal

    @property
    def tax_amount(self) -> Decimal:
        return self.cgst_amount + self.sgst_amount + self.igst_amount

    def as_item_fields(self) -> dict:
        return {
            "product_reference": self.product_reference,
            "description": self.description,
            "quantity": self.quantity,
            "unit_rate": self.unit_rate,
            "discount_percent": self.discount_percent,
            "discount_amount": self.discount_amount,
            "taxable_amount": self.taxable_amount,
            "cgst_rate": self.cgst_rate,
            "cgst_amount": self.cgst_amount,
            "sgst_rate": self.sgst_rate,
            "sgst_amount": self.sgst_amount,
            "igst_rate": self.igst_rate,
            "igst_amount": self.igst_amount,
            "line_total": self.line_total,
        }


@dataclass(frozen=True)
class InvoiceTotals:
    lines: tuple[LineTax, ...]
    subtotal: Decimal
    cgst_amount: Decimal
    sgst_amount: Decimal
    igst_amount: Decimal
    gst_amount: Decimal
    discount_amount: Decimal
    adjustment_amount: Decimal
    total_amount: Decimal


# ------------------------------------------------------------
# HELPERS
# ------------------------------------------------------------


def _money(value: Decimal) -> Decimal:
    return value.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _decimal(value, field: str, *, default: Decimal | None = None) -> Decimal:
    if value is None or value == "":
        if default is None:
            raise ValidationError(f"{field} is required")
        return default
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise ValidationError(f"Invalid {field}: {value!r}") from exc
    if not amount.is_finite():
        raise ValidationError(f"Invalid {field}: {value!r}")
    return amount


def _non_negative(value, field: str) -> Decimal:
    amount = _decimal(value, field, default=ZERO)
    if amount < 0:
        raise ValidationError(f"{field} cannot be negative")
    return amount


def is_inter_state(company_state: str | None, customer_state: str | None) -> bool:
    """
    Place of supply differs from the seller's state.
    A blank customer state is treated as a local (intra-state) sale.
    """
    if not (customer_state or "").strip():
        return False
    return normalize_state(company_state) != normalize_state(customer_state)


def _resolve_rates(line: Mapping, *, inter_state_default: bool) -> tuple[Decimal, Decimal, Decimal]:
    """Returns (cgst_rate, sgst_rate, igst_rate) for one line."""
    cgst_rate = _non_negative(line.get("cgst_rate"), "cgst_rate")
    sgst_rate = _non_negative(line.get("sgst_rate"), "sgst_rate")
    igst_rate = _non_negative(line.get("igst_rate"), "igst_rate")

    explicit_split = cgst_rate > 0 or sgst_rate > 0
    explicit_integrated = igst_rate > 0

    if explicit_split and explicit_integrated:
        raise ValidationError("A line cannot carry both CGST/SGST and IGST")

    if explicit_split:
        if cgst_rate == 0:
            cgst_rate = sgst_rate
        if sgst_rate == 0:
            sgst_rate = cgst_rate
        return cgst_rate, sgst_rate, ZERO

    if explicit_integrated:
        return ZERO, ZERO, igst_rate

    gst_rate = _non_negative(line.get("gst_rate"), "gst_rate")
    inter_state = line.get("is_inter_state")
    if inter_state is None:
        inter_state = inter_state_default

    if inter_state:
        return ZERO, ZERO, gst_rate

    half = gst_rate / 2
    return half, half, ZERO


# ------------------------------------------------------------
# PUBLIC API
# ------------------------------------------------------------


def calculate_line(line: Mapping, *, inter_state_default: bool = False) -> LineTax:
    quantity = _decimal(line.get("quantity"), "quantity")
    if quantity <= 0:
        raise ValidationError("quantity must be greater than zero")

    unit_rate = _decimal(line.get("unit_rate"), "unit_rate")
    if unit_rate < 0:
        raise ValidationError("unit_rate cannot be negative")

    discount_percent = _non_negative(line.get("discount_percent"), "discount_percent")
    if discount_percent > HUNDRED:
        raise ValidationError("discount_percent cannot exceed 100")

    gross = _money(quantity * unit_rate)

    discount_amount = _non_negative(line.get("discount_amount"), "discount_amount")
    if discount_amount > 0:
        discount_amount = _money(discount_amount)
    elif discount_percent > 0:
        discount_amount = _money(gross * discount_percent / HUNDRED)

    if discount_amount > gross:
        raise ValidationError("Line discount cannot exceed the line amount")

    taxable = gross - discount_amount

    cgst_rate, sgst_rate, igst_rate = _resolve_rates(line, inter_state_default=inter_state_default)
    for rate in (cgst_rate, sgst_rate, igst_rate):
        if rate > HUNDRED:
            raise ValidationError(f"GST rate {rate} cannot exceed 100")
        if rate != rate.quantize(RATE_PLACES):
            raise ValidationError(f"GST rate {rate} has more than three decimal places")

    cgst_amount = _money(taxable * cgst_rate / HUNDRED)
    sgst_amount = _money(taxable * sgst_rate / HUNDRED)
    igst_amount = _money(taxable * igst_rate / HUNDRED)

    return LineTax(
        product_reference=str(line.get("product_reference") or "").strip(),
        description=str(line.get("description") or "").strip(),
        quantity=quantity,
        unit_rate=_money(unit_rate),
        discount_percent=discount_percent,
        discount_amount=discount_amount,
        taxable_amount=taxable,
        cgst_rate=cgst_rate,
        cgst_amount=cgst_amount,
        sgst_rate=sgst_rate,
        sgst_amount=sgst_amount,
        igst_rate=igst_rate,
        igst_amount=igst_amount,
        line_total=taxable + cgst_amount + sgst_amount + igst_amount,
    )


def calculate_invoice_totals(
    items: Iterable[Mapping],
    *,
    discount_amount=ZERO,
    adjustment_amount=ZERO,
    inter_state: bool = False,
) -> InvoiceTotals:
    items = list(items or [])
    if not items:
        raise ValidationError("An invoice needs at least one line item")

    lines = tuple(calculate_line(item, inter_state_default=inter_state) for item in items)

    subtotal = sum((line.taxable_amount for line in lines), ZERO)
    cgst = sum((line.cgst_amount for line in lines), ZERO)
    sgst = sum((line.sgst_amount for line in lines), ZERO)
    igst = sum((line.igst_amount for line in lines), ZERO)
    gst = cgst + sgst + igst

    discount = _money(_non_negative(discount_amount, "discount_amount"))
    if discount > subtotal:
        raise ValidationError("Invoice discount cannot exceed the subtotal")

    # Round-off may be negative
    adjustment = _money(_decimal(adjustment_amount, "adjustment_amount", default=ZERO))

    return InvoiceTotals(
        lines=lines,
        subtotal=subtotal,
        cgst_amount=cgst,
        sgst_amount=sgst,
        igst_amount=igst,
        gst_amount=gst,
        discount_amount=discount,
        adjustment_amount=adjustment,
        total_amount=subtotal - discount + gst + adjustment,
    )
