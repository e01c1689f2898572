# accounting/services/posting.py

"""
======================================================
PATH: accounting/services/posting.py
======================================================
POSTING ADAPTER

Build postings for business events and call create_journal_entry (the engine).

This module should remain a thin adapter:
- It DOES NOT run workflows (invoice / credit note services do).
- It DOES map business events -> balanced postings.
- It ALWAYS calls the engine for immutability, idempotency and balances.

INVOICE SHAPE:
    Dr  Customer (Sundry Debtors)   total_amount
    Cr  Sales                       subtotal - discount_amount
    Cr  CGST / SGST / IGST Output   per-head tax
    Cr  Round Off                   adjustment_amount
Negative amounts move to the opposite side, so a credit note (all amounts
negated) runs through the same builder and mirrors the original entry.
A document whose amounts are all zero posts nothing.

EDIT SHAPE:
    One entry carrying (new amounts - old amounts) through the invoice shape.

COGS SHAPE:
    Dr  Cost of Goods Sold / Cr Inventory   Σ dispatched qty × unit cost

PAYMENT SHAPE:
    Dr  Cash or Bank / Cr Customer          amount
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from accounting.models.journal import JournalEntry
from accounting.services import account_resolver
from accounting.services.journal_entry_service import create_journal_entry
from accounting.services.posting_rules_cogs import build_cogs_posting

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")

AMOUNT_KEYS = ("total", "sales", "cgst", "sgst", "igst", "adjustment")


def _money(v) -> Decimal:
    if v is None or v == "":
        return ZERO
    return Decimal(str(v)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _debit_normal(account, amount: Decimal, *, bill_reference: str = "") -> dict | None:
    amount = _money(amount)
    if amount == ZERO:
        return None
    if amount > ZERO:
        return {"account": account, "debit": amount, "credit": ZERO, "bill_reference": bill_reference}
    return {"account": account, "debit": ZERO, "credit": -amount, "bill_reference": bill_reference}


def _credit_normal(account, amount: Decimal) -> dict | None:
    amount = _money(amount)
    if amount == ZERO:
        return None
    if amount > ZERO:
        return {"account": account, "debit": ZERO, "credit": amount}
    return {"account": account, "debit": -amount, "credit": ZERO}


# ------------------------------------------------------------
# INVOICE AMOUNTS
# ------------------------------------------------------------


def invoice_amounts(invoice, items=None) -> dict[str, Decimal]:
    """
    Ledger-relevant amounts of an invoice (or credit note), summed from the
    stored line values. Never re-rounded.
    """
    items = list(items if items is not None else invoice.items.all())
    return {
        "total": _money(invoice.total_amount),
        "sales": _money(invoice.subtotal) - _money(invoice.discount_amount),
        "cgst": sum((_money(i.cgst_amount) for i in items), ZERO),
        "sgst": sum((_money(i.sgst_amount) for i in items), ZERO),
        "igst": sum((_money(i.igst_amount) for i in items), ZERO),
        "adjustment": _money(invoice.adjustment_amount),
    }


def amounts_delta(new: dict, old: dict) -> dict[str, Decimal]:
    return {k: _money(new.get(k)) - _money(old.get(k)) for k in AMOUNT_KEYS}


def is_zero(amounts: dict) -> bool:
    return all(_money(amounts.get(k)) == ZERO for k in AMOUNT_KEYS)


def build_invoice_postings(*, company, customer, amounts: dict, bill_reference: str) -> list[dict]:
    customer_ledger = account_resolver.get_or_create_customer_ledger(customer)

    candidates = [
        _debit_normal(customer_ledger, amounts["total"], bill_reference=bill_reference),
        _credit_normal(account_resolver.get_system_ledger(company, account_resolver.SALES), amounts["sales"]),
    ]

    for key, semantic in (
        ("cgst", account_resolver.CGST_OUTPUT),
        ("sgst", account_resolver.SGST_OUTPUT),
        ("igst", account_resolver.IGST_OUTPUT),
    ):
        if _money(amounts[key]) != ZERO:
            candidates.append(
                _credit_normal(account_resolver.get_system_ledger(company, semantic), amounts[key])
            )

    if _money(amounts["adjustment"]) != ZERO:
        candidates.append(
            _credit_normal(
                account_resolver.get_system_ledger(company, account_resolver.ROUND_OFF),
                amounts["adjustment"],
            )
        )

    return [p for p in candidates if p is not None]


# ------------------------------------------------------------
# POSTERS
# ------------------------------------------------------------


def post_invoice_to_ledger(*, invoice, created_by=None) -> JournalEntry | None:
    """
    Invoice and credit note posting. Reference INVOICE:<id> makes it
    idempotent per document.

    A zero-value document (free samples, fully discounted lines) moves no
    ledger and returns None.
    """
    amounts = invoice_amounts(invoice)
    if is_zero(amounts):
        return None

    if invoice.is_credit_note:
        transaction_type = JournalEntry.TYPE_CREDIT_NOTE
        narration = f"Credit Note {invoice.document_number}"
    else:
        transaction_type = JournalEntry.TYPE_INVOICE
        narration = f"Invoice {invoice.document_number}"

    postings = build_invoice_postings(
        company=invoice.company,
        customer=invoice.customer,
        amounts=amounts,
        bill_reference=invoice.document_number,
    )

    return create_journal_entry(
        company=invoice.company,
        narration=narration,
        postings=postings,
        transaction_type=transaction_type,
        transaction_id=str(invoice.pk),
        reference=f"INVOICE:{invoice.pk}",
        entry_date=invoice.invoice_date,
        created_by=created_by,
    )


def post_invoice_edit_to_ledger(*, invoice, old_amounts: dict, created_by=None) -> JournalEntry | None:
    """
    Net adjustment for an edit. Returns None when the edit does not move
    any ledger (e.g. only notes changed).
    """
    delta = amounts_delta(invoice_amounts(invoice), old_amounts)
    if is_zero(delta):
        return None

    postings = build_invoice_postings(
        company=invoice.company,
        customer=invoice.customer,
        amounts=delta,
        bill_reference=invoice.document_number,
    )

    return create_journal_entry(
        company=invoice.company,
        narration=f"Edit of Invoice {invoice.document_number} (revision {invoice.revision})",
        postings=postings,
        transaction_type=JournalEntry.TYPE_INVOICE_EDIT,
        transaction_id=str(invoice.pk),
        reference=f"INVOICE_EDIT:{invoice.pk}:{invoice.revision}",
        created_by=created_by,
    )


def post_cogs_to_ledger(*, invoice, amount: Decimal, created_by=None) -> JournalEntry | None:
    amount = _money(amount)
    if amount == ZERO:
        return None

    return create_journal_entry(
        company=invoice.company,
        narration=f"COGS for Invoice {invoice.document_number}",
        postings=build_cogs_posting(company=invoice.company, amount=amount),
        transaction_type=JournalEntry.TYPE_COGS,
        transaction_id=str(invoice.pk),
        reference=f"COGS:{invoice.pk}",
        entry_date=invoice.invoice_date,
        created_by=created_by,
    )


def post_payment_to_ledger(*, payment, created_by=None) -> JournalEntry:
    invoice = payment.invoice
    key = account_resolver.CASH if payment.payment_mode == "cash" else account_resolver.BANK
    receiving_ledger = account_resolver.get_system_ledger(invoice.company, key)
    customer_ledger = account_resolver.get_or_create_customer_ledger(invoice.customer)
    amount = _money(payment.amount)

    postings = [
        {"account": receiving_ledger, "debit": amount, "credit": ZERO},
        {
            "account": customer_ledger,
            "debit": ZERO,
            "credit": amount,
            "bill_reference": invoice.document_number,
        },
    ]

    return create_journal_entry(
        company=invoice.company,
        narration=f"Payment {payment.payment_number} against {invoice.document_number}",
        postings=postings,
        transaction_type=JournalEntry.TYPE_PAYMENT,
        transaction_id=str(payment.pk),
        reference=f"PAYMENT:{payment.pk}",
        entry_date=payment.payment_date,
        created_by=created_by,
    )
