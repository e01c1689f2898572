# accounting/services/journal_entry_service.py

"""
======================================================
PATH: accounting/services/journal_entry_service.py
======================================================
JOURNAL ENTRY SERVICE (ACCOUNTING ENGINE)

This module is the ONLY place allowed to:
- Create JournalEntry / JournalEntryLine
- Enforce debit == credit
- Move LedgerAccount.current_balance
- Guarantee atomicity (entry + lines + balances, all or nothing)
- Enforce idempotency via reference (prevents double-posting)

Everything else (invoices, credit notes, COGS, payments, manual entries)
must pass through here.

Posting shape:
    {"account": <LedgerAccount>, "debit": Decimal, "credit": Decimal,
     "bill_reference": str (optional)}

Balance rule (by account type):
- asset / expense: debit increases, credit decreases
- liability / income / equity: credit increases, debit decreases
Balances move with UPDATE ... SET current_balance = current_balance + delta,
so concurrent postings never lose an update.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from accounting.models.journal import JournalEntry, JournalEntryLine
from accounting.models.ledger_account import LedgerAccount
from accounting.services.exceptions import (
    IdempotencyError,
    JournalEntryCreationError,
    PersistenceError,
)
from accounting.services.sequence_generator import (
    KIND_JOURNAL_ENTRY,
    create_with_document_number,
)

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
MIN_LINE_AMOUNT = Decimal("0.01")


def _money(value) -> Decimal:
    if value is None or value == "":
        return Decimal("0.00")

    if isinstance(value, Decimal):
        amt = value
    else:
        try:
            amt = Decimal(str(value))
        except (InvalidOperation, ValueError, TypeError) as exc:
            raise JournalEntryCreationError(f"Invalid money value: {value!r}") from exc

    if not amt.is_finite():
        raise JournalEntryCreationError(f"Invalid money value: {value!r}")

    return amt.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _normalize_reference(reference: str | None) -> str | None:
    if reference is None:
        return None
    ref = str(reference).strip()
    if not ref:
        return None
    if ref.startswith(":") or ref.endswith(":"):
        raise JournalEntryCreationError(f"Invalid journal reference {ref!r}")
    return ref


def normalize_postings(*, company, postings: list) -> list[dict]:
    """
    Validate and normalize postings without writing anything.

    Any malformed line aborts the whole entry:
    - missing / inactive / other-company ledger
    - negative amount, both sides set, or neither side set
    - debits != credits
    """
    if not postings or len(postings) < 2:
        raise JournalEntryCreationError("Journal entry must contain at least two postings")

    total_debits = Decimal("0.00")
    total_credits = Decimal("0.00")
    normalized: list[dict] = []

    for line in postings:
        if not isinstance(line, dict):
            raise JournalEntryCreationError("Each posting must be an object/dict")

        account = line.get("account")
        if account is None:
            raise JournalEntryCreationError("Posting missing ledger account")

        if not getattr(account, "is_active", True):
            raise JournalEntryCreationError(f"Ledger account {account.name} is inactive")

        if account.company_id != company.pk:
            raise JournalEntryCreationError(
                f"Ledger account {account.name} belongs to another company"
            )

        debit = _money(line.get("debit"))
        credit = _money(line.get("credit"))

        if debit < 0 or credit < 0:
            raise JournalEntryCreationError("Debit or credit cannot be negative")

        if debit > 0 and credit > 0:
            raise JournalEntryCreationError("A posting cannot have both debit and credit")

        if debit == 0 and credit == 0:
            raise JournalEntryCreationError("A posting must have either debit or credit")

        if 0 < debit < MIN_LINE_AMOUNT or 0 < credit < MIN_LINE_AMOUNT:
            raise JournalEntryCreationError("Posting amount below minimum currency unit")

        total_debits += debit
        total_credits += credit

        normalized.append(
            {
                "account": account,
                "debit": debit,
                "credit": credit,
                "bill_reference": (line.get("bill_reference") or "").strip(),
            }
        )

    if total_debits != total_credits:
        raise JournalEntryCreationError(
            f"Journal entry not balanced: debits={total_debits} credits={total_credits}"
        )

    return normalized


def _apply_balance_deltas(normalized: list[dict]) -> None:
    deltas: dict = {}
    accounts: dict = {}
    for line in normalized:
        account = line["account"]
        accounts[account.pk] = account
        deltas[account.pk] = deltas.get(account.pk, Decimal("0.00")) + account.signed_delta(
            debit=line["debit"], credit=line["credit"]
        )

    # Stable order keeps concurrent posters from deadlocking on row locks
    for pk in sorted(deltas, key=str):
        delta = deltas[pk]
        if delta == 0:
            continue
        LedgerAccount.objects.filter(pk=pk).update(
            current_balance=F("current_balance") + delta
        )


@transaction.atomic
def create_journal_entry(
    *,
    company,
    narration: str,
    postings: list,
    transaction_type: str,
    transaction_id: str = "",
    reference: str | None = None,
    entry_date: date | None = None,
    created_by=None,
) -> JournalEntry:
    narration = (narration or "").strip()
    if not narration:
        raise JournalEntryCreationError("Journal entry narration is required")

    valid_types = {t for t, _ in JournalEntry.TRANSACTION_TYPES}
    if transaction_type not in valid_types:
        raise JournalEntryCreationError(f"Unknown transaction type {transaction_type!r}")

    reference = _normalize_reference(reference)
    normalized = normalize_postings(company=company, postings=postings)
    entry_date = entry_date or timezone.localdate()

    # Clear error before DB constraint race handling
    if reference and JournalEntry.objects.filter(reference=reference).exists():
        raise IdempotencyError(f"Journal entry already exists for reference {reference}")

    def _insert(entry_number: str) -> JournalEntry:
        return JournalEntry.objects.create(
            company=company,
            entry_number=entry_number,
            entry_date=entry_date,
            narration=narration,
            transaction_type=transaction_type,
            transaction_id=str(transaction_id or ""),
            reference=reference,
            created_by=created_by,
        )

    try:
        journal_entry = create_with_document_number(
            company_id=company.pk,
            kind=KIND_JOURNAL_ENTRY,
            create=_insert,
        )
    except PersistenceError as exc:
        if reference and JournalEntry.objects.filter(reference=reference).exists():
            raise IdempotencyError(
                f"Journal entry already exists for reference {reference}"
            ) from exc
        raise

    try:
        JournalEntryLine.objects.bulk_create(
            [
                JournalEntryLine(
                    journal_entry=journal_entry,
                    ledger_account=line["account"],
                    debit_amount=line["debit"],
                    credit_amount=line["credit"],
                    bill_reference=line["bill_reference"],
                )
                for line in normalized
            ]
        )
        _apply_balance_deltas(normalized)
    except IntegrityError as exc:
        raise PersistenceError(f"Failed to write journal lines: {exc}") from exc

    logger.info(
        "Posted journal entry %s type=%s transaction=%s lines=%s",
        journal_entry.entry_number,
        transaction_type,
        transaction_id,
        len(normalized),
    )
    return journal_entry


# Contract name used by callers outside accounting
post_journal_entry = create_journal_entry


def void_reference(entry: JournalEntry) -> str:
    return f"VOID:{entry.pk}"


@transaction.atomic
def void_journal_entry(entry: JournalEntry, *, created_by=None, reason: str = "") -> JournalEntry:
    """
    Neutralize a posted entry by posting its mirror image.

    Idempotent: a second call returns the existing void entry instead of
    posting again. Journal rows are never deleted.
    """
    existing = JournalEntry.objects.filter(reference=void_reference(entry)).first()
    if existing is not None:
        return existing

    postings = [
        {
            "account": line.ledger_account,
            "debit": line.credit_amount,
            "credit": line.debit_amount,
            "bill_reference": line.bill_reference,
        }
        for line in entry.lines.select_related("ledger_account")
    ]

    narration = f"Void of {entry.entry_number}"
    if reason:
        narration = f"{narration}: {reason}"

    return create_journal_entry(
        company=entry.company,
        narration=narration,
        postings=postings,
        transaction_type=JournalEntry.TYPE_VOID,
        transaction_id=entry.transaction_id,
        reference=void_reference(entry),
        created_by=created_by,
    )


def entry_totals(entry: JournalEntry) -> tuple[Decimal, Decimal]:
    debits = Decimal("0.00")
    credits = Decimal("0.00")
    for line in entry.lines.all():
        debits += line.debit_amount
        credits += line.credit_amount
    return debits, credits
