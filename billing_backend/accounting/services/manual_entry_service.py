# accounting/services/manual_entry_service.py

"""
MANUAL JOURNAL ENTRIES

Bypasses invoice logic and posts straight through the engine.

Rules:
- caller needs journal.post on the company
- at least two lines, balanced (engine enforces)
- every ledger id must resolve inside the company (NotFound otherwise)
- Section 269ST: total debit to any cash ledger above
  ACCOUNTING["CASH_TRANSACTION_LIMIT"] is refused
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal, InvalidOperation

from django.conf import settings

from accounting.models.journal import JournalEntry
from accounting.services.account_resolver import get_ledger_for_company
from accounting.services.exceptions import BusinessRuleError, ValidationError
from accounting.services.journal_entry_service import create_journal_entry
from permissions.roles import CAP_JOURNAL_POST, require

logger = logging.getLogger(__name__)


def cash_transaction_limit() -> Decimal:
    return Decimal(str(settings.ACCOUNTING["CASH_TRANSACTION_LIMIT"]))


def assert_within_cash_limit(postings: list[dict]) -> None:
    limit = cash_transaction_limit()
    cash_debits: dict = {}
    for p in postings:
        account = p["account"]
        if not getattr(account, "is_cash_ledger", False):
            continue
        try:
            debit = Decimal(str(p.get("debit") or "0"))
        except InvalidOperation as exc:
            raise ValidationError(f"Invalid debit amount {p.get('debit')!r}") from exc
        cash_debits[account.pk] = cash_debits.get(account.pk, Decimal("0")) + debit

    for total in cash_debits.values():
        if total > limit:
            raise BusinessRuleError(
                f"Section 269ST: cash receipts above {limit} are not allowed",
                code="CASH_LIMIT_EXCEEDED",
            )


def post_manual_entry(
    *,
    actor,
    company,
    narration: str,
    lines: list[dict],
    entry_date: date | None = None,
) -> JournalEntry:
    """
    lines: [{"ledger_account_id", "debit_amount", "credit_amount", "bill_reference"?}, ...]
    """
    require(actor, CAP_JOURNAL_POST, company)

    if not lines or len(lines) < 2:
        raise ValidationError("Journal entry must have at least 2 lines")

    postings = [
        {
            "account": get_ledger_for_company(company, line.get("ledger_account_id")),
            "debit": line.get("debit_amount"),
            "credit": line.get("credit_amount"),
            "bill_reference": line.get("bill_reference") or "",
        }
        for line in lines
    ]

    assert_within_cash_limit(postings)

    entry = create_journal_entry(
        company=company,
        narration=narration,
        postings=postings,
        transaction_type=JournalEntry.TYPE_MANUAL,
        entry_date=entry_date,
        created_by=actor,
    )
    logger.info("Manual journal entry %s posted by %s", entry.entry_number, actor.pk)
    return entry
