# accounting/services/balance_service.py

"""
BALANCE & REPORTING SERVICE (AUTHORITATIVE READS)

Read-only ledger aggregation helpers.

RULES:
- READ-ONLY: no writes, ever
- JournalEntryLine is the source of truth; LedgerAccount.current_balance is
  the running cache the engine maintains
- Company-scoped: never mix companies
- Balance sign follows the account type:
  - asset / expense      -> debits - credits
  - liability / income / equity -> credits - debits
"""

from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from django.db.models import Sum
from django.db.models.functions import Coalesce

from accounting.models.journal import JournalEntryLine
from accounting.models.ledger_account import LedgerAccount
from accounting.services.exceptions import ValidationError

TWOPLACES = Decimal("0.01")


def _q2(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _lines_for(*, as_of: date | None = None):
    qs = JournalEntryLine.objects.all()
    if as_of is not None:
        qs = qs.filter(journal_entry__entry_date__lte=as_of)
    return qs


def get_account_balance(account: LedgerAccount, *, as_of: date | None = None) -> Decimal:
    """
    Balance recomputed from journal lines (opening balance excluded).
    """
    if account is None:
        raise ValidationError("Ledger account is required")

    aggregates = _lines_for(as_of=as_of).filter(ledger_account=account).aggregate(
        debit_total=Coalesce(Sum("debit_amount"), Decimal("0.00")),
        credit_total=Coalesce(Sum("credit_amount"), Decimal("0.00")),
    )

    return _q2(
        account.signed_delta(
            debit=_q2(aggregates["debit_total"]),
            credit=_q2(aggregates["credit_total"]),
        )
    )


def get_trial_balance(company, *, as_of: date | None = None) -> list[dict]:
    """
    Bulk trial balance for a company (no N+1).
    """
    if company is None:
        raise ValidationError("Company is required")

    accounts = list(
        LedgerAccount.objects.filter(company=company, is_active=True).order_by("name")
    )
    if not accounts:
        return []

    rows = (
        _lines_for(as_of=as_of)
        .filter(ledger_account__company=company)
        .values("ledger_account_id")
        .annotate(
            debit_total=Coalesce(Sum("debit_amount"), Decimal("0.00")),
            credit_total=Coalesce(Sum("credit_amount"), Decimal("0.00")),
        )
    )
    totals = {r["ledger_account_id"]: r for r in rows}

    results = []
    for acc in accounts:
        row = totals.get(acc.id, {})
        debit = _q2(row.get("debit_total"))
        credit = _q2(row.get("credit_total"))
        results.append(
            {
                "account_id": acc.id,
                "name": acc.name,
                "account_type": acc.account_type,
                "debit_total": debit,
                "credit_total": credit,
                "balance": _q2(acc.signed_delta(debit=debit, credit=credit)),
            }
        )
    return results


def trial_balance_is_balanced(company, *, as_of: date | None = None) -> bool:
    tb = get_trial_balance(company, as_of=as_of)
    debits = sum((r["debit_total"] for r in tb), Decimal("0.00"))
    credits = sum((r["credit_total"] for r in tb), Decimal("0.00"))
    return debits == credits
