# accounting/services/posting_rules_cogs.py

"""
POSTING RULES: COST OF GOODS SOLD (COGS)

Authoritative accounting rule for recognizing Cost of Goods Sold when
dispatched inventory is invoiced.

Responsibilities:
- Define WHICH ledgers are debited and credited
- Remain calculation-agnostic (amount is passed in)

This module:
- DOES NOT save journal entries
- DOES NOT touch inventory quantities
- DOES NOT calculate costs
"""

from decimal import Decimal

from accounting.models.ledger_account import LedgerAccount
from accounting.services.account_resolver import COGS, INVENTORY, get_system_ledger
from accounting.services.exceptions import AccountResolutionError, COGSPostingError


def get_cogs_expense_ledger(company) -> LedgerAccount:
    try:
        return get_system_ledger(company, COGS)
    except AccountResolutionError as exc:
        raise COGSPostingError(str(exc)) from exc


def get_inventory_asset_ledger(company) -> LedgerAccount:
    try:
        return get_system_ledger(company, INVENTORY)
    except AccountResolutionError as exc:
        raise COGSPostingError(str(exc)) from exc


def build_cogs_posting(*, company, amount: Decimal) -> list[dict]:
    """
    Accounting rule:
    - Debit  Cost of Goods Sold
    - Credit Inventory

    Example output:
    [
        {"account": <LedgerAccount COGS>, "debit": 500, "credit": 0},
        {"account": <LedgerAccount Inventory>, "debit": 0, "credit": 500},
    ]
    """
    if amount is None or amount <= 0:
        raise COGSPostingError("COGS amount must be greater than zero")

    return [
        {
            "account": get_cogs_expense_ledger(company),
            "debit": amount,
            "credit": Decimal("0.00"),
        },
        {
            "account": get_inventory_asset_ledger(company),
            "debit": Decimal("0.00"),
            "credit": amount,
        },
    ]
