# accounting/services/account_resolver.py

"""
PATH: accounting/services/account_resolver.py

LEDGER RESOLVER (AUTHORITATIVE)

This module answers ONE question:
"Which ledger account should be used for this purpose, for this company?"

Design goals:
- deterministic (system ledgers resolved by fixed semantic key -> name)
- company-safe (never returns another company's ledger)
- hard-fail on missing setup so we never post to the wrong ledger
- system ledgers are seeded idempotently (ensure_system_ledgers)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction

from accounting.models.ledger_account import LedgerAccount
from accounting.services.exceptions import AccountResolutionError

logger = logging.getLogger(__name__)

# ------------------------------------------------------------
# SYSTEM LEDGERS (SEMANTIC KEY -> DEFINITION)
# ------------------------------------------------------------

SALES = "SALES"
CGST_OUTPUT = "CGST_OUTPUT"
SGST_OUTPUT = "SGST_OUTPUT"
IGST_OUTPUT = "IGST_OUTPUT"
COGS = "COGS"
INVENTORY = "INVENTORY"
CASH = "CASH"
BANK = "BANK"
ROUND_OFF = "ROUND_OFF"

SUNDRY_DEBTORS = "Sundry Debtors"


@dataclass(frozen=True)
class SystemLedger:
    name: str
    account_type: str
    group_name: str
    is_cash_ledger: bool = False


SYSTEM_LEDGERS: dict[str, SystemLedger] = {
    SALES: SystemLedger("Sales", LedgerAccount.INCOME, "Sales Accounts"),
    CGST_OUTPUT: SystemLedger("CGST Output", LedgerAccount.LIABILITY, "Duties & Taxes"),
    SGST_OUTPUT: SystemLedger("SGST Output", LedgerAccount.LIABILITY, "Duties & Taxes"),
    IGST_OUTPUT: SystemLedger("IGST Output", LedgerAccount.LIABILITY, "Duties & Taxes"),
    COGS: SystemLedger("Cost of Goods Sold", LedgerAccount.EXPENSE, "Direct Expenses"),
    INVENTORY: SystemLedger("Inventory", LedgerAccount.ASSET, "Stock-in-Hand"),
    CASH: SystemLedger("Cash", LedgerAccount.ASSET, "Cash-in-Hand", is_cash_ledger=True),
    BANK: SystemLedger("Bank", LedgerAccount.ASSET, "Bank Accounts"),
    ROUND_OFF: SystemLedger("Round Off", LedgerAccount.INCOME, "Indirect Incomes"),
}


# ------------------------------------------------------------
# SEEDING
# ------------------------------------------------------------


@transaction.atomic
def ensure_system_ledgers(company) -> list[LedgerAccount]:
    """
    Idempotently create every system ledger for `company`.
    Returns the ledgers in SYSTEM_LEDGERS order.
    """
    ledgers: list[LedgerAccount] = []
    for definition in SYSTEM_LEDGERS.values():
        ledger, created = LedgerAccount.objects.get_or_create(
            company=company,
            name=definition.name,
            defaults={
                "account_type": definition.account_type,
                "group_name": definition.group_name,
                "is_system_ledger": True,
                "is_cash_ledger": definition.is_cash_ledger,
            },
        )
        if created:
            logger.info("Created system ledger %s for company=%s", definition.name, company.pk)
        ledgers.append(ledger)
    return ledgers


# ------------------------------------------------------------
# PUBLIC RESOLVERS
# ------------------------------------------------------------


def get_system_ledger(company, semantic_key: str) -> LedgerAccount:
    semantic_key = (semantic_key or "").strip().upper()
    definition = SYSTEM_LEDGERS.get(semantic_key)
    if definition is None:
        raise AccountResolutionError(f"Unknown system ledger key '{semantic_key}'")

    try:
        return LedgerAccount.objects.get(
            company=company,
            name=definition.name,
            is_system_ledger=True,
            is_active=True,
        )
    except LedgerAccount.DoesNotExist as exc:
        raise AccountResolutionError(
            f"System ledger '{definition.name}' not found (or inactive) for company {company.pk}. "
            "Run the seed_system_ledgers command."
        ) from exc


def get_ledger_for_company(company, ledger_id) -> LedgerAccount:
    """Resolve a caller-supplied ledger id, scoped to the company."""
    try:
        return LedgerAccount.objects.get(pk=ledger_id, company=company)
    except (LedgerAccount.DoesNotExist, DjangoValidationError, ValueError, TypeError) as exc:
        raise AccountResolutionError(f"Ledger account {ledger_id} not found") from exc


def get_or_create_customer_ledger(customer) -> LedgerAccount:
    """
    Receivable ledger for a customer (asset, group Sundry Debtors).
    Safe under concurrent first use: a losing INSERT re-reads the winner.
    """
    existing = LedgerAccount.objects.filter(customer=customer).first()
    if existing is not None:
        return existing

    name = customer.name
    if LedgerAccount.objects.filter(company_id=customer.company_id, name=name).exists():
        # Another ledger already owns the plain name
        name = f"{customer.name} ({str(customer.pk)[:8]})"

    try:
        with transaction.atomic():
            return LedgerAccount.objects.create(
                company_id=customer.company_id,
                customer=customer,
                name=name,
                account_type=LedgerAccount.ASSET,
                group_name=SUNDRY_DEBTORS,
            )
    except (IntegrityError, DjangoValidationError):
        ledger = LedgerAccount.objects.filter(customer=customer).first()
        if ledger is None:
            raise
        return ledger
