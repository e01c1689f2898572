# accounting/tests/helpers.py

import uuid

from django.contrib.auth import get_user_model

from accounting.models.ledger_account import LedgerAccount
from accounting.services.account_resolver import ensure_system_ledgers
from companies.models import Company, Customer

User = get_user_model()


def make_company(name="Acme Traders", state="Maharashtra"):
    company = Company.objects.create(name=name, state=state)
    ensure_system_ledgers(company)
    return company


def make_user(company, *, role="accountant", email=None):
    return User.objects.create_user(
        email=email or f"{role}.{uuid.uuid4().hex[:8]}@example.com",
        password="pass",
        role=role,
        company=company,
    )


def make_customer(company, *, name="Buyer Pvt Ltd", state=""):
    return Customer.objects.create(company=company, name=name, state=state)


def ledger(company, name):
    return LedgerAccount.objects.get(company=company, name=name)


def balance(company, name):
    return ledger(company, name).current_balance
