# accounting/services/sequence_generator.py

"""
======================================================
PATH: accounting/services/sequence_generator.py
======================================================
DOCUMENT NUMBER SEQUENCES

Formats (bit-exact):
- invoice        INV-{year}-{seq:04d}
- credit_note    CN-{year}-{seq:04d}
- sales_order    SO-{year}-{month:02d}-{seq:05d}
- journal_entry  JE-{year}-{seq:04d}
- payment        PMT-{year}-{seq:04d}

Algorithm:
- Read the most recently issued number for (company, kind, period prefix)
- Parse its trailing integer, increment, zero-pad
- A new year (or month, for sales orders) starts again at 1

Concurrency contract:
- Read-increment-write is NOT atomic. Two writers can compute the same number.
- Every numbered model carries a UniqueConstraint on (company, number).
- create_with_document_number() retries inside a savepoint on IntegrityError,
  bounded by ACCOUNTING["DOCUMENT_NUMBER_MAX_RETRIES"].
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date
from typing import Callable, TypeVar

from django.apps import apps
from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models.functions import Length
from django.utils import timezone

from accounting.services.exceptions import (
    DocumentNumberExhaustedError,
    PersistenceError,
    ValidationError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

KIND_INVOICE = "invoice"
KIND_CREDIT_NOTE = "credit_note"
KIND_SALES_ORDER = "sales_order"
KIND_JOURNAL_ENTRY = "journal_entry"
KIND_PAYMENT = "payment"

_TRAILING_INT = re.compile(r"(\d+)$")


@dataclass(frozen=True)
class SequenceFormat:
    prefix: str
    width: int
    monthly: bool
    model_label: str
    number_field: str


SEQUENCE_FORMATS: dict[str, SequenceFormat] = {
    KIND_INVOICE: SequenceFormat("INV", 4, False, "invoices.Invoice", "document_number"),
    KIND_CREDIT_NOTE: SequenceFormat("CN", 4, False, "invoices.Invoice", "document_number"),
    KIND_SALES_ORDER: SequenceFormat("SO", 5, True, "sales.SalesOrder", "order_number"),
    KIND_JOURNAL_ENTRY: SequenceFormat("JE", 4, False, "accounting.JournalEntry", "entry_number"),
    KIND_PAYMENT: SequenceFormat("PMT", 4, False, "invoices.Payment", "payment_number"),
}


def _format_for(kind: str) -> SequenceFormat:
    try:
        return SEQUENCE_FORMATS[kind]
    except KeyError as exc:
        raise ValidationError(f"Unknown document kind: {kind!r}") from exc


def period_prefix(kind: str, on_date: date) -> str:
    fmt = _format_for(kind)
    if fmt.monthly:
        return f"{fmt.prefix}-{on_date.year}-{on_date.month:02d}-"
    return f"{fmt.prefix}-{on_date.year}-"


def format_number(kind: str, on_date: date, seq: int) -> str:
    fmt = _format_for(kind)
    return f"{period_prefix(kind, on_date)}{seq:0{fmt.width}d}"


def parse_sequence(number: str | None) -> int:
    """
    Trailing integer of an issued number ("INV-2025-0042" -> 42).
    Unparseable or empty values count as 0 so the next number is 1.
    """
    match = _TRAILING_INT.search((number or "").strip())
    return int(match.group(1)) if match else 0


def _numbered_queryset(kind: str, company_id):
    fmt = _format_for(kind)
    model = apps.get_model(fmt.model_label)
    return model.objects.filter(company_id=company_id), fmt.number_field


def next_number(*, company_id, kind: str, on_date: date | None = None) -> str:
    on_date = on_date or timezone.localdate()
    prefix = period_prefix(kind, on_date)
    qs, field = _numbered_queryset(kind, company_id)

    last = (
        qs.filter(**{f"{field}__startswith": prefix})
        # Same prefix and zero padding: a longer number is a larger one
        .order_by("-created_at", Length(field).desc(), f"-{field}")
        .values_list(field, flat=True)
        .first()
    )

    return format_number(kind, on_date, parse_sequence(last) + 1)


def _number_taken(*, company_id, kind: str, number: str) -> bool:
    qs, field = _numbered_queryset(kind, company_id)
    return qs.filter(**{field: number}).exists()


def create_with_document_number(
    *,
    company_id,
    kind: str,
    create: Callable[[str], T],
    on_date: date | None = None,
    max_attempts: int | None = None,
) -> T:
    """
    Issue the next number and hand it to `create(number)`.

    `create` must perform the INSERT. A unique-constraint collision on the
    number rolls back to the savepoint and the loop tries the next number.
    Any other IntegrityError is not ours to retry and surfaces as PersistenceError.
    """
    attempts = max_attempts or int(settings.ACCOUNTING["DOCUMENT_NUMBER_MAX_RETRIES"])
    last_exc: IntegrityError | None = None

    for attempt in range(1, attempts + 1):
        number = next_number(company_id=company_id, kind=kind, on_date=on_date)
        try:
            with transaction.atomic():
                return create(number)
        except IntegrityError as exc:
            if not _number_taken(company_id=company_id, kind=kind, number=number):
                raise PersistenceError(f"Failed to store {kind} {number}: {exc}") from exc

            last_exc = exc
            logger.warning(
                "Document number collision kind=%s number=%s attempt=%s/%s",
                kind,
                number,
                attempt,
                attempts,
            )

    raise DocumentNumberExhaustedError(
        f"Could not allocate a unique {kind} number after {attempts} attempts"
    ) from last_exc
