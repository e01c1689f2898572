# invoices/services/saga.py

"""
======================================================
PATH: invoices/services/saga.py
======================================================
COMPENSATING-ACTION SEQUENCE

Multi-step writes (invoice create / edit / credit, payments) span several
independent units of work. Each completed step registers its inverse;
on failure the inverses run in reverse order.

Usage:
    saga = Saga("create_invoice")
    with saga:
        invoice = saga.step("persist", persist, compensate=delete_invoice)
        entry = saga.step("post", post, compensate=void_entry)

Rules:
- Inverses must be idempotent
- A failing inverse is logged and the rest still run
- Service errors surface unchanged; database errors surface as PersistenceError
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from django.db import DatabaseError

from accounting.services.exceptions import PersistenceError

logger = logging.getLogger(__name__)


class Saga:
    def __init__(self, name: str):
        self.name = name
        self._compensations: list[tuple[str, Callable[[], Any]]] = []
        self.failed_compensations: list[str] = []

    def step(self, label: str, action: Callable[[], Any], compensate: Callable[[Any], Any] | None = None):
        result = action()
        if compensate is not None and result is not None:
            self._compensations.append((label, lambda: compensate(result)))
        return result

    def on_failure(self, label: str, compensate: Callable[[], Any]) -> None:
        self._compensations.append((label, compensate))

    def compensate(self) -> None:
        while self._compensations:
            label, inverse = self._compensations.pop()
            try:
                inverse()
                logger.warning("Saga %s: compensated step '%s'", self.name, label)
            except Exception:
                self.failed_compensations.append(label)
                logger.exception("Saga %s: compensation for step '%s' failed", self.name, label)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc is None:
            return False

        logger.warning("Saga %s failed: %s", self.name, exc)
        self.compensate()

        if isinstance(exc, DatabaseError):
            raise PersistenceError(f"{self.name} failed while saving; changes were rolled back") from exc
        return False
