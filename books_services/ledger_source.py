"""
books_services.ledger_source -- where the facade gets its records.

Responsibility:
    Define the ``LedgerSource`` protocol the collaborator implements to
    hand the accounting engine a company's records, and a static,
    dict-backed implementation for tests and batch use.

Architecture position:
    Services -- adapter seam.  The engine never queries invoices,
    expenses or dividends itself; it asks a LedgerSource for them.

Invariants enforced:
    - Records are returned as frozen ``LedgerRecords``; callers cannot
      mutate what the source holds.
    - A company with nothing registered gets empty ``LedgerRecords``
      (no income/expense sub-ledgers), which the tax return refuses as
      an incomplete year.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from datetime import date
from typing import Protocol
from uuid import UUID

from books_kernel.domain.periods import in_period
from books_kernel.domain.records import LedgerRecords, OwnerPayment


class LedgerSource(Protocol):
    """Collaborator-supplied records for one company."""

    def records_for(
        self, company_id: UUID, period_start: date, period_end: date,
    ) -> LedgerRecords: ...

    def owner_payments_for(
        self, company_id: UUID, period_start: date, period_end: date,
    ) -> list[OwnerPayment]: ...


class StaticLedgerSource:
    """
    In-memory LedgerSource.

    ``records_for`` returns whatever was registered for the company; the
    engines apply the period filter themselves.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: dict[UUID, LedgerRecords] = {}
        self._owner_payments: dict[UUID, list[OwnerPayment]] = {}

    def put(self, company_id: UUID, records: LedgerRecords) -> None:
        with self._lock:
            self._records[company_id] = records

    def add_owner_payments(self, company_id: UUID, payments: Iterable[OwnerPayment]) -> None:
        with self._lock:
            self._owner_payments.setdefault(company_id, []).extend(payments)

    def records_for(
        self, company_id: UUID, period_start: date, period_end: date,
    ) -> LedgerRecords:
        with self._lock:
            return self._records.get(company_id, LedgerRecords())

    def owner_payments_for(
        self, company_id: UUID, period_start: date, period_end: date,
    ) -> list[OwnerPayment]:
        with self._lock:
            payments = list(self._owner_payments.get(company_id, ()))
        return [p for p in payments if in_period(p.payment_date, period_start, period_end)]
