"""
Pure domain layer.

Value objects, ledger records and fiscal-period helpers with NO
dependencies on:
- ORM (SQLAlchemy)
- Database
- I/O

All domain objects are immutable and deterministic.
"""

from books_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from books_kernel.domain.currency import decimal_places, normalize_currency_code
from books_kernel.domain.periods import fiscal_year_bounds, fiscal_year_of
from books_kernel.domain.records import (
    CapitalAsset,
    Client,
    Company,
    DepreciationEntry,
    Dividend,
    DividendStatus,
    Expense,
    IncomeEntry,
    IncomeType,
    Invoice,
    InvoiceItem,
    InvoiceStatus,
    LedgerRecords,
    OwnerPayment,
    OwnerPaymentType,
    PaidBy,
    SalesTaxPayment,
    SubLedger,
    TaxReturn,
)
from books_kernel.domain.values import Currency, Money

__all__ = [
    "CapitalAsset",
    "Client",
    "Clock",
    "Company",
    "Currency",
    "DepreciationEntry",
    "DeterministicClock",
    "Dividend",
    "DividendStatus",
    "Expense",
    "IncomeEntry",
    "IncomeType",
    "Invoice",
    "InvoiceItem",
    "InvoiceStatus",
    "LedgerRecords",
    "Money",
    "OwnerPayment",
    "OwnerPaymentType",
    "PaidBy",
    "SalesTaxPayment",
    "SubLedger",
    "SystemClock",
    "TaxReturn",
    "decimal_places",
    "fiscal_year_bounds",
    "fiscal_year_of",
    "normalize_currency_code",
]
