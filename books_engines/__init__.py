"""
Module: books_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  This is the canonical import surface for higher
    layers (books_modules, books_services).

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import books_kernel (and sibling engine modules).
    MUST NOT import books_config, books_modules or books_services.

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()`` or ``date.today()``.
      Dates are passed in as explicit parameters.
    - Decimal-only arithmetic: floats are refused at the boundary.
    - Determinism: identical inputs always produce identical outputs.

Failure modes:
    - ValidationError / ConflictError / StateError subclasses from
      ``books_kernel.exceptions`` on invalid input.

Usage:
    from books_engines.money_split import MoneySplitter
    from books_engines.invoicing import InvoiceCalculator
    from books_engines.cca import CCARegistry
    from books_engines.depreciation import DepreciationEngine
    from books_engines.tax_ledger import TaxLedger
    from books_engines.tax_return import TaxReturnAggregator
"""

from books_engines.cca import CCAClass, CCARegistry
from books_engines.depreciation import (
    DepreciationEngine,
    DepreciationProjection,
    apply_projection,
)
from books_engines.distributions import OwnerPaymentSummary, summarize_owner_payments
from books_engines.invoicing import (
    InvoiceCalculator,
    InvoiceTotals,
    next_invoice_number,
    sales_tax_rate_for,
)
from books_engines.money_split import MoneySplit, MoneySplitter
from books_engines.tax_ledger import TaxLedger, TaxLedgerSummary
from books_engines.tax_return import TaxReturnAggregator

__all__ = [
    "CCAClass",
    "CCARegistry",
    "DepreciationEngine",
    "DepreciationProjection",
    "InvoiceCalculator",
    "InvoiceTotals",
    "MoneySplit",
    "MoneySplitter",
    "OwnerPaymentSummary",
    "TaxLedger",
    "TaxLedgerSummary",
    "TaxReturnAggregator",
    "apply_projection",
    "next_invoice_number",
    "sales_tax_rate_for",
    "summarize_owner_payments",
]
