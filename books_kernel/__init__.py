"""
Books Kernel

Shared foundation for the corporate books calculation engine:
- Decimal-only Money value objects with currency-derived rounding
- Typed, coded exception hierarchy
- Structured JSON logging
- Ledger record DTOs (companies, invoices, expenses, assets, ...)
- SQLAlchemy declarative base and engine/session management
"""

__version__ = "0.1.0"
