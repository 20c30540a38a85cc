"""
books_services -- Package init and public API.

Responsibility:
    The calculation facade collaborators call, and the LedgerSource seam
    through which they hand it their records.

Architecture position:
    Services -- orchestration over engines, modules and configuration.

    Dependency direction:
        books_services/ -> books_modules/, books_engines/, books_config/, books_kernel/
        nothing below imports books_services/
"""

from books_services.accounting_engine import AccountingEngine
from books_services.ledger_source import LedgerSource, StaticLedgerSource

__all__ = [
    "AccountingEngine",
    "LedgerSource",
    "StaticLedgerSource",
]
