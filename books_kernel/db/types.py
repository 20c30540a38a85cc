"""
Module: books_kernel.db.types
Responsibility: Annotated type aliases for ORM columns, so every model maps
    monetary amounts and short codes to identical column types.
Architecture position: Kernel > DB.  Imported by module ORM files only.

Invariants enforced:
    No floats in any column.  Amounts use Numeric(38, 9) whatever the
    currency; rounding to the currency's precision happens before a value
    reaches the database.
"""

from decimal import Decimal
from typing import Annotated

from sqlalchemy import Numeric, String

# Monetary amount: 38 digits total, 9 decimal places
MoneyAmount = Annotated[Decimal, Numeric(38, 9)]

# CCA class number (e.g. "10", "50")
ClassCode = Annotated[str, String(8)]

# Short enum-like values stored as their string value
ShortCode = Annotated[str, String(50)]

# Long text for descriptions
LongText = Annotated[str, String(4000)]
