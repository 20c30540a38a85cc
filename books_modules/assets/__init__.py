"""
Capital Assets Module.

Registration, CCA depreciation commits, disposal and deletion of capital
assets, with an in-memory and a SQLAlchemy-backed store.
"""

from books_modules.assets.service import CapitalAssetService
from books_modules.assets.store import (
    DepreciationStore,
    InMemoryDepreciationStore,
    SqlDepreciationStore,
)

__all__ = [
    "CapitalAssetService",
    "DepreciationStore",
    "InMemoryDepreciationStore",
    "SqlDepreciationStore",
]
