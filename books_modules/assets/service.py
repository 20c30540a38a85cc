"""
Capital Assets Module Service (``books_modules.assets.service``).

Responsibility
--------------
Orchestrates capital-asset operations -- registration, depreciation
commits, disposal and deletion -- by delegating pure computation to
``books_engines.depreciation`` and persistence to a ``DepreciationStore``.

Architecture position
---------------------
**Modules layer** -- thin glue.  ``CapitalAssetService`` is the sole
public entry point for operations that change an asset.

Invariants enforced
-------------------
* Commits and disposals for one asset are serialized by a per-asset lock;
  different assets proceed in parallel.
* ``commit_depreciation`` re-projects from the store's current state
  under that lock, so the amount written always matches the book value it
  was computed from.
* Book value never goes negative; at most one entry per (asset, year).

Failure modes
-------------
* Engine errors (duplicate year, disposed asset, unknown class, ...)
  propagate before anything is written.
* Store errors propagate unchanged; the store leaves no partial state.

Audit relevance
---------------
Structured log events at operation start and completion carrying asset
ids, fiscal years and amounts.

Usage::

    service = CapitalAssetService(store, registry, clock)
    asset = service.register_capital_asset(
        company_id=company.id, description="Laptop",
        purchase_date=date(2024, 3, 1), purchase_amount=Decimal("2000.00"),
        tax_paid=Decimal("260.00"), cca_class="50",
    )
    entry = service.commit_depreciation(asset.id, 2024)
"""

from __future__ import annotations

import threading
from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

from books_engines.cca import CCARegistry
from books_engines.depreciation import DepreciationEngine, DepreciationProjection
from books_kernel.domain.clock import Clock, SystemClock
from books_kernel.domain.records import CapitalAsset, DepreciationEntry, PaidBy
from books_kernel.domain.values import DEFAULT_ROUNDING, Currency, to_decimal
from books_kernel.exceptions import DisposalBeforeAcquisitionError, NegativeAmountError
from books_kernel.logging_config import LogContext, get_logger
from books_modules.assets.store import DepreciationStore

logger = get_logger("modules.assets.service")


class CapitalAssetService:
    """
    Orchestrates capital-asset operations through the depreciation engine
    and a store.

    Guarantees
    ----------
    * Clock is injectable for deterministic testing; it only supplies the
      default entry date.
    * Every method either fully succeeds or leaves the store unchanged.
    """

    def __init__(
        self,
        store: DepreciationStore,
        registry: CCARegistry,
        clock: Clock | None = None,
        currency: Currency | str = "CAD",
        rounding: str = DEFAULT_ROUNDING,
    ):
        self._store = store
        self._registry = registry
        self._clock = clock or SystemClock()
        self._currency = Currency(currency) if isinstance(currency, str) else currency
        self._engine = DepreciationEngine(registry, self._currency, rounding)

        self._locks: dict[UUID, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    @property
    def store(self) -> DepreciationStore:
        return self._store

    @property
    def engine(self) -> DepreciationEngine:
        return self._engine

    def _asset_lock(self, asset_id: UUID) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(asset_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[asset_id] = lock
            return lock

    # =========================================================================
    # Registration
    # =========================================================================

    def register_capital_asset(
        self,
        company_id: UUID,
        description: str,
        purchase_date: date,
        purchase_amount: Decimal,
        tax_paid: Decimal,
        cca_class: str,
        paid_by: PaidBy = PaidBy.CORP,
        asset_id: UUID | None = None,
    ) -> CapitalAsset:
        """
        Register a newly purchased asset.

        total_cost = purchase_amount + tax_paid, and the opening book value
        is the total cost.

        Raises:
            UnknownCCAClassError: If the class is not in the registry.
            NegativeAmountError: If the purchase amount or tax is negative.
        """
        purchase_amount = to_decimal(purchase_amount)
        tax_paid = to_decimal(tax_paid)
        if purchase_amount < 0:
            raise NegativeAmountError("purchase_amount", purchase_amount)
        if tax_paid < 0:
            raise NegativeAmountError("tax_paid", tax_paid)
        cca = self._registry.get(cca_class)

        total_cost = self._currency.round(purchase_amount + tax_paid)
        asset = CapitalAsset(
            id=asset_id or uuid4(),
            company_id=company_id,
            description=description,
            purchase_date=purchase_date,
            purchase_amount=purchase_amount,
            tax_paid=tax_paid,
            total_cost=total_cost,
            cca_class=cca.class_number,
            accumulated_depreciation=Decimal("0"),
            book_value=total_cost,
            paid_by=paid_by,
        )
        stored = self._store.add_asset(asset)

        logger.info("capital_asset_registered", extra={
            "asset_id": str(asset.id),
            "company_id": str(company_id),
            "cca_class": cca.class_number,
            "total_cost": str(total_cost),
        })
        return stored

    # =========================================================================
    # Depreciation
    # =========================================================================

    def project_depreciation(
        self,
        asset_id: UUID,
        fiscal_year: int,
        fiscal_year_end: date | None = None,
    ) -> DepreciationProjection:
        """Read-only projection from the store's current state."""
        asset = self._store.get_asset(asset_id)
        history = self._store.list_entries(asset_id)
        return self._engine.project(asset, fiscal_year, history, fiscal_year_end)

    def depreciation_schedule(
        self,
        asset_id: UUID,
        from_year: int,
        years: int,
        fiscal_year_end: date | None = None,
    ) -> tuple[DepreciationProjection, ...]:
        """Forecast future years without recording anything."""
        asset = self._store.get_asset(asset_id)
        history = self._store.list_entries(asset_id)
        return self._engine.schedule(asset, from_year, years, history, fiscal_year_end)

    def commit_depreciation(
        self,
        asset_id: UUID,
        fiscal_year: int,
        entry_date: date | None = None,
        fiscal_year_end: date | None = None,
    ) -> DepreciationEntry:
        """
        Record the depreciation entry for ``fiscal_year``.

        Raises:
            DuplicateDepreciationYearError: If the year is already recorded
                (book value is left unchanged).
            AssetDisposedError: If the asset is disposed.
            FiscalYearBeforeAcquisitionError, DepreciationYearOutOfOrderError,
            UnknownCCAClassError: From the projection.
        """
        entry_date = entry_date or self._clock.today()

        with LogContext.bind(asset_id=str(asset_id)):
            logger.info("depreciation_commit_started", extra={
                "fiscal_year": fiscal_year,
            })
            with self._asset_lock(asset_id):
                asset = self._store.get_asset(asset_id)
                history = self._store.list_entries(asset_id)
                projection = self._engine.project(asset, fiscal_year, history, fiscal_year_end)
                entry = self._engine.build_entry(projection, asset.company_id, entry_date)
                updated = self._store.record_depreciation(
                    entry, expected_accumulated=asset.accumulated_depreciation,
                )

            logger.info("depreciation_committed", extra={
                "fiscal_year": fiscal_year,
                "amount": str(entry.amount),
                "is_half_year": entry.is_half_year,
                "book_value": str(updated.book_value),
            })
        return entry

    # =========================================================================
    # Disposal / deletion
    # =========================================================================

    def dispose(
        self,
        asset_id: UUID,
        disposal_date: date,
        disposal_amount: Decimal,
    ) -> CapitalAsset:
        """
        Mark the asset disposed.  Terminal: no further depreciation.

        No recapture or terminal loss is computed.

        Raises:
            DisposalBeforeAcquisitionError: If disposal_date < purchase_date.
            AlreadyDisposedError: If the asset is already disposed.
            NegativeAmountError: If disposal_amount is negative.
        """
        disposal_amount = to_decimal(disposal_amount)
        if disposal_amount < 0:
            raise NegativeAmountError("disposal_amount", disposal_amount)

        with self._asset_lock(asset_id):
            asset = self._store.get_asset(asset_id)
            if disposal_date < asset.purchase_date:
                raise DisposalBeforeAcquisitionError(
                    asset_id, asset.purchase_date, disposal_date,
                )
            updated = self._store.record_disposal(asset_id, disposal_date, disposal_amount)

        logger.info("capital_asset_disposed", extra={
            "asset_id": str(asset_id),
            "disposal_date": disposal_date,
            "disposal_amount": str(disposal_amount),
            "book_value": str(updated.book_value),
        })
        return updated

    def delete_asset(self, asset_id: UUID) -> None:
        """
        Remove an asset that has no depreciation history.

        Raises:
            AssetHasDepreciationError: If any entry references the asset.
        """
        with self._asset_lock(asset_id):
            self._store.delete_asset(asset_id)
