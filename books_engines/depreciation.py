"""
Depreciation Engine - declining-balance capital cost allowance.

Pure projection with no I/O.  Persisting an entry (and moving the asset's
book value) is the asset service's job; it re-runs ``project`` against
the store's current state before writing.

Rules:
    - rate comes from the asset's CCA class
    - half-year rule: in the fiscal year the asset was acquired only half
      the rate applies
    - amount = min(book value, round(book value * rate * factor)), so the
      book value never goes negative
    - at most one entry per (asset, fiscal year); years before the asset
      was acquired, or before the latest recorded year, are refused
    - disposed assets are not depreciated

Usage:
    from books_engines.depreciation import DepreciationEngine

    engine = DepreciationEngine(registry)
    projection = engine.project(asset, fiscal_year=2025, history=entries)
    projection.amount
    projection.projected_book_value
"""

from __future__ import annotations

import time
from collections.abc import Sequence
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

from books_engines.cca import CCARegistry
from books_kernel.domain.periods import fiscal_year_bounds, fiscal_year_of
from books_kernel.domain.records import CapitalAsset, DepreciationEntry
from books_kernel.domain.values import DEFAULT_ROUNDING, Currency
from books_kernel.exceptions import (
    AssetDisposedError,
    DepreciationYearOutOfOrderError,
    DuplicateDepreciationYearError,
    FiscalYearBeforeAcquisitionError,
)
from books_kernel.logging_config import get_logger

logger = get_logger("engines.depreciation")

HALF = Decimal("0.5")
ONE = Decimal("1")


@dataclass(frozen=True)
class DepreciationProjection:
    """
    Allowed depreciation for one asset and fiscal year.

    Immutable; projected_book_value == opening_book_value - amount >= 0.
    """

    asset_id: UUID
    fiscal_year: int
    cca_class: str
    rate: Decimal
    is_half_year: bool
    opening_book_value: Decimal
    amount: Decimal
    projected_book_value: Decimal


class DepreciationEngine:
    """
    Project CCA depreciation for capital assets.

    Pure functions - no I/O, no database access.
    """

    def __init__(
        self,
        registry: CCARegistry,
        currency: Currency | str = "CAD",
        rounding: str = DEFAULT_ROUNDING,
    ):
        self._registry = registry
        self._currency = Currency(currency) if isinstance(currency, str) else currency
        self._rounding = rounding

    @property
    def registry(self) -> CCARegistry:
        return self._registry

    def project(
        self,
        asset: CapitalAsset,
        fiscal_year: int,
        history: Sequence[DepreciationEntry] = (),
        fiscal_year_end: date | None = None,
    ) -> DepreciationProjection:
        """
        Compute the allowed depreciation for ``fiscal_year``.

        Args:
            asset: The asset in its current state (book value after all
                entries in ``history``).
            fiscal_year: Fiscal year to depreciate.
            history: Depreciation entries already recorded for the asset.
            fiscal_year_end: Company fiscal year end (month/day used).
                None means December 31.

        Raises:
            DuplicateDepreciationYearError: If ``history`` has ``fiscal_year``.
            AssetDisposedError: If the asset is disposed.
            FiscalYearBeforeAcquisitionError: If the year precedes acquisition.
            DepreciationYearOutOfOrderError: If a later year is already recorded.
            UnknownCCAClassError: If the asset's class is not registered.
        """
        t0 = time.monotonic()
        recorded_years = {entry.fiscal_year for entry in history}

        if fiscal_year in recorded_years:
            logger.warning("depreciation_year_duplicate", extra={
                "asset_id": str(asset.id),
                "fiscal_year": fiscal_year,
            })
            raise DuplicateDepreciationYearError(asset.id, fiscal_year)

        if asset.is_disposed:
            logger.warning("depreciation_asset_disposed", extra={
                "asset_id": str(asset.id),
                "disposal_date": asset.disposal_date,
            })
            raise AssetDisposedError(asset.id, asset.disposal_date)

        acquisition_year = fiscal_year_of(asset.purchase_date, fiscal_year_end)
        if fiscal_year < acquisition_year:
            raise FiscalYearBeforeAcquisitionError(asset.id, fiscal_year, acquisition_year)

        if recorded_years and fiscal_year < max(recorded_years):
            raise DepreciationYearOutOfOrderError(asset.id, fiscal_year, max(recorded_years))

        rate = self._registry.rate_for(asset.cca_class)
        is_half_year = fiscal_year == acquisition_year
        factor = HALF if is_half_year else ONE

        opening = asset.book_value
        if opening <= 0:
            amount = Decimal("0")
        else:
            raw = self._currency.round(opening * rate * factor, self._rounding)
            amount = min(opening, raw)

        projection = DepreciationProjection(
            asset_id=asset.id,
            fiscal_year=fiscal_year,
            cca_class=asset.cca_class,
            rate=rate,
            is_half_year=is_half_year,
            opening_book_value=opening,
            amount=amount,
            projected_book_value=opening - amount,
        )

        duration_ms = round((time.monotonic() - t0) * 1000, 2)
        logger.info("depreciation_projected", extra={
            "asset_id": str(asset.id),
            "fiscal_year": fiscal_year,
            "cca_class": asset.cca_class,
            "rate": str(rate),
            "is_half_year": is_half_year,
            "opening_book_value": str(opening),
            "amount": str(amount),
            "duration_ms": duration_ms,
        })

        return projection

    def schedule(
        self,
        asset: CapitalAsset,
        from_year: int,
        years: int,
        history: Sequence[DepreciationEntry] = (),
        fiscal_year_end: date | None = None,
    ) -> tuple[DepreciationProjection, ...]:
        """
        Forecast up to ``years`` consecutive projections starting at ``from_year``.

        Each year is projected from the previous year's projected book value.
        The forecast stops after the year in which book value reaches zero.
        Nothing is recorded.
        """
        if years < 0:
            raise ValueError(f"years must not be negative, got {years}")

        projections: list[DepreciationProjection] = []
        simulated = asset
        simulated_history = list(history)

        for fiscal_year in range(from_year, from_year + years):
            if simulated.book_value <= 0:
                break
            projection = self.project(simulated, fiscal_year, simulated_history, fiscal_year_end)
            projections.append(projection)
            simulated = apply_projection(simulated, projection)
            simulated_history.append(self.build_entry(
                projection, simulated.company_id,
                fiscal_year_bounds(fiscal_year, fiscal_year_end)[1],
            ))

        logger.info("depreciation_schedule_projected", extra={
            "asset_id": str(asset.id),
            "from_year": from_year,
            "years_requested": years,
            "years_projected": len(projections),
        })
        return tuple(projections)

    def build_entry(
        self,
        projection: DepreciationProjection,
        company_id: UUID,
        entry_date: date,
        entry_id: UUID | None = None,
    ) -> DepreciationEntry:
        """Turn a projection into the entry record that will be persisted."""
        return DepreciationEntry(
            id=entry_id or uuid4(),
            asset_id=projection.asset_id,
            company_id=company_id,
            fiscal_year=projection.fiscal_year,
            amount=projection.amount,
            is_half_year=projection.is_half_year,
            entry_date=entry_date,
        )


def apply_projection(asset: CapitalAsset, projection: DepreciationProjection) -> CapitalAsset:
    """Asset state after the projected amount has been taken."""
    return replace(
        asset,
        accumulated_depreciation=asset.accumulated_depreciation + projection.amount,
        book_value=projection.projected_book_value,
    )
