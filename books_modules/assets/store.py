"""
Depreciation Store (``books_modules.assets.store``).

Responsibility
--------------
Durable home for capital assets and their depreciation entries.  The
one operation that matters for correctness is ``record_depreciation``:
insert the entry for (asset, fiscal year) if none exists AND move the
asset's accumulated depreciation and book value, atomically.

Two implementations:
    - ``InMemoryDepreciationStore``: dict-backed, one lock per store.
    - ``SqlDepreciationStore``: SQLAlchemy sessions; relies on the
      (asset, fiscal year) unique constraint plus a row lock and a check
      of the expected accumulated depreciation.

Failure modes
-------------
* ``AssetNotFoundError``  -- unknown asset id.
* ``DuplicateDepreciationYearError``  -- entry already exists for the year,
  including when a concurrent writer won the race (IntegrityError).
* ``ConcurrentModificationError``  -- accumulated depreciation changed
  between projection and write.
* ``AssetDisposedError`` / ``AlreadyDisposedError``  -- asset disposed.
* ``AssetHasDepreciationError``  -- delete refused.

Every failure leaves the store unchanged.
"""

from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Protocol
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from books_kernel.domain.records import CapitalAsset, DepreciationEntry
from books_kernel.exceptions import (
    AlreadyDisposedError,
    AssetDisposedError,
    AssetHasDepreciationError,
    AssetNotFoundError,
    ConcurrentModificationError,
    DuplicateDepreciationYearError,
)
from books_kernel.logging_config import get_logger
from books_modules.assets.orm import CapitalAssetModel, DepreciationEntryModel

logger = get_logger("modules.assets.store")


class DepreciationStore(Protocol):
    """What the asset service needs from persistence."""

    def add_asset(self, asset: CapitalAsset) -> CapitalAsset: ...

    def get_asset(self, asset_id: UUID) -> CapitalAsset: ...

    def list_assets(self, company_id: UUID) -> list[CapitalAsset]: ...

    def list_entries(self, asset_id: UUID) -> list[DepreciationEntry]: ...

    def list_company_entries(
        self, company_id: UUID, fiscal_year: int | None = None,
    ) -> list[DepreciationEntry]: ...

    def record_depreciation(
        self, entry: DepreciationEntry, expected_accumulated: Decimal,
    ) -> CapitalAsset: ...

    def record_disposal(
        self, asset_id: UUID, disposal_date: date, disposal_amount: Decimal,
    ) -> CapitalAsset: ...

    def delete_asset(self, asset_id: UUID) -> None: ...


# ---------------------------------------------------------------------------
# In-memory
# ---------------------------------------------------------------------------


class InMemoryDepreciationStore:
    """Dict-backed store. Each mutation runs under one store-wide lock."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._assets: dict[UUID, CapitalAsset] = {}
        self._entries: dict[tuple[UUID, int], DepreciationEntry] = {}

    def _require(self, asset_id: UUID) -> CapitalAsset:
        asset = self._assets.get(asset_id)
        if asset is None:
            raise AssetNotFoundError(asset_id)
        return asset

    def add_asset(self, asset: CapitalAsset) -> CapitalAsset:
        with self._lock:
            self._assets[asset.id] = asset
        return asset

    def get_asset(self, asset_id: UUID) -> CapitalAsset:
        with self._lock:
            return self._require(asset_id)

    def list_assets(self, company_id: UUID) -> list[CapitalAsset]:
        with self._lock:
            return [a for a in self._assets.values() if a.company_id == company_id]

    def list_entries(self, asset_id: UUID) -> list[DepreciationEntry]:
        with self._lock:
            entries = [e for (aid, _), e in self._entries.items() if aid == asset_id]
        return sorted(entries, key=lambda e: e.fiscal_year)

    def list_company_entries(
        self, company_id: UUID, fiscal_year: int | None = None,
    ) -> list[DepreciationEntry]:
        with self._lock:
            entries = [
                e for e in self._entries.values()
                if e.company_id == company_id
                and (fiscal_year is None or e.fiscal_year == fiscal_year)
            ]
        return sorted(entries, key=lambda e: (e.fiscal_year, str(e.asset_id)))

    def record_depreciation(
        self, entry: DepreciationEntry, expected_accumulated: Decimal,
    ) -> CapitalAsset:
        with self._lock:
            asset = self._require(entry.asset_id)
            if (entry.asset_id, entry.fiscal_year) in self._entries:
                raise DuplicateDepreciationYearError(entry.asset_id, entry.fiscal_year)
            if asset.is_disposed:
                raise AssetDisposedError(asset.id, asset.disposal_date)
            if asset.accumulated_depreciation != expected_accumulated:
                raise ConcurrentModificationError(
                    asset.id, expected_accumulated, asset.accumulated_depreciation,
                )
            updated = replace(
                asset,
                accumulated_depreciation=asset.accumulated_depreciation + entry.amount,
                book_value=asset.book_value - entry.amount,
            )
            self._entries[(entry.asset_id, entry.fiscal_year)] = entry
            self._assets[asset.id] = updated
        return updated

    def record_disposal(
        self, asset_id: UUID, disposal_date: date, disposal_amount: Decimal,
    ) -> CapitalAsset:
        with self._lock:
            asset = self._require(asset_id)
            if asset.is_disposed:
                raise AlreadyDisposedError(asset_id, asset.disposal_date)
            updated = replace(
                asset, disposal_date=disposal_date, disposal_amount=disposal_amount,
            )
            self._assets[asset_id] = updated
        return updated

    def delete_asset(self, asset_id: UUID) -> None:
        with self._lock:
            self._require(asset_id)
            count = sum(1 for (aid, _) in self._entries if aid == asset_id)
            if count:
                raise AssetHasDepreciationError(asset_id, count)
            del self._assets[asset_id]


# ---------------------------------------------------------------------------
# SQLAlchemy
# ---------------------------------------------------------------------------


class SqlDepreciationStore:
    """
    SQLAlchemy-backed store.

    Each public method opens its own session from ``session_factory`` and
    owns the transaction boundary: commit on success, rollback on failure.
    """

    def __init__(self, session_factory: sessionmaker[Session], actor_id: UUID):
        self._session_factory = session_factory
        self._actor_id = actor_id

    def _lock_asset(self, session: Session, asset_id: UUID) -> CapitalAssetModel:
        model = session.execute(
            select(CapitalAssetModel)
            .where(CapitalAssetModel.id == asset_id)
            .with_for_update()
        ).scalar_one_or_none()
        if model is None:
            raise AssetNotFoundError(asset_id)
        return model

    def add_asset(self, asset: CapitalAsset) -> CapitalAsset:
        with self._session_factory() as session:
            session.add(CapitalAssetModel.from_dto(asset, created_by_id=self._actor_id))
            session.commit()
        logger.info("capital_asset_stored", extra={
            "asset_id": str(asset.id),
            "cca_class": asset.cca_class,
        })
        return asset

    def get_asset(self, asset_id: UUID) -> CapitalAsset:
        with self._session_factory() as session:
            model = session.get(CapitalAssetModel, asset_id)
            if model is None:
                raise AssetNotFoundError(asset_id)
            return model.to_dto()

    def list_assets(self, company_id: UUID) -> list[CapitalAsset]:
        with self._session_factory() as session:
            models = session.execute(
                select(CapitalAssetModel)
                .where(CapitalAssetModel.company_id == company_id)
                .order_by(CapitalAssetModel.purchase_date)
            ).scalars().all()
            return [m.to_dto() for m in models]

    def list_entries(self, asset_id: UUID) -> list[DepreciationEntry]:
        with self._session_factory() as session:
            models = session.execute(
                select(DepreciationEntryModel)
                .where(DepreciationEntryModel.capital_asset_id == asset_id)
                .order_by(DepreciationEntryModel.fiscal_year)
            ).scalars().all()
            return [m.to_dto() for m in models]

    def list_company_entries(
        self, company_id: UUID, fiscal_year: int | None = None,
    ) -> list[DepreciationEntry]:
        stmt = select(DepreciationEntryModel).where(
            DepreciationEntryModel.company_id == company_id,
        )
        if fiscal_year is not None:
            stmt = stmt.where(DepreciationEntryModel.fiscal_year == fiscal_year)
        stmt = stmt.order_by(
            DepreciationEntryModel.fiscal_year, DepreciationEntryModel.capital_asset_id,
        )
        with self._session_factory() as session:
            return [m.to_dto() for m in session.execute(stmt).scalars().all()]

    def record_depreciation(
        self, entry: DepreciationEntry, expected_accumulated: Decimal,
    ) -> CapitalAsset:
        with self._session_factory() as session:
            try:
                model = self._lock_asset(session, entry.asset_id)

                existing = session.execute(
                    select(DepreciationEntryModel.id).where(
                        DepreciationEntryModel.capital_asset_id == entry.asset_id,
                        DepreciationEntryModel.fiscal_year == entry.fiscal_year,
                    )
                ).first()
                if existing is not None:
                    raise DuplicateDepreciationYearError(entry.asset_id, entry.fiscal_year)
                if model.disposal_date is not None:
                    raise AssetDisposedError(model.id, model.disposal_date)
                if model.accumulated_depreciation != expected_accumulated:
                    raise ConcurrentModificationError(
                        model.id, expected_accumulated, model.accumulated_depreciation,
                    )

                session.add(DepreciationEntryModel.from_dto(entry, created_by_id=self._actor_id))
                model.accumulated_depreciation = model.accumulated_depreciation + entry.amount
                model.book_value = model.book_value - entry.amount
                model.updated_by_id = self._actor_id
                session.flush()
            except IntegrityError:
                # Concurrent insert for the same (asset, year) won the race
                session.rollback()
                logger.warning("depreciation_entry_conflict", extra={
                    "asset_id": str(entry.asset_id),
                    "fiscal_year": entry.fiscal_year,
                })
                raise DuplicateDepreciationYearError(entry.asset_id, entry.fiscal_year) from None
            except Exception:
                session.rollback()
                raise

            session.commit()
            return model.to_dto()

    def record_disposal(
        self, asset_id: UUID, disposal_date: date, disposal_amount: Decimal,
    ) -> CapitalAsset:
        with self._session_factory() as session:
            try:
                model = self._lock_asset(session, asset_id)
                if model.disposal_date is not None:
                    raise AlreadyDisposedError(asset_id, model.disposal_date)
                model.disposal_date = disposal_date
                model.disposal_amount = disposal_amount
                model.updated_by_id = self._actor_id
                session.flush()
            except Exception:
                session.rollback()
                raise
            session.commit()
            return model.to_dto()

    def delete_asset(self, asset_id: UUID) -> None:
        with self._session_factory() as session:
            try:
                model = self._lock_asset(session, asset_id)
                count = session.execute(
                    select(func.count())
                    .select_from(DepreciationEntryModel)
                    .where(DepreciationEntryModel.capital_asset_id == asset_id)
                ).scalar_one()
                if count:
                    raise AssetHasDepreciationError(asset_id, count)
                session.delete(model)
                session.flush()
            except Exception:
                session.rollback()
                raise
            session.commit()
        logger.info("capital_asset_deleted", extra={"asset_id": str(asset_id)})
