"""
Capital Assets ORM Models (``books_modules.assets.orm``).

Responsibility
--------------
SQLAlchemy persistence models for capital assets and their depreciation
entries.  Maps the frozen records from ``books_kernel.domain.records`` to
database tables.

Architecture position
---------------------
**Modules layer** -- persistence.  Imports from ``books_kernel.db.base``.
MUST NOT be imported by ``books_kernel`` or ``books_engines``.

Invariants enforced
-------------------
* At most one depreciation entry per (asset, fiscal year), enforced by a
  unique constraint so concurrent writers cannot both succeed.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from books_kernel.db.base import TrackedBase
from books_kernel.db.types import ClassCode, LongText, MoneyAmount, ShortCode
from books_kernel.domain.records import CapitalAsset, DepreciationEntry, PaidBy


# ---------------------------------------------------------------------------
# CapitalAssetModel
# ---------------------------------------------------------------------------

class CapitalAssetModel(TrackedBase):
    """
    ORM model for ``CapitalAsset``.

    Table: ``assets_capital_assets``
    """

    __tablename__ = "assets_capital_assets"

    company_id: Mapped[UUID]
    description: Mapped[LongText]
    purchase_date: Mapped[date]
    purchase_amount: Mapped[MoneyAmount]
    tax_paid: Mapped[MoneyAmount] = mapped_column(default=Decimal("0"))
    total_cost: Mapped[MoneyAmount]
    cca_class: Mapped[ClassCode]
    accumulated_depreciation: Mapped[MoneyAmount] = mapped_column(default=Decimal("0"))
    book_value: Mapped[MoneyAmount]
    disposal_date: Mapped[date | None]
    disposal_amount: Mapped[Decimal | None]
    paid_by: Mapped[ShortCode] = mapped_column(default=PaidBy.CORP.value)

    # Relationships (children)
    depreciation_entries: Mapped[list["DepreciationEntryModel"]] = relationship(
        back_populates="capital_asset",
    )

    __table_args__ = (
        Index("idx_assets_capital_assets_company_id", "company_id"),
        Index("idx_assets_capital_assets_purchase_date", "purchase_date"),
    )

    def to_dto(self) -> CapitalAsset:
        return CapitalAsset(
            id=self.id,
            company_id=self.company_id,
            description=self.description,
            purchase_date=self.purchase_date,
            purchase_amount=self.purchase_amount,
            tax_paid=self.tax_paid,
            total_cost=self.total_cost,
            cca_class=self.cca_class,
            accumulated_depreciation=self.accumulated_depreciation,
            book_value=self.book_value,
            disposal_date=self.disposal_date,
            disposal_amount=self.disposal_amount,
            paid_by=PaidBy(self.paid_by),
        )

    @classmethod
    def from_dto(cls, dto: CapitalAsset, created_by_id: UUID) -> "CapitalAssetModel":
        return cls(
            id=dto.id,
            company_id=dto.company_id,
            description=dto.description,
            purchase_date=dto.purchase_date,
            purchase_amount=dto.purchase_amount,
            tax_paid=dto.tax_paid,
            total_cost=dto.total_cost,
            cca_class=dto.cca_class,
            accumulated_depreciation=dto.accumulated_depreciation,
            book_value=dto.book_value,
            disposal_date=dto.disposal_date,
            disposal_amount=dto.disposal_amount,
            paid_by=dto.paid_by.value,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return (
            f"<CapitalAssetModel(id={self.id!r}, cca_class={self.cca_class!r}, "
            f"book_value={self.book_value!r})>"
        )


# ---------------------------------------------------------------------------
# DepreciationEntryModel
# ---------------------------------------------------------------------------

class DepreciationEntryModel(TrackedBase):
    """
    ORM model for ``DepreciationEntry``.

    Table: ``assets_depreciation_entries``
    """

    __tablename__ = "assets_depreciation_entries"

    capital_asset_id: Mapped[UUID] = mapped_column(
        ForeignKey("assets_capital_assets.id"),
    )
    company_id: Mapped[UUID]
    fiscal_year: Mapped[int]
    amount: Mapped[MoneyAmount]
    is_half_year: Mapped[bool] = mapped_column(default=False)
    entry_date: Mapped[date]

    # Relationships (parent)
    capital_asset: Mapped["CapitalAssetModel"] = relationship(
        back_populates="depreciation_entries",
    )

    __table_args__ = (
        UniqueConstraint(
            "capital_asset_id", "fiscal_year",
            name="uq_assets_depreciation_entries_asset_year",
        ),
        Index("idx_assets_depreciation_entries_company_year", "company_id", "fiscal_year"),
    )

    def to_dto(self) -> DepreciationEntry:
        return DepreciationEntry(
            id=self.id,
            asset_id=self.capital_asset_id,
            company_id=self.company_id,
            fiscal_year=self.fiscal_year,
            amount=self.amount,
            is_half_year=self.is_half_year,
            entry_date=self.entry_date,
        )

    @classmethod
    def from_dto(cls, dto: DepreciationEntry, created_by_id: UUID) -> "DepreciationEntryModel":
        return cls(
            id=dto.id,
            capital_asset_id=dto.asset_id,
            company_id=dto.company_id,
            fiscal_year=dto.fiscal_year,
            amount=dto.amount,
            is_half_year=dto.is_half_year,
            entry_date=dto.entry_date,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return (
            f"<DepreciationEntryModel(asset={self.capital_asset_id!r}, "
            f"fiscal_year={self.fiscal_year!r}, amount={self.amount!r})>"
        )
