"""
books_services.accounting_engine -- the public calculation facade.

Responsibility:
    Single entry point collaborators call for invoice totals, depreciation
    projection and commit, asset disposal, period sales-tax summaries and
    annual tax returns.  Wires the pure engines to configuration, the
    capital-asset service and a collaborator-supplied ``LedgerSource``.

Architecture position:
    Services -- stateful orchestration over engines + modules.
    Holds no records of its own: invoices, income, expenses, dividends and
    sales-tax payments come from the LedgerSource; capital assets and
    depreciation entries recorded through this facade come from the
    asset store and are merged in before aggregation.

Invariants enforced:
    - Every calculation uses the configured currency and rounding mode.
    - Depreciation years follow the owning company's fiscal year end.
    - Depreciation recorded in the asset store is always visible to the
      tax return of the same fiscal year.

Failure modes:
    - Propagates the typed ``BooksError`` subclasses raised by the
      engines, the asset service and the store unchanged.

Usage:
    from books_services import AccountingEngine, StaticLedgerSource
    from books_modules.assets import InMemoryDepreciationStore

    engine = AccountingEngine.from_settings(StaticLedgerSource(), InMemoryDepreciationStore())
    totals = engine.compute_invoice_totals(items, client_exempt=False, rate=Decimal("0.13"))
    tax_return = engine.aggregate_tax_return(company, 2025)
"""

from __future__ import annotations

import time
from collections.abc import Iterable, Sequence
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import TypeVar
from uuid import UUID

from books_config import get_active_settings, get_cca_registry
from books_config.bridges import settings_currency
from books_config.schema import EngineSettings
from books_engines.cca import CCAClass, CCARegistry
from books_engines.depreciation import DepreciationProjection
from books_engines.distributions import OwnerPaymentSummary, summarize_owner_payments
from books_engines.invoicing import (
    InvoiceCalculator,
    InvoiceTotals,
    next_invoice_number,
    sales_tax_rate_for,
)
from books_engines.tax_ledger import TaxLedger, TaxLedgerSummary
from books_engines.tax_return import TaxReturnAggregator
from books_kernel.domain.clock import Clock
from books_kernel.domain.periods import fiscal_year_bounds
from books_kernel.domain.records import (
    CapitalAsset,
    Client,
    Company,
    DepreciationEntry,
    InvoiceItem,
    LedgerRecords,
    PaidBy,
    TaxReturn,
)
from books_kernel.exceptions import AssetNotFoundError
from books_kernel.logging_config import LogContext, get_logger
from books_modules.assets.service import CapitalAssetService
from books_modules.assets.store import DepreciationStore
from books_services.ledger_source import LedgerSource

logger = get_logger("services.accounting_engine")

T = TypeVar("T", CapitalAsset, DepreciationEntry)


def _asset_id(asset: CapitalAsset | UUID) -> UUID:
    return asset.id if isinstance(asset, CapitalAsset) else asset


def _merge_by_id(supplied: Iterable[T], stored: Iterable[T]) -> tuple[T, ...]:
    # stored rows win: they reflect every committed depreciation
    merged = {record.id: record for record in supplied}
    merged.update((record.id, record) for record in stored)
    return tuple(merged.values())


class AccountingEngine:
    """
    Facade over the calculation engines.

    Contract:
        Receives a LedgerSource and a CapitalAssetService via constructor
        injection; ``from_settings`` builds the service from configuration.
    Guarantees:
        - Calculations are pure apart from ``commit_depreciation``,
          ``dispose_asset``, ``register_capital_asset`` and
          ``delete_asset``, which write through the asset service.
    Non-goals:
        - Does not persist invoices, income, expenses or dividends.
        - Does not render reports.
    """

    def __init__(
        self,
        ledger_source: LedgerSource,
        asset_service: CapitalAssetService,
        settings: EngineSettings,
    ):
        self._source = ledger_source
        self._assets = asset_service
        self._settings = settings
        currency = settings_currency(settings)
        self._invoices = InvoiceCalculator(currency, settings.rounding)
        self._tax_ledger = TaxLedger(currency, settings.rounding)
        self._tax_return = TaxReturnAggregator(currency, settings.rounding)

    @classmethod
    def from_settings(
        cls,
        ledger_source: LedgerSource,
        store: DepreciationStore,
        settings: EngineSettings | None = None,
        registry: CCARegistry | None = None,
        clock: Clock | None = None,
    ) -> AccountingEngine:
        """Build the engine from the active (or given) configuration."""
        settings = settings or get_active_settings()
        registry = registry or get_cca_registry()
        service = CapitalAssetService(
            store,
            registry,
            clock=clock,
            currency=settings_currency(settings),
            rounding=settings.rounding,
        )
        return cls(ledger_source, service, settings)

    @property
    def settings(self) -> EngineSettings:
        return self._settings

    @property
    def asset_service(self) -> CapitalAssetService:
        return self._assets

    # =========================================================================
    # Invoicing
    # =========================================================================

    def compute_invoice_totals(
        self,
        items: Sequence[InvoiceItem],
        client_exempt: bool,
        rate: Decimal | str | int,
    ) -> InvoiceTotals:
        return self._invoices.compute(items, client_exempt, rate)

    def invoice_totals_for(
        self,
        company: Company,
        client: Client,
        items: Sequence[InvoiceItem],
    ) -> InvoiceTotals:
        """Totals at the company's sales-tax rate, honouring the client's exemption."""
        return self._invoices.compute(items, client.tax_exempt, sales_tax_rate_for(company))

    def next_invoice_number(self, year: int, issued_count: int) -> str:
        return next_invoice_number(year, issued_count)

    # =========================================================================
    # Capital assets
    # =========================================================================

    def list_cca_classes(self) -> tuple[CCAClass, ...]:
        return self._assets.engine.registry.classes()

    def register_capital_asset(
        self,
        company: Company,
        description: str,
        purchase_date: date,
        purchase_amount: Decimal,
        tax_paid: Decimal,
        cca_class: str,
        paid_by: PaidBy = PaidBy.CORP,
    ) -> CapitalAsset:
        return self._assets.register_capital_asset(
            company_id=company.id,
            description=description,
            purchase_date=purchase_date,
            purchase_amount=purchase_amount,
            tax_paid=tax_paid,
            cca_class=cca_class,
            paid_by=paid_by,
        )

    def _owned_asset_id(self, company: Company, asset: CapitalAsset | UUID) -> UUID:
        # fiscal years are the owning company's, so the asset must be its own
        asset_id = _asset_id(asset)
        if self._assets.store.get_asset(asset_id).company_id != company.id:
            raise AssetNotFoundError(asset_id)
        return asset_id

    def project_depreciation(
        self,
        asset: CapitalAsset | UUID,
        fiscal_year: int,
        *,
        company: Company,
    ) -> DepreciationProjection:
        """
        Projection for ``fiscal_year`` as ``company`` counts its years.

        Raises:
            AssetNotFoundError: If the asset is unknown or belongs to
                another company.
        """
        return self._assets.project_depreciation(
            self._owned_asset_id(company, asset), fiscal_year, company.fiscal_year_end,
        )

    def depreciation_schedule(
        self,
        asset: CapitalAsset | UUID,
        from_year: int,
        years: int,
        *,
        company: Company,
    ) -> tuple[DepreciationProjection, ...]:
        return self._assets.depreciation_schedule(
            self._owned_asset_id(company, asset), from_year, years, company.fiscal_year_end,
        )

    def commit_depreciation(
        self,
        asset: CapitalAsset | UUID,
        fiscal_year: int,
        entry_date: date | None = None,
        *,
        company: Company,
    ) -> DepreciationEntry:
        """
        Record ``fiscal_year``'s entry; the half-year rule and the
        before-acquisition check use the company's fiscal year end.
        """
        return self._assets.commit_depreciation(
            self._owned_asset_id(company, asset), fiscal_year, entry_date,
            company.fiscal_year_end,
        )

    def dispose_asset(
        self,
        asset: CapitalAsset | UUID,
        disposal_date: date,
        disposal_amount: Decimal,
    ) -> CapitalAsset:
        return self._assets.dispose(_asset_id(asset), disposal_date, disposal_amount)

    def delete_asset(self, asset: CapitalAsset | UUID) -> None:
        self._assets.delete_asset(_asset_id(asset))

    # =========================================================================
    # Sales tax and annual return
    # =========================================================================

    def _records_with_assets(
        self,
        company: Company,
        period_start: date,
        period_end: date,
        fiscal_year: int | None = None,
    ) -> LedgerRecords:
        records = self._source.records_for(company.id, period_start, period_end)
        store = self._assets.store
        return replace(
            records,
            capital_assets=_merge_by_id(records.capital_assets, store.list_assets(company.id)),
            depreciation_entries=_merge_by_id(
                records.depreciation_entries,
                store.list_company_entries(company.id, fiscal_year),
            ),
        )

    def compute_tax_ledger(
        self,
        company: Company,
        period_start: date,
        period_end: date,
    ) -> TaxLedgerSummary:
        records = self._records_with_assets(company, period_start, period_end)
        return self._tax_ledger.compute(company, period_start, period_end, records)

    def aggregate_tax_return(
        self,
        company: Company,
        fiscal_year: int,
        prior_retained_earnings: Decimal = Decimal("0"),
    ) -> TaxReturn:
        """
        Annual return for ``fiscal_year``, including every depreciation
        entry committed through this engine for that year.

        Raises:
            IncompleteFiscalYearError: If the LedgerSource does not supply
                income and expense sub-ledgers covering the whole year.
        """
        t0 = time.monotonic()
        start, end = fiscal_year_bounds(fiscal_year, company.fiscal_year_end)
        with LogContext.bind(company_id=str(company.id)):
            records = self._records_with_assets(company, start, end, fiscal_year)
            tax_return = self._tax_return.aggregate(
                company, fiscal_year, records, prior_retained_earnings,
            )
            logger.info("tax_return_assembled", extra={
                "fiscal_year": fiscal_year,
                "depreciation_entry_count": len(records.depreciation_entries),
                "duration_ms": round((time.monotonic() - t0) * 1000, 2),
            })
        return tax_return

    def summarize_owner_payments(
        self,
        company: Company,
        period_start: date,
        period_end: date,
    ) -> OwnerPaymentSummary:
        payments = self._source.owner_payments_for(company.id, period_start, period_end)
        return summarize_owner_payments(payments, period_start, period_end, company.id)
