"""
Tests for the AccountingEngine facade.

Covers:
- Construction from the packaged configuration
- Invoice totals through the facade
- Depreciation committed through the facade feeding the tax return
- Sales-tax ledger with assets from the store
- Owner payment statistics from the LedgerSource
- Depreciation years for a company with a June 30 year end
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from books_kernel.domain.records import (
    Client,
    Company,
    InvoiceItem,
    InvoiceStatus,
    LedgerRecords,
    OwnerPaymentType,
    SubLedger,
)
from books_kernel.exceptions import (
    AssetNotFoundError,
    DuplicateDepreciationYearError,
    FiscalYearBeforeAcquisitionError,
    IncompleteFiscalYearError,
)
from books_modules.assets import InMemoryDepreciationStore
from books_services import AccountingEngine, StaticLedgerSource
from tests.builders import (
    full_year,
    make_dividend,
    make_expense,
    make_income,
    make_invoice,
    make_owner_payment,
)


@pytest.fixture
def source():
    return StaticLedgerSource()


@pytest.fixture
def engine(source, cca_registry, deterministic_clock):
    return AccountingEngine.from_settings(
        source, InMemoryDepreciationStore(), registry=cca_registry, clock=deterministic_clock,
    )


def register_van(engine, company):
    return engine.register_capital_asset(
        company,
        description="Delivery van",
        purchase_date=date(2024, 4, 1),
        purchase_amount=Decimal("20000.00"),
        tax_paid=Decimal("2600.00"),
        cca_class="10",
    )


class TestConstruction:

    def test_uses_configured_currency_and_rounding(self, engine):
        assert engine.settings.currency == "CAD"
        assert engine.settings.rounding == "ROUND_HALF_EVEN"

    def test_lists_cca_classes(self, engine):
        numbers = [c.class_number for c in engine.list_cca_classes()]

        assert "8" in numbers and "50" in numbers
        assert numbers.index("8") < numbers.index("10")


class TestInvoicing:

    def test_compute_invoice_totals(self, engine):
        totals = engine.compute_invoice_totals(
            [InvoiceItem("Consulting", Decimal("40"), Decimal("75.00"))],
            client_exempt=False,
            rate=Decimal("0.13"),
        )

        assert totals.total == Decimal("3390.00")

    def test_invoice_totals_for_exempt_client(self, engine, company):
        client = Client(id=uuid4(), company_id=company.id, name="Band Council", tax_exempt=True)

        totals = engine.invoice_totals_for(
            company, client, [InvoiceItem("Consulting", Decimal("10"), Decimal("100.00"))],
        )

        assert totals.tax == Decimal("0.00")

    def test_next_invoice_number(self, engine):
        assert engine.next_invoice_number(2024, 9) == "2024-0010"


class TestDepreciationThroughFacade:

    def test_project_then_commit(self, engine, company):
        asset = register_van(engine, company)

        projection = engine.project_depreciation(asset, 2024, company=company)
        entry = engine.commit_depreciation(asset, 2024, date(2024, 12, 31), company=company)

        # 22600 * 0.30 * 0.5
        assert projection.amount == entry.amount == Decimal("3390.00")

    def test_accepts_asset_id(self, engine, company):
        asset = register_van(engine, company)

        entry = engine.commit_depreciation(asset.id, 2024, company=company)

        assert entry.asset_id == asset.id

    def test_recommit_refused(self, engine, company):
        asset = register_van(engine, company)
        engine.commit_depreciation(asset, 2024, company=company)

        with pytest.raises(DuplicateDepreciationYearError):
            engine.commit_depreciation(asset, 2024, company=company)

    def test_schedule(self, engine, company):
        asset = register_van(engine, company)

        schedule = engine.depreciation_schedule(asset, 2024, 2, company=company)

        assert [p.amount for p in schedule] == [Decimal("3390.00"), Decimal("5763.00")]

    def test_dispose(self, engine, company):
        asset = register_van(engine, company)

        disposed = engine.dispose_asset(asset, date(2025, 5, 1), Decimal("15000.00"))

        assert disposed.is_disposed


class TestTaxFiguresThroughFacade:

    def test_tax_return_includes_committed_depreciation(self, engine, source, company):
        source.put(company.id, LedgerRecords(
            invoices=(make_invoice(company.id, date(2024, 6, 1), "30000.00", "3900.00", InvoiceStatus.PAID),),
            income=full_year([], 2024),
            expenses=full_year([make_expense(company.id, date(2024, 2, 1), "6610.00", "859.30")], 2024),
            dividends=(make_dividend(company.id, date(2024, 12, 15), "2000.00"),),
        ))
        asset = register_van(engine, company)
        engine.commit_depreciation(asset, 2024, company=company)

        result = engine.aggregate_tax_return(company, 2024, Decimal("1000.00"))

        assert result.gross_income == Decimal("30000.00")
        assert result.depreciation == Decimal("3390.00")
        assert result.total_expenses == Decimal("10000.00")
        assert result.net_income_before_tax == Decimal("20000.00")
        assert result.small_business_tax == Decimal("3000.00")
        assert result.retained_earnings == Decimal("16000.00")
        # asset purchase tax counts as tax paid
        assert result.tax_paid == Decimal("3459.30")
        assert result.tax_remittance == Decimal("440.70")

    def test_tax_return_needs_complete_records(self, engine, company):
        with pytest.raises(IncompleteFiscalYearError):
            engine.aggregate_tax_return(company, 2024)

    def test_tax_ledger_includes_stored_assets(self, engine, source, company):
        source.put(company.id, LedgerRecords(
            income=full_year([make_income(company.id, date(2024, 5, 1), "1000.00", "130.00")], 2024),
        ))
        register_van(engine, company)

        summary = engine.compute_tax_ledger(company, date(2024, 4, 1), date(2024, 6, 30))

        assert summary.tax_collected == Decimal("130.00")
        assert summary.asset_tax == Decimal("2600.00")
        assert summary.remittance == Decimal("-2470.00")

    def test_owner_payments(self, engine, source, company):
        source.add_owner_payments(company.id, [
            make_owner_payment(company.id, date(2024, 1, 10), "250.00"),
            make_owner_payment(company.id, date(2024, 2, 10), "1000.00", OwnerPaymentType.LOAN_REPAYMENT),
            make_owner_payment(company.id, date(2024, 8, 10), "75.00"),
        ])

        summary = engine.summarize_owner_payments(company, date(2024, 1, 1), date(2024, 6, 30))

        assert summary.payment_count == 2
        assert summary.reimbursement_total == Decimal("250.00")
        assert summary.loan_repayment_total == Decimal("1000.00")
        assert summary.total_paid == Decimal("1250.00")


class TestNonCalendarFiscalYear:
    """A company whose fiscal year ends June 30."""

    @pytest.fixture
    def june_company(self):
        return Company(
            id=uuid4(),
            name="Harbour Supply Inc.",
            fiscal_year_end=date(2025, 6, 30),
        )

    @pytest.fixture
    def shelving(self, engine, june_company):
        # bought in the fiscal year ending 2025-06-30
        return engine.register_capital_asset(
            june_company,
            description="Warehouse shelving",
            purchase_date=date(2024, 9, 1),
            purchase_amount=Decimal("10000.00"),
            tax_paid=Decimal("0.00"),
            cca_class="8",
        )

    def test_half_year_in_acquisition_fiscal_year(self, engine, june_company, shelving):
        projection = engine.project_depreciation(shelving, 2025, company=june_company)

        assert projection.is_half_year
        assert projection.amount == Decimal("1000.00")

    def test_year_before_acquisition_refused(self, engine, june_company, shelving):
        with pytest.raises(FiscalYearBeforeAcquisitionError):
            engine.project_depreciation(shelving, 2024, company=june_company)
        with pytest.raises(FiscalYearBeforeAcquisitionError):
            engine.commit_depreciation(shelving, 2024, company=june_company)

    def test_schedule_follows_company_years(self, engine, june_company, shelving):
        schedule = engine.depreciation_schedule(shelving, 2025, 2, company=june_company)

        assert [(p.fiscal_year, p.is_half_year, p.amount) for p in schedule] == [
            (2025, True, Decimal("1000.00")),
            (2026, False, Decimal("1800.00")),
        ]

    def test_committed_entry_lands_in_that_years_return(
        self, engine, source, june_company, shelving,
    ):
        source.put(june_company.id, LedgerRecords(
            income=SubLedger((), date(2024, 7, 1), date(2025, 6, 30)),
            expenses=SubLedger((), date(2024, 7, 1), date(2025, 6, 30)),
        ))

        entry = engine.commit_depreciation(
            shelving, 2025, date(2025, 6, 30), company=june_company,
        )
        result = engine.aggregate_tax_return(june_company, 2025)

        assert entry.is_half_year
        assert result.depreciation == Decimal("1000.00")
        assert result.total_expenses == Decimal("1000.00")
        assert result.small_business_tax == Decimal("0.00")

    def test_asset_of_another_company_refused(self, engine, company, shelving):
        with pytest.raises(AssetNotFoundError):
            engine.commit_depreciation(shelving, 2025, company=company)
