"""
Tests for DepreciationEngine.

Covers:
- Half-year rule in the acquisition fiscal year
- Declining balance in later years
- Book value floor at zero
- Duplicate, out-of-order, pre-acquisition and disposed refusals
- Non-calendar fiscal years
- Multi-year schedule forecasts
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from books_engines.depreciation import DepreciationEngine, apply_projection
from books_kernel.exceptions import (
    AssetDisposedError,
    DepreciationYearOutOfOrderError,
    DuplicateDepreciationYearError,
    FiscalYearBeforeAcquisitionError,
    UnknownCCAClassError,
)
from tests.builders import make_asset, make_depreciation

COMPANY_ID = uuid4()
JUNE_30 = date(2000, 6, 30)


@pytest.fixture
def engine(cca_registry):
    return DepreciationEngine(cca_registry)


class TestProjection:
    """Tests for project()."""

    def test_half_year_in_acquisition_year(self, engine):
        asset = make_asset(COMPANY_ID, date(2024, 3, 1), "10000.00", cca_class="8")

        projection = engine.project(asset, 2024)

        assert projection.is_half_year is True
        assert projection.rate == Decimal("0.20")
        assert projection.amount == Decimal("1000.00")
        assert projection.projected_book_value == Decimal("9000.00")

    def test_full_rate_in_following_year(self, engine):
        asset = make_asset(COMPANY_ID, date(2024, 3, 1), "10000.00", cca_class="8")
        first = engine.project(asset, 2024)
        history = [engine.build_entry(first, COMPANY_ID, date(2024, 12, 31))]

        second = engine.project(apply_projection(asset, first), 2025, history)

        assert second.is_half_year is False
        assert second.opening_book_value == Decimal("9000.00")
        assert second.amount == Decimal("1800.00")
        assert second.projected_book_value == Decimal("7200.00")

    def test_purchase_cost_includes_tax(self, engine):
        asset = make_asset(COMPANY_ID, date(2024, 1, 15), "2000.00", tax="260.00", cca_class="50")

        projection = engine.project(asset, 2024)

        # 2260.00 * 0.55 * 0.5 = 621.50
        assert projection.amount == Decimal("621.50")

    def test_full_write_off_class_never_exceeds_book_value(self, engine):
        asset = make_asset(
            COMPANY_ID, date(2023, 6, 1), "1000.00", cca_class="12",
            accumulated_depreciation=Decimal("500.00"),
        )
        history = [make_depreciation(asset, 2023, "500.00", is_half_year=True)]

        projection = engine.project(asset, 2024, history)

        assert projection.amount == Decimal("500.00")
        assert projection.projected_book_value == Decimal("0.00")

    def test_zero_book_value_yields_zero(self, engine):
        asset = make_asset(
            COMPANY_ID, date(2022, 6, 1), "1000.00", cca_class="12",
            accumulated_depreciation=Decimal("1000.00"),
        )

        projection = engine.project(asset, 2024)

        assert projection.amount == Decimal("0")
        assert projection.projected_book_value == Decimal("0")

    def test_amount_rounded_half_even(self, engine):
        # 0.05 * 0.20 * 0.5 = 0.005 -> 0.00
        asset = make_asset(COMPANY_ID, date(2024, 2, 1), "0.05", cca_class="8")

        projection = engine.project(asset, 2024)

        assert projection.amount == Decimal("0.00")

    def test_projection_is_read_only(self, engine):
        asset = make_asset(COMPANY_ID, date(2024, 3, 1), "10000.00")

        engine.project(asset, 2024)
        engine.project(asset, 2024)

        assert asset.book_value == Decimal("10000.00")
        assert asset.accumulated_depreciation == Decimal("0")


class TestProjectionRefusals:
    """Conditions under which no projection is produced."""

    def test_duplicate_year(self, engine):
        asset = make_asset(COMPANY_ID, date(2024, 3, 1), "10000.00")
        history = [make_depreciation(asset, 2024, "1000.00", is_half_year=True)]

        with pytest.raises(DuplicateDepreciationYearError) as exc_info:
            engine.project(asset, 2024, history)

        assert exc_info.value.asset_id == asset.id
        assert exc_info.value.fiscal_year == 2024

    def test_disposed_asset(self, engine):
        asset = make_asset(
            COMPANY_ID, date(2024, 3, 1), "10000.00",
            disposal_date=date(2024, 11, 1), disposal_amount=Decimal("8000.00"),
        )

        with pytest.raises(AssetDisposedError):
            engine.project(asset, 2024)

    def test_duplicate_reported_before_disposal(self, engine):
        asset = make_asset(
            COMPANY_ID, date(2024, 3, 1), "10000.00",
            disposal_date=date(2025, 1, 10), disposal_amount=Decimal("8000.00"),
        )
        history = [make_depreciation(asset, 2024, "1000.00", is_half_year=True)]

        with pytest.raises(DuplicateDepreciationYearError):
            engine.project(asset, 2024, history)

    def test_year_before_acquisition(self, engine):
        asset = make_asset(COMPANY_ID, date(2024, 3, 1), "10000.00")

        with pytest.raises(FiscalYearBeforeAcquisitionError) as exc_info:
            engine.project(asset, 2023)

        assert exc_info.value.acquisition_year == 2024

    def test_year_before_latest_recorded(self, engine):
        asset = make_asset(COMPANY_ID, date(2022, 3, 1), "10000.00")
        history = [make_depreciation(asset, 2024, "100.00")]

        with pytest.raises(DepreciationYearOutOfOrderError) as exc_info:
            engine.project(asset, 2023, history)

        assert exc_info.value.latest_year == 2024

    def test_unknown_class(self, engine):
        asset = make_asset(COMPANY_ID, date(2024, 3, 1), "10000.00", cca_class="13")

        with pytest.raises(UnknownCCAClassError):
            engine.project(asset, 2024)


class TestNonCalendarFiscalYear:
    """Fiscal year ending June 30; fiscal 2025 runs 2024-07-01 to 2025-06-30."""

    def test_autumn_purchase_is_half_year_in_next_label(self, engine):
        asset = make_asset(COMPANY_ID, date(2024, 9, 15), "10000.00")

        projection = engine.project(asset, 2025, fiscal_year_end=JUNE_30)

        assert projection.is_half_year is True
        assert projection.amount == Decimal("1000.00")

    def test_calendar_label_is_before_acquisition(self, engine):
        asset = make_asset(COMPANY_ID, date(2024, 9, 15), "10000.00")

        with pytest.raises(FiscalYearBeforeAcquisitionError):
            engine.project(asset, 2024, fiscal_year_end=JUNE_30)

    def test_year_end_day_belongs_to_that_year(self, engine):
        asset = make_asset(COMPANY_ID, date(2024, 6, 30), "10000.00")

        projection = engine.project(asset, 2024, fiscal_year_end=JUNE_30)

        assert projection.is_half_year is True


class TestSchedule:
    """Multi-year forecast."""

    def test_declining_balance_schedule(self, engine):
        asset = make_asset(COMPANY_ID, date(2024, 3, 1), "10000.00", cca_class="8")

        schedule = engine.schedule(asset, 2024, 3)

        assert [p.amount for p in schedule] == [
            Decimal("1000.00"), Decimal("1800.00"), Decimal("1440.00"),
        ]
        assert schedule[-1].projected_book_value == Decimal("5760.00")
        assert [p.is_half_year for p in schedule] == [True, False, False]

    def test_schedule_stops_at_zero_book_value(self, engine):
        asset = make_asset(COMPANY_ID, date(2024, 3, 1), "1000.00", cca_class="12")

        schedule = engine.schedule(asset, 2024, 10)

        assert len(schedule) == 2
        assert schedule[-1].projected_book_value == Decimal("0.00")

    def test_schedule_continues_after_history(self, engine):
        asset = make_asset(
            COMPANY_ID, date(2024, 3, 1), "10000.00",
            accumulated_depreciation=Decimal("1000.00"),
        )
        history = [make_depreciation(asset, 2024, "1000.00", is_half_year=True)]

        schedule = engine.schedule(asset, 2025, 2, history)

        assert [p.amount for p in schedule] == [Decimal("1800.00"), Decimal("1440.00")]

    def test_simulated_entries_dated_at_fiscal_year_end(self, engine, monkeypatch):
        asset = make_asset(COMPANY_ID, date(2024, 9, 1), "10000.00", cca_class="8")
        entry_dates = []
        build_entry = engine.build_entry

        def recording_build_entry(projection, company_id, entry_date, entry_id=None):
            entry_dates.append(entry_date)
            return build_entry(projection, company_id, entry_date, entry_id)

        monkeypatch.setattr(engine, "build_entry", recording_build_entry)

        schedule = engine.schedule(asset, 2025, 2, fiscal_year_end=JUNE_30)

        assert [p.is_half_year for p in schedule] == [True, False]
        assert entry_dates == [date(2025, 6, 30), date(2026, 6, 30)]

    def test_zero_years(self, engine):
        asset = make_asset(COMPANY_ID, date(2024, 3, 1), "10000.00")

        assert engine.schedule(asset, 2024, 0) == ()

    def test_negative_years_rejected(self, engine):
        asset = make_asset(COMPANY_ID, date(2024, 3, 1), "10000.00")

        with pytest.raises(ValueError):
            engine.schedule(asset, 2024, -1)


class TestBuildEntry:

    def test_entry_mirrors_projection(self, engine):
        asset = make_asset(COMPANY_ID, date(2024, 3, 1), "10000.00")
        projection = engine.project(asset, 2024)

        entry = engine.build_entry(projection, COMPANY_ID, date(2024, 12, 31))

        assert entry.asset_id == asset.id
        assert entry.company_id == COMPANY_ID
        assert entry.fiscal_year == 2024
        assert entry.amount == projection.amount
        assert entry.is_half_year is True
