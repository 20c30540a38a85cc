"""
Concurrency tests for depreciation commits.

Many threads race to commit the same (asset, fiscal year).  Exactly one
may succeed; every other attempt must fail with a conflict and the book
value must move exactly once.

Run with: pytest tests/concurrency/test_depreciation_commit_race.py -v
Skip with: pytest -m "not slow_locks"
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import date
from decimal import Decimal
from queue import SimpleQueue
from threading import Barrier

import pytest

from books_kernel.exceptions import ConflictError, DuplicateDepreciationYearError
from tests.builders import make_asset, make_depreciation

pytestmark = pytest.mark.slow_locks

THREADS = 8


def race(worker, threads: int = THREADS) -> list:
    """Start ``threads`` workers at the same instant; collect results or errors."""
    barrier = Barrier(threads)

    def run():
        barrier.wait()
        try:
            return worker()
        except ConflictError as exc:
            return exc

    with ThreadPoolExecutor(max_workers=threads) as pool:
        futures = [pool.submit(run) for _ in range(threads)]
        return [f.result(timeout=60) for f in futures]


def register(service, company_id):
    return service.register_capital_asset(
        company_id=company_id,
        description="Server rack",
        purchase_date=date(2024, 3, 1),
        purchase_amount=Decimal("10000.00"),
        tax_paid=Decimal("0"),
        cca_class="8",
    )


class TestServiceCommitRace:

    def test_in_memory_store(self, asset_service, company):
        asset = register(asset_service, company.id)

        results = race(lambda: asset_service.commit_depreciation(asset.id, 2024))

        successes = [r for r in results if not isinstance(r, Exception)]
        failures = [r for r in results if isinstance(r, Exception)]
        assert len(successes) == 1
        assert all(isinstance(f, DuplicateDepreciationYearError) for f in failures)
        assert asset_service.store.get_asset(asset.id).book_value == Decimal("9000.00")
        assert len(asset_service.store.list_entries(asset.id)) == 1

    def test_sql_store(self, sql_asset_service, company):
        asset = register(sql_asset_service, company.id)

        results = race(lambda: sql_asset_service.commit_depreciation(asset.id, 2024))

        successes = [r for r in results if not isinstance(r, Exception)]
        assert len(successes) == 1
        assert sql_asset_service.store.get_asset(asset.id).book_value == Decimal("9000.00")
        assert len(sql_asset_service.store.list_entries(asset.id)) == 1

    def test_different_assets_all_succeed(self, asset_service, company):
        assets = [register(asset_service, company.id) for _ in range(THREADS)]
        queue = SimpleQueue()
        for asset in assets:
            queue.put(asset)

        def commit_next():
            asset = queue.get_nowait()
            return asset_service.commit_depreciation(asset.id, 2024)

        results = race(commit_next)

        assert all(not isinstance(r, Exception) for r in results)
        assert all(
            asset_service.store.get_asset(a.id).book_value == Decimal("9000.00") for a in assets
        )


class TestStoreRace:
    """Writers bypassing the service lock still cannot double-record a year."""

    def test_sql_store_direct(self, sql_store, company):
        asset = make_asset(company.id, date(2024, 3, 1), "10000.00")
        sql_store.add_asset(asset)

        results = race(lambda: sql_store.record_depreciation(
            make_depreciation(asset, 2024, "1000.00", is_half_year=True),
            expected_accumulated=Decimal("0"),
        ))

        successes = [r for r in results if not isinstance(r, Exception)]
        assert len(successes) == 1
        assert all(isinstance(r, ConflictError) for r in results if isinstance(r, Exception))
        assert sql_store.get_asset(asset.id).accumulated_depreciation == Decimal("1000.00")
        assert len(sql_store.list_entries(asset.id)) == 1

    def test_in_memory_store_direct(self, memory_store, company):
        asset = make_asset(company.id, date(2024, 3, 1), "10000.00")
        memory_store.add_asset(asset)

        results = race(lambda: memory_store.record_depreciation(
            make_depreciation(asset, 2024, "1000.00", is_half_year=True),
            expected_accumulated=Decimal("0"),
        ))

        successes = [r for r in results if not isinstance(r, Exception)]
        assert len(successes) == 1
        assert memory_store.get_asset(asset.id).book_value == Decimal("9000.00")
