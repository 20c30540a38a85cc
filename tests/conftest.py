"""
Pytest fixtures for the books test suite.

Provides:
- SQLite-backed engine and session factory (one database file per test)
- Deterministic clock and actor id
- Sample company, CCA registry and asset services
- Captured structured logs
"""

import json
import logging
from datetime import date
from decimal import Decimal
from io import StringIO
from uuid import UUID, uuid4

import pytest

from books_config import clear_cache, get_cca_registry
from books_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session_factory,
    init_engine_from_url,
    reset_engine,
)
from books_kernel.domain.clock import DeterministicClock
from books_kernel.domain.records import Company
from books_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from books_modules.assets import (
    CapitalAssetService,
    InMemoryDepreciationStore,
    SqlDepreciationStore,
)

# Test actor ID for all test operations
TEST_ACTOR_ID = uuid4()


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture books_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, asset_service):
            asset_service.commit_depreciation(asset.id, 2024)
            logs = captured_logs()
            assert any(r["message"] == "depreciation_committed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("books_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow_locks: thread-race tests that wait on per-asset and database locks"
    )


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def db_engine(tmp_path):
    """File-backed SQLite engine so each thread gets its own connection."""
    engine = init_engine_from_url(f"sqlite:///{tmp_path / 'books.db'}")
    create_tables()
    yield engine
    drop_tables()
    reset_engine()


@pytest.fixture
def session_factory(db_engine):
    return get_session_factory()


# =============================================================================
# Domain fixtures
# =============================================================================


@pytest.fixture
def test_actor_id() -> UUID:
    return TEST_ACTOR_ID


@pytest.fixture
def deterministic_clock():
    return DeterministicClock(date(2024, 12, 31))


@pytest.fixture
def company() -> Company:
    return Company(
        id=uuid4(),
        name="Maple Consulting Ltd.",
        small_business_rate=Decimal("0.15"),
        sales_tax_rate=Decimal("0.13"),
    )


@pytest.fixture
def cca_registry():
    clear_cache()
    yield get_cca_registry()
    clear_cache()


@pytest.fixture
def memory_store():
    return InMemoryDepreciationStore()


@pytest.fixture
def sql_store(session_factory, test_actor_id):
    return SqlDepreciationStore(session_factory, actor_id=test_actor_id)


@pytest.fixture
def asset_service(memory_store, cca_registry, deterministic_clock):
    return CapitalAssetService(memory_store, cca_registry, clock=deterministic_clock)


@pytest.fixture
def sql_asset_service(sql_store, cca_registry, deterministic_clock):
    return CapitalAssetService(sql_store, cca_registry, clock=deterministic_clock)
