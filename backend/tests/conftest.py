"""
Pytest configuration and shared fixtures for backend tests.

WHAT: Centralized test configuration with markers and shared sessions
WHY: Enable test organization, filtering, and shared test utilities
HOW: Point the database at a temp file before imports, define markers and fixtures
"""

import os
import tempfile
from datetime import date
from pathlib import Path

import pytest

# Settings are read at import time; isolate the database and log file first
_TEST_DIR = Path(tempfile.mkdtemp(prefix="safetrade-tests-"))
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_TEST_DIR / 'test.db'}")
os.environ.setdefault("LOG_FILE", str(_TEST_DIR / "app.log"))

from safetrade.core.database import reset_db  # noqa: E402
from safetrade.models.agreement import NegotiationSession, SafeZone  # noqa: E402


# Fixed "today" for date guards
TODAY = date(2024, 6, 10)
TOMORROW = date(2024, 6, 11)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "wizard: Meeting agreement state machine and driver tests"
    )
    config.addinivalue_line(
        "markers", "bilateral: Tests for the two-party (safe zone) agreement flow"
    )
    config.addinivalue_line(
        "markers", "service: Collaborator service tests (database, endpoints, SSE)"
    )
    config.addinivalue_line(
        "markers", "unit: Unit tests (isolated component tests)"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests (multiple components)"
    )
    config.addinivalue_line(
        "markers", "slow: Tests that take significant time to run"
    )


@pytest.fixture
def clean_db():
    """
    Fresh schema for each database test.

    WHAT: Drop and recreate all tables
    WHY: Deal agreements are keyed by conversation id; tests must not collide
    HOW: reset_db() before each test
    """
    reset_db()
    yield


@pytest.fixture
def buyer_session():
    """Unilateral session seen by the buyer; listing price 10000."""
    return NegotiationSession(
        listing_id="listing-1",
        conversation_id="conv-1",
        listing_title="2019 Honda CBR650R",
        original_price=10000,
        listing_city="Newark",
        listing_zip_code="07102",
        is_seller_view=False,
    )


@pytest.fixture
def seller_session(buyer_session):
    """Same listing seen by the seller."""
    return buyer_session.model_copy(update={"is_seller_view": True})


def make_bilateral_session(current_user_id: str = "buyer-1", conversation_id: str = "conv-1") -> NegotiationSession:
    """Two-party session for either side of the same deal."""
    return NegotiationSession(
        listing_id="listing-1",
        conversation_id=conversation_id,
        listing_title="2019 Honda CBR650R",
        original_price=10000,
        listing_city="Newark",
        listing_zip_code="07102",
        is_seller_view=current_user_id == "seller-1",
        bilateral=True,
        buyer_id="buyer-1",
        seller_id="seller-1",
        current_user_id=current_user_id,
    )


@pytest.fixture
def catalog_zones():
    """Two safe zones as the catalog would return them."""
    return [
        SafeZone(
            id="zone-police",
            name="Newark Police Department - Central Division",
            address="26 Green St, Newark, NJ 07102",
            city="Newark",
            zip_code="07102",
            type="police_station",
        ),
        SafeZone(
            id="zone-mall",
            name="Target - Brick City Plaza",
            address="80 Bergen St, Newark, NJ 07103",
            city="Newark",
            zip_code="07103",
            type="mall",
        ),
    ]
