# SalesPro Test Suite - Shared Fixtures
#
# This module provides:
# - A fresh SQLite file per test (under pytest's tmp_path)
# - RecordStore / AppState fixtures wired to that file
# - Fake location providers for the attendance check-in
# - Small builders for domain records

import asyncio
from typing import Optional

import pytest

from salespro.db.database import Database
from salespro.db.record_store import RecordStore
from salespro.errors import GeolocationPermissionDeniedError
from salespro.models.crm_issue import CrmIssue
from salespro.models.sale import Sale
from salespro.services.geofence import Coordinate
from salespro.state import AppState


def run(coro):
    """Drive a coroutine to completion from a sync test."""
    return asyncio.run(coro)


# =============================================================================
# DATABASE
# =============================================================================

@pytest.fixture
def db(tmp_path):
    database = Database(tmp_path / "salespro_test.db")
    database.connect()
    database.initialize_schema()
    yield database
    database.disconnect()


@pytest.fixture
def store(db):
    return RecordStore(db)


@pytest.fixture
def state(store):
    app_state = AppState(store)
    run(app_state.initialize())
    return app_state


@pytest.fixture
def exports_dir(tmp_path):
    path = tmp_path / "exports"
    path.mkdir()
    return path


# =============================================================================
# LOCATION PROVIDERS
# =============================================================================

STORE = Coordinate(12.9716, 77.5946)


class FixedLocator:
    """Reports the same position every call and counts the calls."""

    def __init__(self, coordinate: Coordinate):
        self.coordinate = coordinate
        self.calls = 0

    async def current_position(self) -> Coordinate:
        self.calls += 1
        return self.coordinate


class FailingLocator:
    def __init__(self, exc: Exception):
        self.exc = exc

    async def current_position(self) -> Coordinate:
        raise self.exc


class SlowLocator:
    """Never answers within any reasonable timeout."""

    async def current_position(self) -> Coordinate:
        await asyncio.sleep(10)
        return STORE


@pytest.fixture
def denied_locator():
    return FailingLocator(GeolocationPermissionDeniedError("Location permission denied."))


# =============================================================================
# BUILDERS
# =============================================================================

def make_sale(
    day: str = "2024-06-10",
    product: str = "Bajaj Mixer Grinder Rex 500W",
    quantity: int = 1,
    price: float = 100.0,
    timestamp: Optional[int] = None,
    **extra,
) -> Sale:
    sale = Sale(date=day, product_name=product, quantity=quantity, price=price, **extra)
    if timestamp is not None:
        sale.timestamp = timestamp
    return sale


def make_issue(day: str = "2024-06-10", **extra) -> CrmIssue:
    fields = dict(
        date=day,
        category="Complaint",
        customer_name="Ravi Kumar",
        contact_number="9876543210",
        product="Bajaj Storage Geyser 15L",
        message="Heater not warming",
    )
    fields.update(extra)
    return CrmIssue(**fields)
