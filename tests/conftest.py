import sys, os, pathlib

ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from datetime import date

import pytest

from vehicle_booking.models.store import MEMORY, Store
from vehicle_booking.services.catalog_service import CatalogGateway

# Fixed "today" for every test that needs the past-date rule to be stable
TODAY = date(2025, 1, 1)


@pytest.fixture(autouse=True)
def test_env(monkeypatch):
    """Keep the store from registering an at-exit save during tests."""
    monkeypatch.setenv("APP_ENV", "test")
    yield


@pytest.fixture
def store(monkeypatch):
    """
    A clean in-memory store installed as the Store singleton, so services
    that fall back to _store() and the Flask app see the SAME object.
    """
    st = Store(MEMORY)
    monkeypatch.setattr(Store, "_inst", st)
    yield st


@pytest.fixture
def seeded_store(store):
    """
    Default catalog: types 1 Hatchback(4), 2 SUV(4), 3 Sedan(4), 4 Cruiser(2);
    vehicles 1-3 hatchbacks, 4-6 SUVs, 7-9 sedans (7 = Honda City, 2000/day),
    10-12 cruisers.
    """
    CatalogGateway.seed_defaults(store)
    return store


@pytest.fixture
def frozen_today(monkeypatch):
    """Pin the business date to TODAY in every module that reads it."""
    from vehicle_booking.services import booking_service, common, wizard_service

    monkeypatch.setattr(common, "_today", lambda: TODAY)
    monkeypatch.setattr(booking_service, "_today", lambda: TODAY)
    monkeypatch.setattr(wizard_service, "_today", lambda: TODAY)
    return TODAY


@pytest.fixture
def client(seeded_store, frozen_today):
    """Flask test client bound to the seeded in-memory store."""
    from vehicle_booking import create_app

    app = create_app({"TESTING": True, "SECRET_KEY": "test", "DATA_PATH": MEMORY})
    with app.test_client() as c:
        yield c
