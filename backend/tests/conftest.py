"""Shared fixtures for the land registry test suite."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from landchain.core.database import get_db, init_db
from landchain.main import app
from landchain.services.chain import ChainError, get_chain_client
from landchain.services.transfers import register_land_record


OWNER = "0x" + "a1" * 20
NEW_OWNER = "0x" + "b2" * 20
OTHER_OWNER = "0x" + "c3" * 20
FAKE_TX = "0x" + "ab" * 32


class FakeChainClient:
    """Stand-in for ChainClient: records calls, returns FAKE_TX or raises."""

    def __init__(self, configured: bool = True, fail: bool = False):
        self.configured = configured
        self.fail = fail
        self.calls = []

    @property
    def is_configured(self) -> bool:
        return self.configured

    def submit_transfer(self, token_id, new_owner_address):
        self.calls.append((token_id, new_owner_address))
        if self.fail:
            raise ChainError("execution reverted")
        return FAKE_TX


def record_payload(**overrides) -> dict:
    """Registration fields for the service layer (flat latitude/longitude)."""
    data = {
        "survey_number": "SRV-100",
        "owner_name": "Asha Rao",
        "owner_address": OWNER,
        "owner_phone": "+91 98450 00000",
        "latitude": 12.9716,
        "longitude": 77.5946,
        "area": 1200,
        "value": 3.5,
        "description": "Corner plot",
    }
    data.update(overrides)
    return data


def api_payload(**overrides) -> dict:
    """Registration body for POST /land-records/ (nested location)."""
    data = record_payload(**overrides)
    data["location"] = {"latitude": data.pop("latitude"), "longitude": data.pop("longitude")}
    return data


# ═══════════════════════════════════════════════════
# Database
# ═══════════════════════════════════════════════════

@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def registered(db):
    """A freshly registered (Pending) record."""
    return register_land_record(db, record_payload())


# ═══════════════════════════════════════════════════
# API client
# ═══════════════════════════════════════════════════

@pytest.fixture
def fake_chain():
    return FakeChainClient(configured=False)


@pytest.fixture
def client(session_factory, fake_chain):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_chain_client] = lambda: fake_chain
    yield TestClient(app)
    app.dependency_overrides.clear()
