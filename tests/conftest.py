# tests/conftest.py
import os
from contextlib import contextmanager
from datetime import date
from typing import Generator

# Point both stores at SQLite before the app settings are loaded
os.environ.setdefault("ASSET_DATABASE_URL", "sqlite://")
os.environ.setdefault("MAINTENANCE_DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from shared.core.auth import validate_current_token
from shared.core.database import AssetBase, Base, get_asset_db, get_maintenance_db
from shared.core.schemas import UserToken
from bme_service.app.models.assets import Asset
from bme_service.app.models import maintenance  # noqa: F401


def _memory_engine():
    return create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


@pytest.fixture
def asset_engine():
    """Fresh in-memory asset store per test."""
    engine = _memory_engine()
    AssetBase.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def maintenance_engine():
    """Fresh in-memory maintenance store per test."""
    engine = _memory_engine()
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def asset_db(asset_engine) -> Generator[Session, None, None]:
    session = sessionmaker(autocommit=False, autoflush=False,
                           bind=asset_engine)()
    yield session
    session.close()


@pytest.fixture
def maintenance_db(maintenance_engine) -> Generator[Session, None, None]:
    session = sessionmaker(autocommit=False, autoflush=False,
                           bind=maintenance_engine)()
    yield session
    session.close()


@pytest.fixture
def make_asset(asset_db: Session):
    """Insert an asset row directly, bypassing the crud layer."""
    counter = {"n": 0}

    def _make(**overrides) -> Asset:
        counter["n"] += 1
        data = {
            "tag": f"AST-TEST-{counter['n']:03d}",
            "name": f"Ventilator {counter['n']}",
            "model": "V500",
            "manufacturer": "Draeger",
            "department": "ICU",
            "location": "Bed 1",
            "status": "Active",
            "lifecycle_state": "Active",
            "purchase_date": date(2022, 1, 1),
            "value": 10000,
            "total_service_cost": 0,
            "total_downtime_hours": 0,
        }
        data.update(overrides)
        asset = Asset(**data)
        asset_db.add(asset)
        asset_db.commit()
        asset_db.refresh(asset)
        return asset

    return _make


@pytest.fixture
def count_queries():
    """Count SQL statements sent through an engine inside the with-block."""

    @contextmanager
    def _count(engine):
        statements = []

        def _before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
            statements.append(statement)

        event.listen(engine, "before_cursor_execute", _before_cursor_execute)
        try:
            yield statements
        finally:
            event.remove(engine, "before_cursor_execute",
                         _before_cursor_execute)

    return _count


def _client(asset_db: Session, maintenance_db: Session, user: UserToken) -> TestClient:
    from bme_service.app.main import app

    def _override_asset_db():
        yield asset_db

    def _override_maintenance_db():
        yield maintenance_db

    app.dependency_overrides[get_asset_db] = _override_asset_db
    app.dependency_overrides[get_maintenance_db] = _override_maintenance_db
    app.dependency_overrides[validate_current_token] = lambda: user
    return TestClient(app)


@pytest.fixture
def client(asset_db, maintenance_db):
    """Test client authenticated as a full-access user."""
    test_client = _client(asset_db, maintenance_db, UserToken(
        user_id="admin-1", name="Admin", role="full_access"))
    yield test_client
    test_client.app.dependency_overrides.clear()


@pytest.fixture
def normal_client(asset_db, maintenance_db):
    """Test client authenticated as a normal user."""
    test_client = _client(asset_db, maintenance_db, UserToken(
        user_id="tech-1", name="Technician", role="normal"))
    yield test_client
    test_client.app.dependency_overrides.clear()
