"""Shared fixtures: in-memory database, engine state and API client."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

import app.db.base  # noqa: F401
from app.capacity.cache import LoadScoreCache
from app.capacity.calibration import CalibrationManager
from app.db.session import get_db
from app.main import app


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture()
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture()
def manager():
    return CalibrationManager()


@pytest.fixture()
def cache():
    return LoadScoreCache()


@pytest.fixture()
def client(engine, manager, cache):
    def override_get_db():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.state.calibration_manager = manager
    app.state.load_cache = cache
    # Not used as a context manager: the startup hook would open the real database.
    yield TestClient(app)
    app.dependency_overrides.clear()
