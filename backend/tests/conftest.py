"""Shared fixtures: in-memory SQLite, in-memory experiment logs, seeded assignment."""
import os

# Must be set before splitlab.config is first imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_STORE_BACKEND", "memory")
os.environ.setdefault("EXPERIMENTS_CONFIG_PATH", "does-not-exist.json")
os.environ.setdefault("COOKIE_SECRET", "")

import random

import pytest
from fastapi.testclient import TestClient

from splitlab.dependencies import get_assignment_engine, get_config_store
from splitlab.main import app
from splitlab.middleware.auth import create_user_with_api_key
from splitlab.schemas.experiment import ExperimentDefinition
from splitlab.services.assignment import AssignmentEngine
from splitlab.services.experiment_config import StaticConfigStore
from splitlab.services.log_store import InMemoryLogStore, get_log_store

KPI_TEST = {
    "test_id": "kpi_scorecard_layout",
    "description": "Compact KPI cards vs. detailed scorecard",
    "variants": {"A": "compact_kpi_cards", "B": "detailed_scorecard"},
    "target_event": "kpi_click",
}
ONBOARDING_TEST = {
    "test_id": "guided_onboarding",
    "description": "Self-serve vs. guided onboarding",
    "variants": {"A": "self_serve", "B": "guided_checklist"},
    "target_event": "tooltip_open",
}
PRICING_TEST = {
    "test_id": "pricing_cta_upgrade",
    "description": "Pricing page CTA",
    "variants": {"A": "standard_cta", "B": "value_cta"},
    "target_event": "subscription_upgrade",
}


@pytest.fixture
def experiments():
    """Two dashboard experiments."""
    return [ExperimentDefinition(**KPI_TEST), ExperimentDefinition(**ONBOARDING_TEST)]


@pytest.fixture
def config_store(experiments):
    return StaticConfigStore(experiments)


@pytest.fixture
def log_store():
    return InMemoryLogStore()


@pytest.fixture
def engine():
    """Assignment engine with a fixed seed."""
    return AssignmentEngine(random.Random(20240115))


@pytest.fixture
def db():
    """Create test database session."""
    from splitlab.database import SessionLocal, engine, Base
    import splitlab.models  # noqa: F401

    # Create tables
    Base.metadata.create_all(bind=engine)

    # Create session
    session = SessionLocal()

    yield session

    # Cleanup
    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db, config_store, log_store, engine):
    """TestClient wired to the in-memory stores and seeded engine."""
    app.dependency_overrides[get_config_store] = lambda: config_store
    app.dependency_overrides[get_log_store] = lambda: log_store
    app.dependency_overrides[get_assignment_engine] = lambda: engine

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def api_key(db):
    """A valid results API key."""
    key = "results-test-key"
    create_user_with_api_key(db, key, label="tests")
    return key
