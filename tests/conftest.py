"""
Talent Back-Office Test Configuration

Shared fixtures for all tests.
"""
import sys
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from common.config import ServiceConfig
from modules.talent.models import Base


# =============================================================================
# FIXTURES: Database
# =============================================================================

@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session(engine):
    with Session(engine, expire_on_commit=False) as s:
        yield s


@pytest.fixture
def config() -> ServiceConfig:
    """Defaults only: no YAML, no environment."""
    return ServiceConfig()


# =============================================================================
# FIXTURES: API
# =============================================================================

@pytest.fixture
def api_env(monkeypatch):
    """Point the app at a fresh in-memory database and a known JWT secret."""
    import common.config as config_mod
    import modules.talent.database as db_mod

    monkeypatch.setenv("DATABASE_URL", "sqlite://")
    monkeypatch.setenv("JWT_SECRET_KEY", "test-secret")
    monkeypatch.setenv("CONFIG_PATH", "/nonexistent/talent-sync.yml")
    config_mod._config = None
    db_mod.close_db()
    yield
    db_mod.close_db()
    config_mod._config = None


@pytest.fixture
def client(api_env):
    from fastapi.testclient import TestClient
    from portal.main import app

    with TestClient(app) as c:
        yield c
