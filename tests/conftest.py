"""
Shared test fixtures: SQLite database, test client, sample variables.
"""

import os
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Settings are read at import time, so the environment must be set first
os.environ["DATABASE_URL"] = "sqlite:///./test_cabinets.db"
os.environ["SEED_ON_STARTUP"] = "false"

from cabinet_formulas.config import settings
from cabinet_formulas.database import Base, get_db
from cabinet_formulas.main import app

engine = create_engine(settings.DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def cabinet_tables():
    """Fresh cabinet tables for every test."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="session", autouse=True)
def remove_test_database():
    yield
    engine.dispose()
    path = engine.url.database
    if path and os.path.exists(path):
        os.remove(path)


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def db():
    """Session for arranging rows and checking what the API committed."""
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def project_variables():
    """Variables for a 24" x 30" x 12" base cabinet in 3/4" stock."""
    return {
        "W": 24.0,
        "H": 30.0,
        "D": 12.0,
        "T": 0.75,
        "T_door": 0.75,
        "T_back": 0.25,
        "H_drawer": 6.0,
        "D_drawer": 11.0,
        "T_bottom": 0.25,
    }
