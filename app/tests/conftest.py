"""
Pytest configuration and fixtures
"""
import os

# Settings require DATABASE_URL at import time
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlalchemy.engine import Engine
from app.main import app
from app.db.base import Base
from app.db.init_db import seed_default_positions
from app.core.deps import get_db

# Import all models to ensure they're registered with Base.metadata
from app.models import (
    Account,
    Department,
    Employee,
    Position,
    Request,
    Workflow,
)  # noqa


# Use in-memory SQLite for testing
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

# Enable foreign keys for SQLite
@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db():
    """Create a fresh database for each test"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db):
    """Test client fixture with database override"""
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def positions(db):
    """Default position catalogue (President, Manager, Developer, Staff)"""
    seed_default_positions(db)
    return {p.name: p for p in db.query(Position).all()}


@pytest.fixture
def make_account(db):
    """Factory for accounts: make_account("ada") -> ada@example.com"""
    def _make(handle: str, first_name: str = None, last_name: str = "Tester") -> Account:
        account = Account(
            email=f"{handle}@example.com",
            first_name=first_name or handle.capitalize(),
            last_name=last_name,
        )
        db.add(account)
        db.commit()
        db.refresh(account)
        return account
    return _make


@pytest.fixture
def engineering(db):
    dept = Department(name="Engineering", description="Builds things")
    db.add(dept)
    db.commit()
    db.refresh(dept)
    return dept


@pytest.fixture
def sales(db):
    dept = Department(name="Sales")
    db.add(dept)
    db.commit()
    db.refresh(dept)
    return dept
