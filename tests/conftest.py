"""Shared pytest configuration for the wedding budget service."""

from __future__ import annotations

import os
import sys
from collections.abc import Iterable, Iterator
from pathlib import Path

import pytest


def _insert_repo_root() -> None:
    """Make sure the repository root is importable without installation."""

    repo_root = Path(__file__).resolve().parents[1]
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))


_insert_repo_root()
# The database module builds its engine at import time.
os.environ.setdefault("WEDDING_BUDGET_DATABASE_URL", "sqlite://")

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import wedding_budget.models  # noqa: E402,F401  # Ensure models are registered with metadata
from wedding_budget import database  # noqa: E402
from wedding_budget.database import Base  # noqa: E402
from wedding_budget.server import app  # noqa: E402


def pytest_report_header(config: pytest.Config) -> Iterable[str]:  # pragma: no cover - pytest hook
    log_level = os.environ.get("WEDDING_BUDGET_LOG_LEVEL", "INFO")
    return [f"wedding-budget repo: {Path.cwd()}", f"WEDDING_BUDGET_LOG_LEVEL={log_level}"]


@pytest.fixture(autouse=True)
def _set_verbose_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WEDDING_BUDGET_LOG_LEVEL", "INFO")
    monkeypatch.delenv("WEDDING_BUDGET_JSON_LOGS", raising=False)


@pytest.fixture(scope="session")
def engine():
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture()
def db_session(engine) -> Iterator[Session]:
    connection = engine.connect()
    transaction = connection.begin()
    TestingSessionLocal = sessionmaker(bind=connection, autoflush=False, autocommit=False, future=True)
    session: Session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        transaction.rollback()
        connection.close()


@pytest.fixture()
def client(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[database.get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def expense_payload():
    """Build a create-expense JSON body with sensible defaults."""

    def _build(**overrides):
        payload = {
            "category": "Venue",
            "description": "Banquet hall deposit",
            "amount": 1000,
            "vendor": "Grand Palace",
            "paymentStatus": "Pending",
        }
        payload.update(overrides)
        return payload

    return _build
