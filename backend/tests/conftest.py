"""Shared fixtures: fake clock, in-memory database, authenticated clients."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from rpgvault.auth.models import UserRole
from rpgvault.auth.utils import create_token
from rpgvault.deps import get_db
from rpgvault.locks.manager import LockManager
from rpgvault.locks.store import LockStore
from rpgvault.main import create_app
from rpgvault.shared.config import Settings
from rpgvault.shared.db import Base

START = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced clock so lock expiry can be tested without sleeping."""

    def __init__(self, start: datetime = START) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> datetime:
        self.now = self.now + timedelta(**delta)
        return self.now


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def lock_manager(clock: FakeClock) -> LockManager:
    return LockManager(LockStore(), clock=clock)


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(
        STORAGE_DIR=tmp_path / "storage",
        LOCK_SWEEP_INTERVAL_SEC=0,
        JWT_SECRET="test-secret",
        LOG_LEVEL="DEBUG",
    )


@pytest.fixture()
def app(settings: Settings, lock_manager: LockManager) -> Iterator[FastAPI]:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    TestingSession = sessionmaker(bind=engine, autoflush=False, autocommit=False)

    def _get_db() -> Iterator[Session]:
        db = TestingSession()
        try:
            yield db
        finally:
            db.close()

    application = create_app(settings=settings)
    application.state.lock_manager = lock_manager
    application.dependency_overrides[get_db] = _get_db
    yield application
    application.dependency_overrides.clear()
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture()
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest.fixture()
def auth(settings: Settings) -> Callable[..., dict[str, str]]:
    """Return a factory producing ``Authorization`` headers for a user id and role."""

    def _headers(user_id: str, role: UserRole = UserRole.editor) -> dict[str, str]:
        token = create_token(user_id, role, settings=settings)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture()
def make_system(client: TestClient, auth: Callable[..., dict[str, str]]) -> Callable[..., dict]:
    """Create a game system through the API and return its JSON payload."""

    def _factory(name: str = "Dragons & Dice", owner: str = "alice", **extra: object) -> dict:
        response = client.post(
            "/api/game-systems",
            json={"name": name, **extra},
            headers=auth(owner),
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _factory
