# tests/conftest.py
from __future__ import annotations

from collections.abc import Callable, Generator, Iterator
from datetime import UTC, datetime, timedelta
from itertools import count

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from huddle.api.dependencies import get_clock
from huddle.db.session import Base
from huddle.db.session import get_db as app_get_session
from huddle.main import create_app
from huddle.models import User

TEST_DB_URL = "sqlite://"


class ManualClock:
    """Clock that only moves when a test says so."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> datetime:
        self.now = self.now + timedelta(**delta)
        return self.now


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    TestingSession = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def clock() -> ManualClock:
    return ManualClock(datetime(2024, 5, 17, 12, 0, tzinfo=UTC))


@pytest.fixture()
def make_user(db_session: Session, clock: ManualClock) -> Callable[..., User]:
    """Return a factory persisting users; verified unless told otherwise."""
    sequence = count(1)

    def _make(
        name: str | None = None,
        *,
        email: str | None = None,
        verified: bool = True,
        last_seen_at: datetime | None = None,
    ) -> User:
        n = next(sequence)
        user = User(
            name=name or f"User {n}",
            email=email or f"user{n}@example.com",
            password_hash="hashed",
            email_verified_at=clock() if verified else None,
            last_seen_at=last_seen_at,
            created_at=clock(),
        )
        db_session.add(user)
        db_session.commit()
        return user

    return _make


@pytest.fixture()
def alice(make_user: Callable[..., User]) -> User:
    return make_user("Alice", email="alice@example.com")


@pytest.fixture()
def bob(make_user: Callable[..., User]) -> User:
    return make_user("Bob", email="bob@example.com")


@pytest.fixture()
def carol(make_user: Callable[..., User]) -> User:
    return make_user("Carol", email="carol@example.com")


@pytest.fixture()
def app(db_session: Session, clock: ManualClock) -> Iterator[FastAPI]:
    application = create_app()

    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    application.dependency_overrides[app_get_session] = _get_session_override
    application.dependency_overrides[get_clock] = lambda: clock
    try:
        yield application
    finally:
        application.dependency_overrides.clear()


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client
