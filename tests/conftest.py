# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Generator, Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("PASSWORD_HASH_ITERATIONS", "1000")

from lumina_stage.api.v1.dependencies import get_ai_client_dep
from lumina_stage.core.settings import settings
from lumina_stage.db.session import Base
from lumina_stage.db.session import get_db as app_get_session
from lumina_stage.main import app as fastapi_app
from lumina_stage.models import Blog, Comment, User
from lumina_stage.models.user import ROLE_ADMIN
from tests.factories import FakeAIClient, auth_headers, make_blog, make_comment, make_user

TEST_DB_URL = "sqlite://"


@pytest.fixture(scope="session")
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
    connection = engine.connect()
    transaction = connection.begin()
    SessionLocal = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = SessionLocal()
    session.begin_nested()

    @event.listens_for(session, "after_transaction_end")
    def restart_savepoint(sess: Session, trans) -> None:  # pragma: no cover - SQLAlchemy internals
        if trans.nested and not getattr(trans._parent, "nested", False):
            session.begin_nested()

    try:
        yield session
    finally:
        event.remove(session, "after_transaction_end", restart_savepoint)
        session.close()

        if transaction.is_active:
            transaction.rollback()
        connection.close()

        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def fake_ai() -> FakeAIClient:
    return FakeAIClient()


@pytest.fixture(autouse=True)
def override_ai_dependency(app: FastAPI, fake_ai: FakeAIClient) -> Iterator[FakeAIClient]:
    app.dependency_overrides[get_ai_client_dep] = lambda: fake_ai
    try:
        yield fake_ai
    finally:
        app.dependency_overrides.pop(get_ai_client_dep, None)


@pytest.fixture(autouse=True)
def relaxed_limits(monkeypatch: pytest.MonkeyPatch) -> None:
    """Disable cooldowns so tests can act repeatedly; cooldown tests re-enable them."""
    monkeypatch.setattr(settings, "blog_cooldown_seconds", 0)
    monkeypatch.setattr(settings, "comment_cooldown_seconds", 0)
    monkeypatch.setattr(settings, "edit_cooldown_seconds", 0)
    monkeypatch.setattr(settings, "ai_cooldown_seconds", 0)
    monkeypatch.setattr(settings, "moderation_ai_enabled", False)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def test_user(db_session: Session) -> User:
    """Create and return a persisted test user."""
    return make_user(db_session, "Test User")


@pytest.fixture()
def other_user(db_session: Session) -> User:
    """Create and return a second persisted user."""
    return make_user(db_session, "Other User")


@pytest.fixture()
def admin_user(db_session: Session) -> User:
    return make_user(db_session, "Admin User", role=ROLE_ADMIN)


@pytest.fixture()
def auth_token(test_user: User) -> dict[str, str]:
    """Return authorization headers for the primary test user."""
    return auth_headers(test_user)


@pytest.fixture()
def other_auth_token(other_user: User) -> dict[str, str]:
    """Return authorization headers for the secondary test user."""
    return auth_headers(other_user)


@pytest.fixture()
def admin_auth_token(admin_user: User) -> dict[str, str]:
    return auth_headers(admin_user)


@pytest.fixture()
def test_blog(db_session: Session, test_user: User) -> Blog:
    """A published blog written by ``test_user``."""
    return make_blog(db_session, test_user)


@pytest.fixture()
def test_comment(db_session: Session, test_blog: Blog, other_user: User) -> Comment:
    """A top-level comment by ``other_user`` on ``test_blog``."""
    return make_comment(db_session, test_blog, other_user)
