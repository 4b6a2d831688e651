"""
Pytest configuration and shared fixtures.

Service tests run against an in-memory SQLite database (StaticPool, one shared
connection); API tests use FastAPI's TestClient with get_db and the auth
dependency overridden, so no Postgres or Supabase is needed.
"""
import os

# studio.db.session builds its engine at import time; never point tests at a real database
os.environ["DATABASE_URL"] = "sqlite://"

from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from studio.db.base import Base
from studio.db.session import get_db
from studio.dependencies.auth import get_current_profile_id
from studio.main import app
from studio.models import Profile, PromoCode

TEST_PROFILE_ID = "11111111-1111-1111-1111-111111111111"
OTHER_PROFILE_ID = "22222222-2222-2222-2222-222222222222"


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Keep the developer's .env from leaking collaborator URLs and keys into tests."""
    for name in (
        "GENERATION_FUNCTION_URL",
        "GENERATION_FUNCTION_KEY",
        "SUPABASE_URL",
        "SUPABASE_ANON_KEY",
        "SUPABASE_JWT_SECRET",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_profile(db):
    def _make(profile_id=TEST_PROFILE_ID, tokens=5, email=None, last_daily_token_claim=None, **kwargs):
        profile = Profile(
            id=profile_id,
            email=email or f"{profile_id[:8]}@example.com",
            full_name="Test User",
            tokens=tokens,
            last_daily_token_claim=last_daily_token_claim,
            **kwargs
        )
        db.add(profile)
        db.commit()
        return profile
    return _make


@pytest.fixture
def make_promo(db):
    def _make(code="WELCOME5", tokens=5, max_uses=1, current_uses=0, expires_at=None, active=True):
        promo = PromoCode(
            code=code,
            tokens=tokens,
            max_uses=max_uses,
            current_uses=current_uses,
            expires_at=expires_at,
            active=active,
        )
        db.add(promo)
        db.commit()
        return promo
    return _make


@pytest.fixture
def balance_of(db):
    def _balance(profile_id=TEST_PROFILE_ID) -> int:
        db.expire_all()
        return db.query(Profile.tokens).filter(Profile.id == profile_id).scalar()
    return _balance


@pytest.fixture
def now():
    return datetime(2026, 3, 14, 23, 0, 0)


@pytest.fixture
def client(session_factory):
    """TestClient for the app with the database swapped and the caller signed in as TEST_PROFILE_ID."""
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_profile_id] = lambda: TEST_PROFILE_ID
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
