import os

# Must be set before dinner_bot.config / dinner_bot.db are imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["MENU_LOCALE"] = "en"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import dinner_bot.db as db
from dinner_bot.dialogs import Activity, ActivityType, MemorySessionStore, TurnContext, create_dispatcher
from dinner_bot.main import app
from dinner_bot.menu import ENGLISH_MENU, SPANISH_MENU
from dinner_bot.models import Base
from dinner_bot.routes.chat import limiter
from dinner_bot.services.session import SESSION_CACHE


@pytest.fixture
def db_session():
    """Create an in-memory SQLite database for testing."""
    SESSION_CACHE.clear()

    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    session = SessionLocal()
    yield session
    session.close()

    SESSION_CACHE.clear()


@pytest.fixture
def client():
    """Shared FastAPI TestClient using an in-memory SQLite DB.

    Uses StaticPool so all connections share the same in-memory database.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    def override_get_db():
        db_sess = TestingSessionLocal()
        try:
            yield db_sess
        finally:
            db_sess.close()

    app.dependency_overrides[db.get_db] = override_get_db
    limiter.enabled = False

    SESSION_CACHE.clear()

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    SESSION_CACHE.clear()


@pytest.fixture
def english_menu():
    return ENGLISH_MENU


@pytest.fixture
def spanish_menu():
    return SPANISH_MENU


@pytest.fixture
def memory_store():
    return MemorySessionStore()


@pytest.fixture
def dispatcher(memory_store, english_menu):
    """Dispatcher over the English menu with an in-memory store."""
    return create_dispatcher(memory_store, english_menu, echo_non_message=False)


@pytest.fixture
def send(dispatcher):
    """Run one message turn for a session; returns (turn_result, ctx)."""

    def _send(text, session_id="session-1", activity_type=ActivityType.MESSAGE):
        ctx = TurnContext(Activity(type=activity_type, text=text, session_id=session_id))
        result = dispatcher.handle_turn(ctx)
        return result, ctx

    return _send
