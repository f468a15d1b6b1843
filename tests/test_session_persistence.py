"""
Tests for session persistence functionality.
"""
import pytest

from dinner_bot import config
from dinner_bot.dialogs import Activity, DatabaseSessionStore, TurnContext, create_dispatcher
from dinner_bot.models import ChatSession
from dinner_bot.services.session import (
    SESSION_CACHE,
    clear_cache,
    get_cache_stats,
    get_session,
    save_session,
)


ORDERING_STATE = {
    "active_dialog": "orderingDialog",
    "step_index": 1,
    "cart": {"items": ["Potato Salad", "Clam Chowder"], "total": 10.49},
}


class TestSessionPersistence:
    """Test session save and load from database."""

    def test_save_session_creates_new_record(self, db_session):
        """Test that save_session creates a new ChatSession record."""
        session_id = "test-session-123"
        save_session(db_session, session_id, {"dialog_state": ORDERING_STATE, "locale": "en"})

        db_record = db_session.query(ChatSession).filter_by(session_id=session_id).first()
        assert db_record is not None
        assert db_record.dialog_state == ORDERING_STATE
        assert db_record.locale == "en"

    def test_save_session_updates_existing_record(self, db_session):
        """Test that save_session updates an existing ChatSession record."""
        session_id = "test-session-456"
        save_session(db_session, session_id, {"dialog_state": {}, "locale": "en"})
        save_session(db_session, session_id, {"dialog_state": ORDERING_STATE, "locale": "es"})

        records = db_session.query(ChatSession).filter_by(session_id=session_id).all()
        assert len(records) == 1
        assert records[0].dialog_state == ORDERING_STATE
        assert records[0].locale == "es"

    def test_get_session_returns_none_for_unknown(self, db_session):
        assert get_session(db_session, "nonexistent-session") is None

    def test_get_session_loads_from_database(self, db_session):
        """Test that get_session falls back to the database on a cache miss."""
        session_id = "db-session-789"
        db_session.add(ChatSession(session_id=session_id, dialog_state=ORDERING_STATE, locale="en"))
        db_session.commit()
        SESSION_CACHE.clear()

        result = get_session(db_session, session_id)

        assert result == {"dialog_state": ORDERING_STATE, "locale": "en"}
        assert session_id in SESSION_CACHE

    def test_session_survives_cache_clear(self, db_session):
        """Test that session can be recovered after cache is cleared."""
        session_id = "persistent-session-202"
        save_session(db_session, session_id, {"dialog_state": ORDERING_STATE, "locale": "en"})

        # Simulates a server restart
        clear_cache()

        result = get_session(db_session, session_id)
        assert result is not None
        assert result["dialog_state"] == ORDERING_STATE


class TestSessionCache:
    """Test the in-memory cache in front of the database."""

    def test_save_populates_cache(self, db_session):
        save_session(db_session, "cached-1", {"dialog_state": {}, "locale": "en"})
        assert "cached-1" in SESSION_CACHE
        assert SESSION_CACHE["cached-1"]["data"]["locale"] == "en"

    def test_cache_hit_skips_database(self, db_session):
        """A cached session is served even if the row has since changed."""
        save_session(db_session, "cached-2", {"dialog_state": ORDERING_STATE, "locale": "en"})

        record = db_session.query(ChatSession).filter_by(session_id="cached-2").first()
        record.locale = "es"
        db_session.commit()

        assert get_session(db_session, "cached-2")["locale"] == "en"

    def test_eviction_when_full(self, db_session, monkeypatch):
        monkeypatch.setattr(config, "SESSION_MAX_CACHE_SIZE", 3)

        for i in range(3):
            save_session(db_session, f"s-{i}", {"dialog_state": {}, "locale": "en"})
        for i in range(3):
            SESSION_CACHE[f"s-{i}"]["last_access"] = 1000.0 + i

        save_session(db_session, "s-new", {"dialog_state": {}, "locale": "en"})

        assert len(SESSION_CACHE) == 3
        assert "s-0" not in SESSION_CACHE
        assert "s-new" in SESSION_CACHE

    def test_evicted_session_restored_from_database(self, db_session, monkeypatch):
        monkeypatch.setattr(config, "SESSION_MAX_CACHE_SIZE", 1)

        save_session(db_session, "first", {"dialog_state": ORDERING_STATE, "locale": "en"})
        save_session(db_session, "second", {"dialog_state": {}, "locale": "en"})
        assert "first" not in SESSION_CACHE

        assert get_session(db_session, "first")["dialog_state"] == ORDERING_STATE

    def test_clear_cache_returns_count(self, db_session):
        save_session(db_session, "a", {"dialog_state": {}})
        save_session(db_session, "b", {"dialog_state": {}})

        assert clear_cache() == 2
        assert SESSION_CACHE == {}

    def test_cache_stats(self, db_session):
        stats = get_cache_stats()
        assert stats["size"] == 0
        assert stats["oldest_access"] is None
        assert stats["max_size"] == config.SESSION_MAX_CACHE_SIZE

        save_session(db_session, "a", {"dialog_state": {}})
        save_session(db_session, "b", {"dialog_state": {}})

        stats = get_cache_stats()
        assert stats["size"] == 2
        assert stats["oldest_access"] <= stats["newest_access"]


class TestDatabaseSessionStore:
    """Test the dialog store backed by the chat_sessions table."""

    def test_load_unknown_session(self, db_session):
        assert DatabaseSessionStore(db_session).load("missing") is None

    def test_round_trip_records_locale(self, db_session):
        store = DatabaseSessionStore(db_session, locale="es")
        store.save("store-1", ORDERING_STATE)

        assert store.load("store-1") == ORDERING_STATE
        record = db_session.query(ChatSession).filter_by(session_id="store-1").first()
        assert record.locale == "es"

    def test_load_returns_independent_copy(self, db_session):
        store = DatabaseSessionStore(db_session)
        store.save("store-2", ORDERING_STATE)

        loaded = store.load("store-2")
        loaded["cart"]["items"].append("Tuna Sandwich")

        assert store.load("store-2") == ORDERING_STATE

    def test_order_resumes_after_restart(self, db_session, english_menu):
        """An open order continues from the database once the cache is gone."""
        def turn(text):
            dispatcher = create_dispatcher(DatabaseSessionStore(db_session), english_menu)
            ctx = TurnContext(Activity(text=text, session_id="restart-1"))
            return dispatcher.handle_turn(ctx), ctx

        turn("hi")
        turn("Tuna Sandwich - $6.89")
        clear_cache()

        _, ctx = turn("Process order")

        assert ctx.replies[-1].text == "Your order came to $6.89"

    def test_commit_failure_leaves_cache_untouched(self, db_session, monkeypatch):
        save_session(db_session, "fail-1", {"dialog_state": {}, "locale": "en"})

        def failing_commit():
            raise RuntimeError("database unavailable")

        monkeypatch.setattr(db_session, "commit", failing_commit)

        with pytest.raises(RuntimeError):
            DatabaseSessionStore(db_session).save("fail-1", ORDERING_STATE)

        assert SESSION_CACHE["fail-1"]["data"]["dialog_state"] == {}
