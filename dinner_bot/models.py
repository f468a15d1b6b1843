from sqlalchemy import (
    Column,
    Integer,
    String,
    JSON,
    DateTime,
    func,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class ChatSession(Base):
    """
    Persists per-conversation dialog state so it survives server restarts.

    One row per session. Rows are created on the first turn, rewritten on
    every turn, and never deleted by the bot itself.
    """
    __tablename__ = "chat_sessions"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(String, unique=True, nullable=False, index=True)  # UUID string

    # Serialized DialogState: active dialog, suspended step, carried cart
    dialog_state = Column(JSON, nullable=False, default=dict)

    # Menu locale the session was served with
    locale = Column(String, nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
