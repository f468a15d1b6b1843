"""
Turn context: the inbound activity for one turn plus the replies produced.

The transport builds an Activity, wraps it in a TurnContext, hands it to the
dispatcher, and delivers ctx.replies once the turn is done. A transport that
pushes replies as they are produced can pass an `on_send` callback instead;
any exception it raises propagates out of the turn.
"""

from enum import Enum
from typing import Callable, Optional

from pydantic import BaseModel, Field


class ActivityType(str, Enum):
    """Kinds of inbound activity a channel can deliver."""

    MESSAGE = "message"
    CONVERSATION_UPDATE = "conversationUpdate"
    TYPING = "typing"
    EVENT = "event"
    END_OF_CONVERSATION = "endOfConversation"


class Activity(BaseModel):
    """One inbound turn from the channel."""

    type: ActivityType = ActivityType.MESSAGE
    text: Optional[str] = None
    session_id: str


class Reply(BaseModel):
    """One outbound message. `choices` is set when the message is a choice prompt."""

    text: str
    choices: Optional[list[str]] = None


class TurnContext:
    """
    Per-turn context shared by the dispatcher and the dialogs.

    Attributes:
        activity: The inbound activity being processed
        replies: Outbound messages produced so far, in order
    """

    def __init__(self, activity: Activity, on_send: Optional[Callable[[Reply], None]] = None):
        self.activity = activity
        self.replies: list[Reply] = []
        self._on_send = on_send

    @property
    def session_id(self) -> str:
        return self.activity.session_id

    @property
    def responded(self) -> bool:
        """True once at least one reply has been sent this turn."""
        return bool(self.replies)

    def send(self, text: str, choices: Optional[list[str]] = None) -> Reply:
        reply = Reply(text=text, choices=list(choices) if choices is not None else None)
        if self._on_send is not None:
            self._on_send(reply)
        self.replies.append(reply)
        return reply
