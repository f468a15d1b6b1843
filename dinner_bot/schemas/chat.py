"""
Chat Schemas for Dinner Bot
===========================

Pydantic models for the chat API endpoints. These schemas validate incoming
turns and structure outgoing replies.

Endpoint Coverage:
------------------
- POST /chat/start: Start a new chat session
- POST /chat/message: Deliver one turn and receive the bot's replies
- GET /chat/{session_id}/cart: Inspect the cart carried by the session
- GET /menu: Describe the menu being served

Key Concepts:
-------------
1. **Sessions**: Each conversation is identified by a session_id (UUID).
   The session stores the suspended dialog and its cart between turns.

2. **Replies**: A turn can produce several replies. A reply that carries
   `choices` is a single-select prompt; the frontend renders it as buttons.

3. **Status**: "waiting" means the order is still open, "complete" means it
   finished this turn (checked out or cancelled).

Validation:
-----------
- Message length is constrained by MAX_MESSAGE_LENGTH (default: 2000 chars).
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from ..config import MAX_MESSAGE_LENGTH
from ..dialogs.context import ActivityType


class ReplyOut(BaseModel):
    """
    One outbound message.

    Attributes:
        text: Message text; may contain newlines
        choices: Present when the message is a choice prompt
    """
    text: str
    choices: Optional[List[str]] = None


class CartOut(BaseModel):
    """
    Cart as reported to the client.

    Attributes:
        items: Selected item descriptions, in selection order
        total: Sum of the selected items' prices
    """
    items: List[str] = Field(default_factory=list)
    total: float = 0.0


class ChatStartResponse(BaseModel):
    """
    Response from starting a new chat session.

    Attributes:
        session_id: UUID for this chat session (use in subsequent requests)
        replies: Anything the bot said when the conversation opened
    """
    session_id: str
    replies: List[ReplyOut] = Field(default_factory=list)


class ChatMessageRequest(BaseModel):
    """
    Request body for delivering one turn.

    Attributes:
        session_id: UUID of the current chat session
        message: Customer's message text (or the selected choice label)
        activity_type: Kind of activity; only "message" advances the order
    """
    session_id: str
    message: Optional[str] = Field(None, max_length=MAX_MESSAGE_LENGTH)
    activity_type: ActivityType = ActivityType.MESSAGE


class ChatMessageResponse(BaseModel):
    """
    Response from delivering one turn.

    Attributes:
        session_id: Echo of the session identifier
        replies: Bot replies for this turn, in order
        status: "empty", "waiting" or "complete"
        cart: Cart carried by the open order, or the finalized cart on checkout
        cancelled: True when the order was cancelled this turn
    """
    session_id: str
    replies: List[ReplyOut]
    status: str
    cart: Optional[CartOut] = None
    cancelled: bool = False


class MenuItemOut(BaseModel):
    label: str
    description: str
    price: float


class MenuOut(BaseModel):
    """
    The menu being served.

    Attributes:
        locale: Locale tag of the menu
        prompt: Text of the menu prompt
        choices: Every selectable label, items first then commands
        items: Priced item entries
    """
    locale: str
    prompt: str
    choices: List[str]
    items: List[MenuItemOut]
