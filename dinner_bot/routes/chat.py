"""
Chat Routes for Dinner Bot
==========================

Customer-facing endpoints for the ordering conversation. The HTTP layer is
only a transport: it turns each request into an Activity, runs it through
the TurnDispatcher, and returns the replies the turn produced.

Endpoints:
----------
- POST /chat/start: Start a new chat session
- POST /chat/message: Deliver one turn (message or other activity)
- GET /chat/{session_id}/cart: Cart carried by an open order
- GET /menu: The menu being served

Conversation Flow:
------------------
1. Client calls /chat/start to get a session_id. The session keeps the
   menu locale it was started with for every later turn
2. The first message gets a greeting and the menu prompt
3. Each following message is a choice: an item, or one of the commands
4. "Process order" or "Cancel" finishes the order; the next message starts
   a new one

Rate Limiting:
--------------
Chat endpoints are rate limited (default: 30/minute per client address).
"""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Request
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.orm import Session

from ..config import RATE_LIMIT_ENABLED, get_rate_limit_chat
from ..db import get_db
from ..dialogs import (
    Activity,
    ActivityType,
    Cart,
    DatabaseSessionStore,
    DialogState,
    DialogTurnStatus,
    TurnContext,
    create_dispatcher,
    restore_dialog_state,
)
from ..menu import MenuConfig, UnknownLocaleError, get_menu
from ..schemas.chat import (
    CartOut,
    ChatMessageRequest,
    ChatMessageResponse,
    ChatStartResponse,
    MenuItemOut,
    MenuOut,
    ReplyOut,
)
from ..services.session import get_session


logger = logging.getLogger(__name__)

chat_router = APIRouter(prefix="/chat", tags=["Chat"])
menu_router = APIRouter(tags=["Menu"])

limiter = Limiter(key_func=get_remote_address, enabled=RATE_LIMIT_ENABLED)


# =============================================================================
# Dependencies
# =============================================================================

def get_active_menu() -> MenuConfig:
    """FastAPI dependency returning the menu for the configured locale."""
    return get_menu()


# =============================================================================
# Helper Functions
# =============================================================================

def _replies_out(ctx: TurnContext) -> list[ReplyOut]:
    return [ReplyOut(text=r.text, choices=r.choices) for r in ctx.replies]


def _cart_out(cart: Cart | None) -> CartOut | None:
    if cart is None:
        return None
    return CartOut(items=list(cart.items), total=cart.total)


def _load_dialog_state(db: Session, session_id: str) -> DialogState:
    session_data = get_session(db, session_id)
    if session_data is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return restore_dialog_state(session_data.get("dialog_state"), session_id)


def _session_menu(session_data: dict, default_menu: MenuConfig) -> MenuConfig:
    """Menu the session was started with; sessions keep their locale across turns."""
    locale = session_data.get("locale")
    if not locale or locale == default_menu.locale:
        return default_menu
    try:
        return get_menu(locale)
    except UnknownLocaleError:
        logger.warning("Stored locale %r has no menu, serving %s", locale, default_menu.locale)
        return default_menu


# =============================================================================
# Chat Endpoints
# =============================================================================

@chat_router.post("/start", response_model=ChatStartResponse)
@limiter.limit(get_rate_limit_chat)
def chat_start(
    request: Request,
    db: Session = Depends(get_db),
    menu: MenuConfig = Depends(get_active_menu),
) -> ChatStartResponse:
    """
    Start a new chat session.

    Runs a conversationUpdate turn so the session record exists before the
    first message arrives.
    """
    session_id = str(uuid.uuid4())

    dispatcher = create_dispatcher(DatabaseSessionStore(db, locale=menu.locale), menu)
    ctx = TurnContext(Activity(type=ActivityType.CONVERSATION_UPDATE, session_id=session_id))
    dispatcher.handle_turn(ctx)

    logger.info("Started chat session %s (locale=%s)", session_id, menu.locale)
    return ChatStartResponse(session_id=session_id, replies=_replies_out(ctx))


@chat_router.post("/message", response_model=ChatMessageResponse)
@limiter.limit(get_rate_limit_chat)
def chat_message(
    request: Request,
    req: ChatMessageRequest,
    db: Session = Depends(get_db),
    menu: MenuConfig = Depends(get_active_menu),
) -> ChatMessageResponse:
    """Deliver one turn to the bot and return its replies."""
    session_data = get_session(db, req.session_id)
    if session_data is None:
        raise HTTPException(status_code=404, detail="Session not found")
    menu = _session_menu(session_data, menu)

    store = DatabaseSessionStore(db, locale=menu.locale)
    dispatcher = create_dispatcher(store, menu)

    ctx = TurnContext(Activity(
        type=req.activity_type,
        text=req.message,
        session_id=req.session_id,
    ))
    turn_result = dispatcher.handle_turn(ctx)

    cancelled = turn_result.is_cancelled()
    if turn_result.status == DialogTurnStatus.COMPLETE:
        cart = turn_result.result if isinstance(turn_result.result, Cart) else None
    else:
        cart = _load_dialog_state(db, req.session_id).cart

    return ChatMessageResponse(
        session_id=req.session_id,
        replies=_replies_out(ctx),
        status=turn_result.status.value,
        cart=_cart_out(cart),
        cancelled=cancelled,
    )


@chat_router.get("/{session_id}/cart", response_model=CartOut)
def chat_cart(session_id: str, db: Session = Depends(get_db)) -> CartOut:
    """Return the cart carried by the session's open order (empty when idle)."""
    state = _load_dialog_state(db, session_id)
    return _cart_out(state.cart) or CartOut()


# =============================================================================
# Menu Endpoint
# =============================================================================

@menu_router.get("/menu", response_model=MenuOut)
def read_menu(menu: MenuConfig = Depends(get_active_menu)) -> MenuOut:
    """Describe the menu being served."""
    return MenuOut(
        locale=menu.locale,
        prompt=menu.messages.prompt,
        choices=menu.choices,
        items=[
            MenuItemOut(label=entry.label, description=entry.description, price=entry.price)
            for entry in menu.items
        ],
    )
