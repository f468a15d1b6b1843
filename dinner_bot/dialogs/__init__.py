"""
Turn-based dialog architecture for the dinner ordering bot.

This package holds the conversation core: the OrderFlow waterfall that
builds a cart across turns, and the TurnDispatcher that loads session state,
resumes or starts the flow, reports the result and saves state again.
"""

from typing import Optional

from .state import (
    CANCELLED,
    Cart,
    Command,
    DialogState,
    DialogTurnResult,
    DialogTurnStatus,
)
from .context import Activity, ActivityType, Reply, TurnContext
from .commands import recognize_choice, resolve_command
from .base import BaseDialog, DialogRegistry
from .order_flow import ORDER_DIALOG_ID, InvalidSelectionError, OrderFlow
from .store import DatabaseSessionStore, MemorySessionStore, SessionStore, restore_dialog_state
from .dispatcher import TurnDispatcher
from ..menu import MenuConfig, get_menu

__all__ = [
    # State models
    "CANCELLED",
    "Cart",
    "Command",
    "DialogState",
    "DialogTurnResult",
    "DialogTurnStatus",
    # Turn context
    "Activity",
    "ActivityType",
    "Reply",
    "TurnContext",
    # Matching
    "recognize_choice",
    "resolve_command",
    # Dialogs
    "BaseDialog",
    "DialogRegistry",
    "ORDER_DIALOG_ID",
    "InvalidSelectionError",
    "OrderFlow",
    # Stores
    "SessionStore",
    "MemorySessionStore",
    "DatabaseSessionStore",
    "restore_dialog_state",
    # Dispatcher
    "TurnDispatcher",
    "create_dispatcher",
]


def create_dispatcher(
    store: SessionStore,
    menu: Optional[MenuConfig] = None,
    echo_non_message: Optional[bool] = None,
) -> TurnDispatcher:
    """
    Factory function to create a fully configured TurnDispatcher.

    Args:
        store: Session store for dialog state
        menu: Menu to serve. Defaults to the configured locale's built-in menu.
        echo_non_message: Override for the ECHO_NON_MESSAGE_ACTIVITIES setting

    Returns:
        TurnDispatcher with OrderFlow registered as the root dialog
    """
    menu = menu or get_menu()
    registry = DialogRegistry().register(OrderFlow(menu))
    return TurnDispatcher(
        store=store,
        dialogs=registry,
        root_dialog_id=ORDER_DIALOG_ID,
        menu=menu,
        echo_non_message=echo_non_message,
    )
