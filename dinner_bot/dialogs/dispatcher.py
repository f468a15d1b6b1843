"""
TurnDispatcher - runs one inbound turn against the session's dialog state.

For every turn the dispatcher:
1. Loads the session's DialogState from the store
2. For user messages, resumes the active dialog (or starts the root dialog
   when none is active) and reports the outcome of a completed order
3. Saves the DialogState back to the store, once, whatever happened

Store and transport failures are not caught here; they end the turn and the
last successfully saved state is where the next turn resumes.
"""

import logging
from typing import Optional

from .. import config
from ..logging_config import session_log_context
from ..menu import MenuConfig
from .base import DialogRegistry
from .context import ActivityType, TurnContext
from .state import Cart, DialogState, DialogTurnResult, DialogTurnStatus
from .store import SessionStore, restore_dialog_state

logger = logging.getLogger(__name__)


class TurnDispatcher:
    """
    Entry point for every inbound activity.

    Args:
        store: Where per-session DialogState lives between turns
        dialogs: Registry holding the root dialog (and any others)
        root_dialog_id: Dialog started when a message arrives with nothing active
        menu: Source of the summary and greeting strings
        echo_non_message: Reply "[<type> event detected]" to non-message activities.
                          Defaults to the ECHO_NON_MESSAGE_ACTIVITIES setting.
    """

    def __init__(
        self,
        store: SessionStore,
        dialogs: DialogRegistry,
        root_dialog_id: str,
        menu: MenuConfig,
        echo_non_message: Optional[bool] = None,
    ):
        if root_dialog_id not in dialogs:
            raise ValueError(f"Root dialog '{root_dialog_id}' is not registered")

        self.store = store
        self.dialogs = dialogs
        self.root_dialog_id = root_dialog_id
        self.menu = menu
        self.echo_non_message = (
            config.ECHO_NON_MESSAGE_ACTIVITIES if echo_non_message is None else echo_non_message
        )

    def handle_turn(self, ctx: TurnContext) -> DialogTurnResult:
        """
        Process one turn.

        Args:
            ctx: Turn context wrapping the inbound activity. Replies are
                 appended to ctx.replies.

        Returns:
            The DialogTurnResult of the turn. For non-message activities this
            reflects whether a dialog is suspended (WAITING) or not (EMPTY).
        """
        activity = ctx.activity
        session_id = ctx.session_id

        with session_log_context(session_id):
            state = self._load_state(session_id)

            if activity.type != ActivityType.MESSAGE:
                if self.echo_non_message:
                    ctx.send(self.menu.messages.passthrough.format(activity_type=activity.type.value))
                status = DialogTurnStatus.WAITING if state.is_active() else DialogTurnStatus.EMPTY
                turn_result = DialogTurnResult(status=status)
            else:
                turn_result = self._continue_dialog(ctx, state)

                if turn_result.status == DialogTurnStatus.COMPLETE:
                    self._send_summary(ctx, turn_result)
                elif turn_result.status == DialogTurnStatus.EMPTY and not ctx.responded:
                    ctx.send(self.menu.messages.greeting)
                    state.clear()
                    turn_result = self.dialogs.get(self.root_dialog_id).begin_dialog(ctx, state)

            self.store.save(session_id, state.model_dump(mode="json"))

            logger.info(
                "Turn handled: session=%s activity=%s status=%s replies=%d",
                session_id, activity.type.value, turn_result.status.value, len(ctx.replies),
            )
        return turn_result

    def _load_state(self, session_id: str) -> DialogState:
        return restore_dialog_state(self.store.load(session_id), session_id)

    def _continue_dialog(self, ctx: TurnContext, state: DialogState) -> DialogTurnResult:
        if not state.is_active():
            return DialogTurnResult(status=DialogTurnStatus.EMPTY)

        dialog = self.dialogs.get(state.active_dialog)
        if dialog is None:
            logger.warning(
                "Session %s references unknown dialog '%s', treating as idle",
                ctx.session_id, state.active_dialog,
            )
            state.clear()
            return DialogTurnResult(status=DialogTurnStatus.EMPTY)

        return dialog.continue_dialog(ctx, state)

    def _send_summary(self, ctx: TurnContext, turn_result: DialogTurnResult) -> None:
        messages = self.menu.messages
        if turn_result.is_cancelled() or not isinstance(turn_result.result, Cart):
            ctx.send(messages.order_cancelled_summary)
            return
        ctx.send(messages.order_total.format(total=self.menu.format_price(turn_result.result.total)))
