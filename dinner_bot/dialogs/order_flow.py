"""
OrderFlow - the two-step ordering waterfall.

Step 1 (prompt) adopts a carried cart or starts an empty one, shows the menu
as a single-select prompt and suspends. Step 2 (interpret) receives the
selected choice and either ends the dialog (checkout, cancel) or restarts
step 1 carrying the cart forward (more info, help, item selection).

    (start) -> AwaitingChoice
    AwaitingChoice --checkout, cart non-empty--> Completed(cart)
    AwaitingChoice --checkout, cart empty------> AwaitingChoice (fresh cart)
    AwaitingChoice --cancel--------------------> Completed(CANCELLED)
    AwaitingChoice --more info / help----------> AwaitingChoice (cart kept)
    AwaitingChoice --item selection------------> AwaitingChoice (cart updated)
"""

import logging
from typing import Any, Optional

from ..menu import MenuConfig
from .base import BaseDialog
from .commands import recognize_choice, resolve_command
from .context import TurnContext
from .state import CANCELLED, Cart, Command, DialogState, DialogTurnResult

logger = logging.getLogger(__name__)

ORDER_DIALOG_ID = "orderingDialog"

PROMPT_STEP = 0
INTERPRET_STEP = 1


class InvalidSelectionError(LookupError):
    """A recognised choice matched neither a command nor a menu entry."""

    def __init__(self, choice: str):
        super().__init__(f"No menu entry for choice: {choice!r}")
        self.choice = choice


class OrderFlow(BaseDialog):
    """
    Dialog that builds a cart from menu selections until checkout or cancel.

    Completes with the finalized Cart on checkout, or with CANCELLED.
    """

    dialog_id = ORDER_DIALOG_ID

    def __init__(self, menu: MenuConfig):
        """
        Initialize OrderFlow.

        Args:
            menu: Menu the flow presents and prices against
        """
        self.menu = menu

    # -------------------------------------------------------------------------
    # Dialog lifecycle
    # -------------------------------------------------------------------------

    def begin_dialog(
        self,
        ctx: TurnContext,
        state: DialogState,
        options: Optional[Any] = None,
    ) -> DialogTurnResult:
        """Start at the prompt step. `options` may carry a Cart forward."""
        return self._prompt_step(ctx, state, options)

    def continue_dialog(self, ctx: TurnContext, state: DialogState) -> DialogTurnResult:
        """Feed the turn's text to the suspended step."""
        if state.step_index != INTERPRET_STEP:
            logger.warning(
                "Session %s suspended at unexpected step %d, restarting prompt",
                ctx.session_id, state.step_index,
            )
            return self._replace_dialog(ctx, state, state.cart)

        choice = recognize_choice(ctx.activity.text or "", self.menu.choices)
        if choice is None:
            logger.info("Session %s: unrecognized choice %r", ctx.session_id, ctx.activity.text)
            ctx.send(self.menu.messages.invalid_selection)
            return self._replace_dialog(ctx, state, state.cart)

        return self._interpret_step(ctx, state, choice)

    def _replace_dialog(
        self,
        ctx: TurnContext,
        state: DialogState,
        options: Optional[Any] = None,
    ) -> DialogTurnResult:
        """Discard the current step context and start over from step 1."""
        state.clear()
        return self.begin_dialog(ctx, state, options)

    # -------------------------------------------------------------------------
    # Waterfall steps
    # -------------------------------------------------------------------------

    def _prompt_step(
        self,
        ctx: TurnContext,
        state: DialogState,
        options: Optional[Any],
    ) -> DialogTurnResult:
        if isinstance(options, Cart) and options.is_carry_over():
            state.cart = options.model_copy(deep=True)
        else:
            state.cart = Cart()

        ctx.send(self.menu.messages.prompt, choices=self.menu.choices)
        return self.wait_for_input(state, INTERPRET_STEP)

    def _interpret_step(self, ctx: TurnContext, state: DialogState, choice: str) -> DialogTurnResult:
        cart = state.cart or Cart()
        command = resolve_command(choice, self.menu)
        messages = self.menu.messages

        logger.debug("Session %s: choice %r -> %s", ctx.session_id, choice, command.value)

        if command == Command.CHECKOUT:
            if not cart.is_empty():
                ctx.send(messages.order_processed)
                return self.end_dialog(state, cart)
            ctx.send(messages.empty_cart)
            return self._replace_dialog(ctx, state)

        if command == Command.CANCEL:
            ctx.send(messages.order_cancelled)
            return self.end_dialog(state, CANCELLED)

        if command == Command.MORE_INFO:
            ctx.send(self.menu.more_info_text())
            return self._replace_dialog(ctx, state, cart)

        if command == Command.HELP:
            ctx.send(messages.help)
            return self._replace_dialog(ctx, state, cart)

        try:
            description = self._add_item(cart, choice)
        except InvalidSelectionError as e:
            logger.warning("Session %s: %s", ctx.session_id, e)
            ctx.send(messages.invalid_selection)
            return self._replace_dialog(ctx, state, cart)

        ctx.send(messages.item_added.format(
            description=description,
            total=self.menu.format_price(cart.total),
        ))
        return self._replace_dialog(ctx, state, cart)

    def _add_item(self, cart: Cart, choice: str) -> str:
        entry = self.menu.lookup(choice)
        if entry is None:
            raise InvalidSelectionError(choice)
        cart.add_item(entry.description, entry.price)
        return entry.description
