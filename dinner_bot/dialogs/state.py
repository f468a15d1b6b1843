"""
Pydantic state models for the ordering dialog.

These models define the cart that accumulates across turns and the
serializable continuation record that lets a dialog suspend at the end of
one turn and resume at the start of the next.
"""

from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, Field


# Terminal value returned when the user cancels the order.
CANCELLED = "cancelled"


# -----------------------------------------------------------------------------
# Cart
# -----------------------------------------------------------------------------

class Cart(BaseModel):
    """
    An in-progress or finalized order.

    `total` always equals the sum of the prices of the selected items;
    the two are only ever changed together through add_item().
    """

    items: list[str] = Field(default_factory=list)  # descriptions, in selection order
    total: float = 0.0

    def add_item(self, description: str, price: float) -> None:
        """Append an item and accumulate its price."""
        self.items.append(description)
        self.total = round(self.total + price, 2)

    def is_empty(self) -> bool:
        return not self.items

    def is_carry_over(self) -> bool:
        """True when this cart holds anything worth carrying into the next prompt."""
        return bool(self.items) or self.total != 0


# -----------------------------------------------------------------------------
# Commands
# -----------------------------------------------------------------------------

class Command(str, Enum):
    """What a selected choice asks the ordering flow to do, in match priority order."""

    CHECKOUT = "checkout"
    CANCEL = "cancel"
    MORE_INFO = "more_info"
    HELP = "help"
    SELECT_ITEM = "select_item"


# -----------------------------------------------------------------------------
# Dialog State (continuation)
# -----------------------------------------------------------------------------

class DialogState(BaseModel):
    """
    Everything needed to resume a suspended dialog on the next turn.

    Persisted verbatim by the session store between turns.
    """

    active_dialog: Optional[str] = None  # id of the suspended dialog, None when idle
    step_index: int = 0  # waterfall step that receives the next input
    cart: Optional[Cart] = None  # value carried by the waterfall

    def is_active(self) -> bool:
        return self.active_dialog is not None

    def clear(self) -> None:
        """Drop any suspended dialog and its carried values."""
        self.active_dialog = None
        self.step_index = 0
        self.cart = None


# -----------------------------------------------------------------------------
# Turn Result
# -----------------------------------------------------------------------------

class DialogTurnStatus(str, Enum):
    """Outcome of running a dialog for one turn."""

    EMPTY = "empty"  # no dialog was active
    WAITING = "waiting"  # dialog is suspended awaiting the next input
    COMPLETE = "complete"  # dialog finished this turn


class DialogTurnResult(BaseModel):
    """
    Result of starting or resuming a dialog.

    `result` is only meaningful when status is COMPLETE: a finalized Cart on
    checkout, or the CANCELLED marker on cancel.
    """

    status: DialogTurnStatus
    result: Union[Cart, str, None] = None

    def is_cancelled(self) -> bool:
        return self.status == DialogTurnStatus.COMPLETE and (
            self.result is None or self.result == CANCELLED
        )
