"""
Base dialog class and registry for the turn-based conversation flow.

A dialog is a suspendable multi-turn unit. It never blocks waiting for
input: it writes where it stopped into DialogState and returns, and the
next turn resumes it from that record.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from .context import TurnContext
from .state import DialogState, DialogTurnResult, DialogTurnStatus


class BaseDialog(ABC):
    """
    Abstract base class for all dialogs.

    Each dialog is responsible for:
    1. Starting itself (begin_dialog) and emitting its first prompt
    2. Resuming from a suspended DialogState with the turn's input
    3. Ending itself with a terminal value, which clears the state
    """

    dialog_id: str  # Must be set by subclass

    @abstractmethod
    def begin_dialog(
        self,
        ctx: TurnContext,
        state: DialogState,
        options: Optional[Any] = None,
    ) -> DialogTurnResult:
        """
        Start the dialog.

        Args:
            ctx: Current turn context
            state: Session dialog state, updated in place
            options: Values carried into the first step

        Returns:
            DialogTurnResult describing whether the dialog is waiting or done
        """

    @abstractmethod
    def continue_dialog(self, ctx: TurnContext, state: DialogState) -> DialogTurnResult:
        """
        Resume the dialog with the input carried by ctx.activity.

        Args:
            ctx: Current turn context
            state: Session dialog state, updated in place

        Returns:
            DialogTurnResult describing whether the dialog is waiting or done
        """

    def end_dialog(self, state: DialogState, result: Any = None) -> DialogTurnResult:
        """Finish the dialog and hand `result` back to the caller."""
        state.clear()
        return DialogTurnResult(status=DialogTurnStatus.COMPLETE, result=result)

    def wait_for_input(self, state: DialogState, step_index: int) -> DialogTurnResult:
        """Suspend at `step_index` until the next turn."""
        state.active_dialog = self.dialog_id
        state.step_index = step_index
        return DialogTurnResult(status=DialogTurnStatus.WAITING)


class DialogRegistry:
    """
    Registry for dialog instances.

    The TurnDispatcher uses this to find the dialog named in a session's
    DialogState.
    """

    def __init__(self):
        self._dialogs: dict[str, BaseDialog] = {}

    def register(self, dialog: BaseDialog) -> "DialogRegistry":
        """Register a dialog instance. Returns self so calls can be chained."""
        self._dialogs[dialog.dialog_id] = dialog
        return self

    def get(self, dialog_id: str) -> Optional[BaseDialog]:
        """Get a dialog by id."""
        return self._dialogs.get(dialog_id)

    def get_all(self) -> dict[str, BaseDialog]:
        """Get all registered dialogs."""
        return self._dialogs.copy()

    def __contains__(self, dialog_id: str) -> bool:
        return dialog_id in self._dialogs
