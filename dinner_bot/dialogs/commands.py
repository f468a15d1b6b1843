"""
Choice recognition and command resolution for the ordering flow.

Two separate concerns live here:

1. recognize_choice() maps raw user text onto one of the prompt's choice
   labels (exact, ordinal, or unique partial match).
2. resolve_command() maps a recognised choice onto a Command. Commands are
   matched as case-insensitive substrings in a fixed priority order:
   checkout, cancel, more-info, help. Anything else is an item selection.
"""

import re
from typing import Optional, Sequence

from ..menu import MenuConfig
from .state import Command


def _command_patterns(menu: MenuConfig) -> list[tuple[Command, str]]:
    """Command patterns in match priority order."""
    order = [Command.CHECKOUT, Command.CANCEL, Command.MORE_INFO, Command.HELP]
    return list(zip(order, menu.commands.patterns()))


def resolve_command(choice: str, menu: MenuConfig) -> Command:
    """
    Resolve a selected choice to the command it triggers.

    The first matching pattern wins, so a choice that contains both the
    checkout and the cancel pattern resolves to CHECKOUT.

    Args:
        choice: The selected choice label
        menu: Menu whose command patterns apply

    Returns:
        The matching Command, or Command.SELECT_ITEM when no pattern matches
    """
    text = choice or ""
    for command, pattern in _command_patterns(menu):
        if pattern and re.search(re.escape(pattern), text, re.IGNORECASE):
            return command
    return Command.SELECT_ITEM


def recognize_choice(text: str, choices: Sequence[str]) -> Optional[str]:
    """
    Recognise which choice the user picked.

    Tried in order:
        1. exact case-insensitive match of a label
        2. 1-based ordinal ("2" picks the second choice)
        3. unique partial match: the text is contained in exactly one label,
           or exactly one label is contained in the text

    Args:
        text: Raw user text
        choices: Choice labels as presented in the prompt

    Returns:
        The recognised label, or None when nothing (or more than one
        label, for partial matches) fits
    """
    normalized = (text or "").strip().lower()
    if not normalized:
        return None

    for choice in choices:
        if choice.lower() == normalized:
            return choice

    # ASCII digits only; str.isdigit() also accepts "²" and "①", which int() rejects
    if re.fullmatch(r"[0-9]+", normalized):
        index = int(normalized)
        if 1 <= index <= len(choices):
            return choices[index - 1]
        return None

    partial = [choice for choice in choices if normalized in choice.lower()]
    if len(partial) == 1:
        return partial[0]

    containing = [choice for choice in choices if choice.lower() in normalized]
    if len(containing) == 1:
        return containing[0]

    return None
