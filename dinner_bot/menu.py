"""
Menu configuration for the ordering flow.

The menu is static data: a table of selectable items (label, description,
price), the four command labels the bot understands, and every user-facing
string. A MenuConfig is immutable and is handed to the flow at construction
time, so swapping locales (or building a test menu) never touches flow logic.

Usage:
    from dinner_bot.menu import get_menu

    menu = get_menu("en")
    menu.choices        # item labels followed by the command labels
    menu.lookup("Tuna Sandwich - $6.89")
"""

import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .config import get_menu_locale

logger = logging.getLogger(__name__)


class UnknownLocaleError(ValueError):
    """Raised when no built-in menu exists for the requested locale."""


# -----------------------------------------------------------------------------
# Menu Models
# -----------------------------------------------------------------------------

class MenuEntry(BaseModel):
    """A selectable item on the menu."""

    model_config = ConfigDict(frozen=True)

    label: str  # exact choice label shown to the user, e.g. "Tuna Sandwich - $6.89"
    description: str  # what goes into the cart, e.g. "Tuna Sandwich"
    price: float = Field(gt=0)
    info: str = ""  # shown by the more-info command


class MenuCommands(BaseModel):
    """
    Command labels shown as choices, and the patterns that recognise them.

    A pattern is matched as a case-insensitive substring of the selected
    choice. When a pattern is omitted the label itself is used.
    """

    model_config = ConfigDict(frozen=True)

    checkout: str
    cancel: str
    more_info: str
    help: str

    checkout_pattern: Optional[str] = None
    cancel_pattern: Optional[str] = None
    more_info_pattern: Optional[str] = None
    help_pattern: Optional[str] = None

    def labels(self) -> list[str]:
        """Command labels in prompt order."""
        return [self.checkout, self.cancel, self.more_info, self.help]

    def patterns(self) -> list[str]:
        """Effective recognition patterns, in the same order as labels()."""
        return [
            self.checkout_pattern or self.checkout,
            self.cancel_pattern or self.cancel,
            self.more_info_pattern or self.more_info,
            self.help_pattern or self.help,
        ]


class MenuMessages(BaseModel):
    """Every string the bot says. Placeholders use str.format syntax."""

    model_config = ConfigDict(frozen=True)

    prompt: str
    order_processed: str
    empty_cart: str
    order_cancelled: str
    item_added: str  # {description}, {total}
    more_info_header: str
    help: str
    invalid_selection: str
    greeting: str
    order_total: str  # {total}
    order_cancelled_summary: str
    passthrough: str = "[{activity_type} event detected]"


class MenuConfig(BaseModel):
    """
    Immutable menu configuration injected into the ordering flow.

    Attributes:
        locale: Locale tag for this menu ("en", "es", ...)
        currency_symbol: Prefix used when rendering prices
        items: Selectable entries, in prompt order
        commands: Command labels and recognition patterns
        messages: User-facing strings
    """

    model_config = ConfigDict(frozen=True)

    locale: str
    currency_symbol: str = "$"
    items: tuple[MenuEntry, ...]
    commands: MenuCommands
    messages: MenuMessages

    @model_validator(mode="after")
    def _check_labels(self) -> "MenuConfig":
        if not self.items:
            raise ValueError("menu must contain at least one item")

        labels = [entry.label for entry in self.items]
        if len(set(labels)) != len(labels):
            raise ValueError("duplicate item labels in menu")

        # Command patterns match as substrings ahead of item labels
        command_labels = {label.lower() for label in self.commands.labels()}
        patterns = [pattern.lower() for pattern in self.commands.patterns() if pattern]
        clashes = [
            label for label in labels
            if label.lower() in command_labels
            or any(pattern in label.lower() for pattern in patterns)
        ]
        if clashes:
            raise ValueError(f"item labels collide with command labels: {clashes}")
        return self

    @property
    def choices(self) -> list[str]:
        """Item labels followed by checkout, cancel, more-info and help."""
        return [entry.label for entry in self.items] + self.commands.labels()

    def lookup(self, label: str) -> Optional[MenuEntry]:
        """Return the entry whose label matches exactly, or None."""
        for entry in self.items:
            if entry.label == label:
                return entry
        return None

    def format_price(self, amount: float) -> str:
        return f"{self.currency_symbol}{amount:.2f}"

    def more_info_text(self) -> str:
        """Header followed by one descriptive line per item."""
        lines = [self.messages.more_info_header]
        for entry in self.items:
            lines.append(f"{entry.description}: {entry.info}")
        return "\n".join(lines)


# -----------------------------------------------------------------------------
# Built-in Menus
# -----------------------------------------------------------------------------

ENGLISH_MENU = MenuConfig(
    locale="en",
    items=(
        MenuEntry(
            label="Potato Salad - $5.99",
            description="Potato Salad",
            price=5.99,
            info="contains 330 calories per serving.",
        ),
        MenuEntry(
            label="Tuna Sandwich - $6.89",
            description="Tuna Sandwich",
            price=6.89,
            info="contains 700 calories per serving.",
        ),
        MenuEntry(
            label="Clam Chowder - $4.50",
            description="Clam Chowder",
            price=4.50,
            info="contains 650 calories per serving.",
        ),
    ),
    commands=MenuCommands(
        checkout="Process order",
        cancel="Cancel",
        more_info="More info",
        help="Help",
    ),
    messages=MenuMessages(
        prompt="What would you like for dinner?",
        order_processed="Your order has been processed.",
        empty_cart="Your cart was empty. Please add at least one item to the cart.",
        order_cancelled="Your order has been canceled.",
        item_added="Added {description} to your cart.\nCurrent total: {total}",
        more_info_header="More info:",
        help=(
            "Help:\n"
            "To make an order, add as many items to your cart as you like then "
            'choose the "Process order" option to check out.'
        ),
        invalid_selection="Sorry, I didn't understand that choice. Please pick one of the options.",
        greeting="Let's get ready to order...",
        order_total="Your order came to {total}",
        order_cancelled_summary="Your order was canceled.",
    ),
)

SPANISH_MENU = MenuConfig(
    locale="es",
    items=(
        MenuEntry(
            label="Ensalada de Papas - $5.99",
            description="Ensalada de Papas",
            price=5.99,
            info="contiene 330 calorías por porción.",
        ),
        MenuEntry(
            label="Sandwich de Atun - $6.89",
            description="Sandwich de Atun",
            price=6.89,
            info="contiene 700 calorías por porción.",
        ),
        MenuEntry(
            label="Sopa de Almejas - $4.50",
            description="Sopa de Almejas",
            price=4.50,
            info="contiene 650 calorías por porción.",
        ),
    ),
    commands=MenuCommands(
        checkout="Procesar orden",
        cancel="Cancel",
        more_info="Mas info",
        help="Ayuda",
    ),
    messages=MenuMessages(
        prompt="Que desea ordenar?",
        order_processed="Su orden ha sido procesada.",
        empty_cart="Orden de pedido vacía. Por favor agregue elementos a la orden.",
        order_cancelled="Su orden ha sido cancelada.",
        item_added="Agregada {description} al pedido.\nTotal: {total}",
        more_info_header="Mas info:",
        help=(
            "Ayuda:\n"
            "Para realizar una orden, agregue items al pedido y luego seleccione "
            'la opción "Procesar orden" para terminar.'
        ),
        invalid_selection="No entendí esa opción. Por favor elija una de las opciones.",
        greeting="Listo para tomar su orden...",
        order_total="El total de su orden es de {total}",
        order_cancelled_summary="Su orden ha sido cancelada.",
        passthrough="[evento {activity_type} detectado]",
    ),
)

BUILTIN_MENUS: dict[str, MenuConfig] = {
    ENGLISH_MENU.locale: ENGLISH_MENU,
    SPANISH_MENU.locale: SPANISH_MENU,
}


def get_menu(locale: Optional[str] = None) -> MenuConfig:
    """
    Return the built-in menu for a locale.

    Args:
        locale: Locale tag. Defaults to the MENU_LOCALE setting.

    Returns:
        The matching MenuConfig

    Raises:
        UnknownLocaleError: If no built-in menu exists for the locale
    """
    if locale is None:
        locale = get_menu_locale()
    key = (locale or "").strip().lower()

    menu = BUILTIN_MENUS.get(key)
    if menu is None:
        raise UnknownLocaleError(
            f"No menu for locale '{locale}'. Available: {sorted(BUILTIN_MENUS)}"
        )

    logger.debug("Loaded %s menu with %d items", key, len(menu.items))
    return menu
