"""
Tests for menu configuration.
"""
import pytest
from pydantic import ValidationError

from dinner_bot import config
from dinner_bot.menu import (
    BUILTIN_MENUS,
    MenuCommands,
    MenuConfig,
    MenuEntry,
    UnknownLocaleError,
    get_menu,
)


def _build(items, english_menu, **command_overrides):
    commands = english_menu.commands.model_copy(update=command_overrides)
    return MenuConfig(
        locale="test",
        items=tuple(items),
        commands=commands,
        messages=english_menu.messages,
    )


class TestBuiltinMenus:
    """Tests for the menus shipped with the bot."""

    def test_english_choices_in_prompt_order(self, english_menu):
        assert english_menu.choices == [
            "Potato Salad - $5.99",
            "Tuna Sandwich - $6.89",
            "Clam Chowder - $4.50",
            "Process order",
            "Cancel",
            "More info",
            "Help",
        ]

    def test_spanish_choices_in_prompt_order(self, spanish_menu):
        assert spanish_menu.choices == [
            "Ensalada de Papas - $5.99",
            "Sandwich de Atun - $6.89",
            "Sopa de Almejas - $4.50",
            "Procesar orden",
            "Cancel",
            "Mas info",
            "Ayuda",
        ]

    @pytest.mark.parametrize("locale", sorted(BUILTIN_MENUS))
    def test_prices_match_labels(self, locale):
        """Every label advertises the price that is charged."""
        menu = BUILTIN_MENUS[locale]
        for entry in menu.items:
            assert entry.label.endswith(menu.format_price(entry.price))

    def test_lookup(self, english_menu):
        entry = english_menu.lookup("Clam Chowder - $4.50")
        assert entry.description == "Clam Chowder"
        assert entry.price == 4.50

    def test_lookup_is_exact(self, english_menu):
        assert english_menu.lookup("clam chowder - $4.50") is None
        assert english_menu.lookup("Process order") is None

    def test_more_info_text(self, english_menu):
        assert english_menu.more_info_text() == (
            "More info:\n"
            "Potato Salad: contains 330 calories per serving.\n"
            "Tuna Sandwich: contains 700 calories per serving.\n"
            "Clam Chowder: contains 650 calories per serving."
        )

    @pytest.mark.parametrize("amount,expected", [
        (0, "$0.00"),
        (4.5, "$4.50"),
        (10.49, "$10.49"),
        (12.0, "$12.00"),
    ])
    def test_format_price(self, english_menu, amount, expected):
        assert english_menu.format_price(amount) == expected

    def test_menu_is_immutable(self, english_menu):
        with pytest.raises(ValidationError):
            english_menu.locale = "fr"


class TestGetMenu:
    """Tests for get_menu()."""

    def test_by_locale(self):
        assert get_menu("en").locale == "en"
        assert get_menu("es").locale == "es"

    def test_locale_is_normalized(self):
        assert get_menu(" ES ").locale == "es"

    def test_defaults_to_configured_locale(self, monkeypatch):
        monkeypatch.setattr(config, "MENU_LOCALE", "es")
        assert get_menu().locale == "es"

    def test_unknown_locale(self):
        with pytest.raises(UnknownLocaleError, match="fr"):
            get_menu("fr")


class TestMenuValidation:
    """Tests for MenuConfig validation."""

    def test_empty_menu_rejected(self, english_menu):
        with pytest.raises(ValidationError, match="at least one item"):
            _build([], english_menu)

    def test_duplicate_labels_rejected(self, english_menu):
        entry = MenuEntry(label="Soup - $1.00", description="Soup", price=1.0)
        with pytest.raises(ValidationError, match="duplicate"):
            _build([entry, entry], english_menu)

    def test_item_label_colliding_with_command_rejected(self, english_menu):
        entry = MenuEntry(label="help", description="Help", price=1.0)
        with pytest.raises(ValidationError, match="collide"):
            _build([entry], english_menu)

    @pytest.mark.parametrize("price", [0, -1.5])
    def test_non_positive_price_rejected(self, price):
        with pytest.raises(ValidationError):
            MenuEntry(label="Free - $0", description="Free", price=price)

    def test_custom_currency(self, english_menu):
        menu = english_menu.model_copy(update={"currency_symbol": "€"})
        assert menu.format_price(3.5) == "€3.50"

    def test_command_labels(self):
        commands = MenuCommands(checkout="Pay", cancel="Stop", more_info="Info", help="?")
        assert commands.labels() == ["Pay", "Stop", "Info", "?"]

    @pytest.mark.parametrize("label", [
        "Help-yourself Salad - $3.00",
        "Soup to CANCEL hunger - $2.00",
        "Bread and more info - $1.00",
    ])
    def test_item_label_containing_command_rejected(self, english_menu, label):
        """An item whose label contains a command could never reach the cart."""
        entry = MenuEntry(label=label, description="Special", price=3.0)
        with pytest.raises(ValidationError, match="collide"):
            _build([entry], english_menu)

    def test_item_label_containing_custom_pattern_rejected(self, english_menu):
        entry = MenuEntry(label="Finishing Pie - $4.00", description="Pie", price=4.0)
        with pytest.raises(ValidationError, match="collide"):
            _build([entry], english_menu, checkout="Done", checkout_pattern="finish")

    def test_overridden_label_only_collides_exactly(self, english_menu):
        """With a custom pattern, the label itself is only reserved as an exact choice."""
        entry = MenuEntry(label="Done Right Ribs - $9.00", description="Ribs", price=9.0)
        menu = _build([entry], english_menu, checkout="Done", checkout_pattern="finish")
        assert menu.lookup("Done Right Ribs - $9.00") is not None

    def test_command_patterns_default_to_labels(self):
        commands = MenuCommands(
            checkout="Pay", cancel="Stop", more_info="Info", help="?", help_pattern="usage",
        )
        assert commands.patterns() == ["Pay", "Stop", "Info", "usage"]
