"""Card modal screens for Dinar Wallet."""

from typing import cast

from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.widgets import Button, Input, Label, Static

from dinar_wallet.features.transfer.screen import BaseModalScreen, format_dzd
from dinar_wallet.models import Card


class FreezeCardScreen(BaseModalScreen):
    """Asks before freezing a card; dismisses with True to proceed."""

    def __init__(self, card: Card):
        super().__init__()
        self.card = card

    def compose(self) -> ComposeResult:
        action = "Unfreeze" if self.card.is_frozen else "Freeze"
        yield Label(f"❄️ {action} {self.card.card_type.title()} Card", id="freeze-title")
        yield Static(self.card.masked_number)
        if not self.card.is_frozen:
            yield Static(
                "[red]The card cannot be used until it is unfrozen. "
                "You can unfreeze it at any time.[/red]"
            )
        yield Horizontal(
            Button(f"✓ {action}", id="freeze-confirm-button", variant="error"),
            Button("✗ Cancel", id="freeze-cancel-button"),
        )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "freeze-confirm-button":
            self.dismiss(True)
        elif event.button.id == "freeze-cancel-button":
            self.dismiss(False)


class SpendingLimitScreen(BaseModalScreen):
    """Dismisses with the entered limit text, or None when cancelled."""

    def __init__(self, card: Card):
        super().__init__()
        self.card = card

    def compose(self) -> ComposeResult:
        yield Label("💳 Spending Limit", id="limit-title")
        yield Static(f"{self.card.masked_number}  current: {format_dzd(self.card.spending_limit)}")
        yield Input(placeholder="New limit (DZD)", id="limit-input")
        yield Static("", id="limit-error")
        yield Horizontal(
            Button("✓ Save", id="limit-save-button", variant="primary"),
            Button("✗ Cancel", id="limit-cancel-button"),
        )

    def on_mount(self) -> None:
        self.query_one("#limit-input").focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "limit-save-button":
            self._submit()
        elif event.button.id == "limit-cancel-button":
            self.dismiss(None)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self._submit()

    def _submit(self) -> None:
        value = cast(Input, self.query_one("#limit-input")).value.strip()
        if not value:
            cast(Static, self.query_one("#limit-error")).update(
                "[red]Please enter a limit[/red]"
            )
            return
        self.dismiss(value)
