"""Savings and investment modal screens for Dinar Wallet."""

from typing import cast

from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.widgets import Button, Input, Label, Select, Static

from dinar_wallet.features.transfer.screen import BaseModalScreen
from dinar_wallet.shared.validation import INVESTMENT_TYPES


class AmountInputScreen(BaseModalScreen):
    """Prompts for a single DZD amount and dismisses with the raw text."""

    def __init__(self, title: str, detail: str = ""):
        super().__init__()
        self.title_text = title
        self.detail = detail

    def compose(self) -> ComposeResult:
        yield Label(self.title_text, id="amount-title")
        if self.detail:
            yield Static(self.detail)
        yield Input(placeholder="Amount (DZD)", id="amount-input")
        yield Static("", id="amount-error")
        yield Horizontal(
            Button("✓ OK", id="amount-ok-button", variant="primary"),
            Button("✗ Cancel", id="amount-cancel-button"),
        )

    def on_mount(self) -> None:
        self.query_one("#amount-input").focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self._submit()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "amount-ok-button":
            self._submit()
        elif event.button.id == "amount-cancel-button":
            self.dismiss(None)

    def _submit(self) -> None:
        value = cast(Input, self.query_one("#amount-input")).value.strip()
        if not value:
            cast(Static, self.query_one("#amount-error")).update(
                "[red]Please enter an amount[/red]"
            )
            return
        self.dismiss(value)


class CreateGoalScreen(BaseModalScreen):
    def compose(self) -> ComposeResult:
        yield Label("🎯 New Savings Goal", id="goal-title")
        yield Label("Name")
        yield Input(placeholder="e.g. New laptop", id="goal-name-input")
        yield Label("Target amount (DZD)")
        yield Input(placeholder="50000", id="goal-target-input")
        yield Label("Deadline (YYYY-MM-DD)")
        yield Input(placeholder="2027-01-31", id="goal-deadline-input")
        yield Label("Category (optional)")
        yield Input(placeholder="general", id="goal-category-input")
        yield Horizontal(
            Button("✓ Create", id="goal-create-button", variant="primary"),
            Button("✗ Cancel", id="goal-cancel-button"),
        )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "goal-create-button":
            self.dismiss(
                {
                    "name": cast(Input, self.query_one("#goal-name-input")).value,
                    "target_amount": cast(Input, self.query_one("#goal-target-input")).value,
                    "deadline": cast(Input, self.query_one("#goal-deadline-input")).value.strip(),
                    "category": cast(Input, self.query_one("#goal-category-input")).value.strip()
                    or None,
                }
            )
        elif event.button.id == "goal-cancel-button":
            self.dismiss(None)


class CreateInvestmentScreen(BaseModalScreen):
    def compose(self) -> ComposeResult:
        yield Label("📈 New Investment", id="investment-title")
        yield Label("Plan")
        yield Select(
            [(kind.title(), kind) for kind in INVESTMENT_TYPES],
            value="monthly",
            id="investment-type-select",
        )
        yield Label("Amount (DZD)")
        yield Input(placeholder="10000", id="investment-amount-input")
        yield Label("Profit rate (%)")
        yield Input(placeholder="5", id="investment-rate-input")
        yield Horizontal(
            Button("✓ Create", id="investment-create-button", variant="primary"),
            Button("✗ Cancel", id="investment-cancel-button"),
        )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "investment-create-button":
            selected = cast(Select, self.query_one("#investment-type-select")).value
            self.dismiss(
                {
                    "type": selected if isinstance(selected, str) else "monthly",
                    "amount": cast(Input, self.query_one("#investment-amount-input")).value,
                    "profit_rate": cast(Input, self.query_one("#investment-rate-input")).value
                    or "0",
                }
            )
        elif event.button.id == "investment-cancel-button":
            self.dismiss(None)
