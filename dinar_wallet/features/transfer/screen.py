"""Transfer-related modal screens for Dinar Wallet."""

import logging
from decimal import Decimal
from typing import cast

from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.screen import ModalScreen
from textual.widgets import Button, Label, Static

from dinar_wallet.models import TransferResult

logger = logging.getLogger(__name__)


def format_dzd(amount: Decimal | None) -> str:
    if amount is None:
        return "-"
    return f"{amount:,.2f} DZD"


class BaseModalScreen(ModalScreen):
    """Base modal screen with common key bindings."""

    BINDINGS = [
        ("escape", "app.pop_screen", "Close"),
        ("tab", "focus_next", "Next"),
        ("shift+tab", "focus_previous", "Previous"),
    ]


class TransferConfirmScreen(BaseModalScreen):
    """Review step; dismisses with True to send or False to go back."""

    BINDINGS = [
        ("escape", "back", "Back"),
        ("enter", "confirm", "Confirm"),
    ]

    def __init__(
        self,
        amount: Decimal,
        recipient: str,
        description: str,
        balance_after: Decimal | None,
        recipient_name: str | None = None,
    ):
        super().__init__()
        self.amount = amount
        self.recipient = recipient
        self.description = description
        self.balance_after = balance_after
        self.recipient_name = recipient_name

    def compose(self) -> ComposeResult:
        yield Label("✅ Confirm Transfer", id="confirm-title")
        recipient_text = self.recipient
        if self.recipient_name:
            recipient_text = f"{self.recipient_name} <{self.recipient}>"
        yield Static(f"📤 Recipient: {recipient_text}")
        yield Static(f"💰 Amount: {format_dzd(self.amount)}")
        yield Static(f"💬 Description: {self.description}")
        yield Static(f"🏦 Balance after transfer: {format_dzd(self.balance_after)}")
        yield Horizontal(
            Button("✓ Confirm", id="confirm-button", variant="primary"),
            Button("← Back", id="back-button"),
        )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "confirm-button":
            self.dismiss(True)
        elif event.button.id == "back-button":
            self.dismiss(False)

    def action_confirm(self) -> None:
        self.dismiss(True)

    def action_back(self) -> None:
        self.dismiss(False)


class TransferProcessingScreen(BaseModalScreen):
    BINDINGS = []

    def __init__(self, amount: Decimal, recipient: str):
        super().__init__()
        self.amount = amount
        self.recipient = recipient
        self._loading_step = 0
        self._loading_timer = None

    def compose(self) -> ComposeResult:
        yield Label("⏳ Processing Transfer", id="processing-title")
        yield Static(
            f"Sending {format_dzd(self.amount)} to {self.recipient}",
            id="processing-detail",
        )
        yield Static("[yellow]⠋ Please wait...[/yellow]", id="processing-spinner")

    def on_mount(self) -> None:
        frames = ["⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏"]

        def tick() -> None:
            self._loading_step = (self._loading_step + 1) % len(frames)
            try:
                spinner = cast(Static, self.query_one("#processing-spinner"))
                spinner.update(f"[yellow]{frames[self._loading_step]} Please wait...[/yellow]")
            except Exception:
                pass

        self._loading_timer = self.set_interval(0.08, tick)

    def on_unmount(self) -> None:
        if self._loading_timer:
            self._loading_timer.stop()
            self._loading_timer = None


class TransferSuccessScreen(BaseModalScreen):
    """Dismisses with "new" when the user asks for a fresh transfer."""

    def __init__(self, result: TransferResult, amount: Decimal, recipient: str):
        super().__init__()
        self.result = result
        self.amount = amount
        self.recipient = recipient

    def compose(self) -> ComposeResult:
        yield Label("✅ Transfer Completed!", id="result-title")
        yield Static(f"{format_dzd(self.amount)} sent to {self.recipient}")
        yield Static(self.result.message, id="result-message")
        yield Label("Reference:")
        yield Static(self.result.reference or "-", id="reference-display")
        yield Static(
            f"New balance: {format_dzd(self.result.new_balance)}", id="new-balance"
        )
        yield Horizontal(
            Button("📋 Copy Reference", id="copy-reference-button", variant="primary"),
            Button("➕ New Transfer", id="new-transfer-button"),
            Button("❌ Close", id="close-button"),
        )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "copy-reference-button":
            if not self.result.reference:
                self.notify("No reference to copy", severity="warning")
                return
            import pyperclip

            try:
                pyperclip.copy(self.result.reference)
            except pyperclip.PyperclipException as e:
                self.notify(f"Clipboard unavailable: {e}", severity="warning")
                return
            self.notify("Reference copied to clipboard!", severity="information")
        elif event.button.id == "new-transfer-button":
            self.dismiss("new")
        elif event.button.id == "close-button":
            self.dismiss(None)


class TransferErrorScreen(BaseModalScreen):
    def __init__(self, message: str, title: str = "Transfer Error"):
        super().__init__()
        self.message = message
        self.title_text = title

    def compose(self) -> ComposeResult:
        yield Label(f"❌ {self.title_text}", id="error-title")
        yield Static(f"[red]{self.message}[/red]", id="error-message")
        yield Button("OK", id="ok-button", variant="primary")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "ok-button":
            self.dismiss(None)
