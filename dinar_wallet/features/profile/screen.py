"""Profile modal screens for Dinar Wallet."""

from typing import cast

from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.widgets import Button, Input, Label, Static

from dinar_wallet.features.transfer.screen import BaseModalScreen
from dinar_wallet.models import UserProfile


class EditProfileScreen(BaseModalScreen):
    def __init__(self, profile: UserProfile):
        super().__init__()
        self.profile = profile

    def compose(self) -> ComposeResult:
        yield Label("👤 Edit Profile", id="profile-edit-title")
        yield Static(f"[dim]{self.profile.email}[/dim]")
        yield Label("Full name")
        yield Input(value=self.profile.full_name, id="profile-name-input")
        yield Label("Phone")
        yield Input(value=self.profile.phone or "", id="profile-phone-input")
        yield Label("Address")
        yield Input(value=self.profile.address or "", id="profile-address-input")
        yield Horizontal(
            Button("✓ Save", id="profile-save-button", variant="primary"),
            Button("✗ Cancel", id="profile-cancel-button"),
        )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "profile-save-button":
            self.dismiss(
                {
                    "full_name": cast(Input, self.query_one("#profile-name-input")).value,
                    "phone": cast(Input, self.query_one("#profile-phone-input")).value,
                    "address": cast(Input, self.query_one("#profile-address-input")).value,
                }
            )
        elif event.button.id == "profile-cancel-button":
            self.dismiss(None)
