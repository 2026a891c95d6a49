"""Card event handlers for Dinar Wallet TUI."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any, Callable, cast

from textual.widgets import DataTable

from dinar_wallet.features.cards.screen import FreezeCardScreen, SpendingLimitScreen
from dinar_wallet.features.cards.service import CardService
from dinar_wallet.features.transfer.screen import format_dzd
from dinar_wallet.models import Card, RemoteResult

if TYPE_CHECKING:
    from dinar_wallet.__main__ import WalletApp

logger = logging.getLogger(__name__)


class CardHandlersMixin:
    """Mixin class providing card-related event handlers for WalletApp."""

    card_service: CardService | None = None

    def update_cards(self: "WalletApp") -> None:
        try:
            table = cast(DataTable, self.query_one("#cards-table"))
        except Exception:
            return
        table.clear(columns=True)
        table.add_column("Type", key="type")
        table.add_column("Number", key="number")
        table.add_column("Status", key="status")
        table.add_column("Spending Limit", key="limit")
        cards = self.card_service.get_cards() if self.card_service else []
        if not cards:
            table.add_row("[dim]No cards[/dim]", "", "", "")
            return
        for card in cards:
            status = "[cyan]❄ Frozen[/cyan]" if card.is_frozen else "[green]Active[/green]"
            table.add_row(
                card.card_type.title(),
                card.masked_number,
                status,
                format_dzd(card.spending_limit),
                key=card.id,
            )

    def _get_selected_card(self: "WalletApp") -> Card | None:
        if self.card_service is None:
            return None
        table = cast(DataTable, self.query_one("#cards-table"))
        if table.row_count == 0:
            return None
        try:
            row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
        except Exception:
            return None
        if row_key is None or row_key.value is None:
            return None
        return self.card_service.get_card(row_key.value)

    def toggle_selected_card_freeze(self: "WalletApp") -> None:
        card = self._get_selected_card()
        if card is None:
            self.notify("Select a card first", severity="warning")
            return

        def on_confirm(confirmed: Any) -> None:
            if not confirmed:
                return
            self._run_card_action(
                lambda: self.card_service.set_frozen(card.id, not card.is_frozen),
                "Card unfrozen" if card.is_frozen else "Card frozen",
            )

        self.push_screen(FreezeCardScreen(card), on_confirm)

    def change_selected_card_limit(self: "WalletApp") -> None:
        card = self._get_selected_card()
        if card is None:
            self.notify("Select a card first", severity="warning")
            return

        def on_submit(value: Any) -> None:
            if not value:
                return
            self._run_card_action(
                lambda: self.card_service.set_spending_limit(card.id, value),
                "Spending limit updated",
            )

        self.push_screen(SpendingLimitScreen(card), on_submit)

    def _run_card_action(
        self: "WalletApp", action: Callable[[], RemoteResult], success_message: str
    ) -> None:
        def worker() -> None:
            result = action()
            self.dispatch_to_ui(self._on_card_action_finished, result, success_message)

        threading.Thread(target=worker, daemon=True).start()

    def _on_card_action_finished(
        self: "WalletApp", result: RemoteResult, success_message: str
    ) -> None:
        if result.error:
            self.notify(result.error.message, severity="error")
            return
        self.update_cards()
        self.notify(success_message, severity="information")
