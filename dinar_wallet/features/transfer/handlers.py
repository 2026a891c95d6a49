"""Transfer event handlers for Dinar Wallet TUI."""

from __future__ import annotations

import logging
import threading
from decimal import Decimal
from typing import TYPE_CHECKING, Any, cast

from textual.widgets import Button, DataTable, Input, Static

from dinar_wallet.features.transfer.flow import (
    DEFAULT_DESCRIPTION,
    TransferFlow,
    TransferStep,
)
from dinar_wallet.features.transfer.screen import (
    TransferConfirmScreen,
    TransferErrorScreen,
    TransferProcessingScreen,
    TransferSuccessScreen,
    format_dzd,
)
from dinar_wallet.features.transfer.service import RecipientResolver, TransferService
from dinar_wallet.models import RecipientCandidate, TransferResult

if TYPE_CHECKING:
    from dinar_wallet.__main__ import WalletApp

logger = logging.getLogger(__name__)

TRANSFER_INPUT_IDS = (
    "transfer-amount-input",
    "transfer-recipient-input",
    "transfer-description-input",
)


class TransferHandlersMixin:
    """Mixin class providing transfer-related event handlers for WalletApp."""

    transfer_flow: TransferFlow | None = None
    transfer_service: TransferService | None = None
    _transfer_processing_screen: TransferProcessingScreen | None = None
    _transfer_success_screen: TransferSuccessScreen | None = None
    _recipient_candidates: list[RecipientCandidate]

    def _init_transfer_flow(self: "WalletApp") -> None:
        self._recipient_candidates = []
        self.transfer_service = TransferService(self.wallet)
        resolver = RecipientResolver(
            self.transfer_service.search_recipients,
            limits=self.config.transfer_limits,
            on_change=lambda r: self.dispatch_to_ui(self._render_recipient_results),
        )
        self.transfer_flow = TransferFlow(
            self.transfer_service,
            resolver=resolver,
            limits=self.config.transfer_limits,
            on_change=lambda f: self.dispatch_to_ui(self._render_transfer_form),
            on_error=lambda message: self.dispatch_to_ui(
                self._show_transfer_error, message
            ),
            on_transfer=self._on_transfer_completed,
        )

    def handle_transfer_input_changed(self: "WalletApp", input_id: str, value: str) -> None:
        flow = self.transfer_flow
        if flow is None:
            return
        if input_id == "transfer-amount-input":
            flow.update_amount(value)
        elif input_id == "transfer-recipient-input":
            flow.update_recipient(value)
        elif input_id == "transfer-description-input":
            flow.update_description(value)

    def _render_transfer_form(self: "WalletApp") -> None:
        flow = self.transfer_flow
        if flow is None:
            return

        try:
            self._sync_input("#transfer-amount-input", flow.amount)
            self._sync_input("#transfer-recipient-input", flow.recipient)
            self._sync_input("#transfer-description-input", flow.description)

            balance = self.transfer_service.balance_dzd if self.transfer_service else None
            cast(Static, self.query_one("#transfer-balance")).update(
                f"Available: [bold]{format_dzd(balance)}[/bold]"
            )

            hint = cast(Static, self.query_one("#transfer-balance-after"))
            balance_after = flow.balance_after
            if balance_after is None:
                hint.update("")
            elif balance_after < 0:
                hint.update(f"[red]Balance after transfer: {format_dzd(balance_after)}[/red]")
            else:
                hint.update(f"[dim]Balance after transfer: {format_dzd(balance_after)}[/dim]")

            cast(Button, self.query_one("#transfer-next-button")).disabled = (
                flow.step is not TransferStep.FORM or not flow.can_proceed
            )
        except Exception as e:
            logger.debug(f"Transfer form not ready: {e}")

        if flow.step is TransferStep.FORM and self._transfer_success_screen is not None:
            screen = self._transfer_success_screen
            self._transfer_success_screen = None
            if screen.is_attached:
                screen.dismiss(None)

    def _sync_input(self: "WalletApp", selector: str, value: str) -> None:
        widget = cast(Input, self.query_one(selector))
        if widget.value != value:
            widget.value = value

    def _render_recipient_results(self: "WalletApp") -> None:
        flow = self.transfer_flow
        if flow is None:
            return
        resolver = flow.resolver
        try:
            table = cast(DataTable, self.query_one("#recipient-results"))
        except Exception:
            return

        table.clear(columns=True)
        self._recipient_candidates = list(resolver.results)
        if not resolver.show_results:
            table.display = False
            return

        table.display = True
        table.add_column("Name", key="name")
        table.add_column("Email", key="email")
        table.add_column("Account", key="account")
        if not self._recipient_candidates:
            table.add_row("[dim]No matching users[/dim]", "", "")
            return
        for index, candidate in enumerate(self._recipient_candidates):
            table.add_row(
                candidate.full_name,
                candidate.email,
                candidate.account_number or "",
                key=str(index),
            )

    def select_recipient_row(self: "WalletApp", row_key: Any) -> None:
        flow = self.transfer_flow
        if flow is None or row_key is None:
            return
        try:
            index = int(row_key)
        except (TypeError, ValueError):
            return
        if 0 <= index < len(self._recipient_candidates):
            flow.select_recipient(self._recipient_candidates[index])
            self._render_recipient_results()

    def show_transfer_confirmation(self: "WalletApp") -> None:
        flow = self.transfer_flow
        if flow is None:
            return
        validation = flow.next()
        if not validation.is_valid or flow.step is not TransferStep.CONFIRM:
            return

        selected = flow.resolver.selected
        balance = self.transfer_service.balance_dzd if self.transfer_service else None
        amount: Decimal = validation.normalized_value
        self.push_screen(
            TransferConfirmScreen(
                amount=amount,
                recipient=flow.recipient.strip(),
                description=flow.description.strip() or DEFAULT_DESCRIPTION,
                balance_after=balance - amount if balance is not None else None,
                recipient_name=selected.full_name if selected else None,
            ),
            self._on_transfer_confirm_dismissed,
        )

    def _on_transfer_confirm_dismissed(self: "WalletApp", confirmed: Any) -> None:
        flow = self.transfer_flow
        if flow is None:
            return
        if not confirmed:
            flow.back()
            return
        amount = flow.parsed_amount
        recipient = flow.recipient.strip()
        if not flow.start_processing():
            logger.info("Transfer already in progress; confirmation ignored")
            return
        self._submit_transfer_async(amount, recipient)

    def _submit_transfer_async(
        self: "WalletApp", amount: Decimal | None, recipient: str
    ) -> None:
        flow = self.transfer_flow
        processing = TransferProcessingScreen(amount or Decimal("0"), recipient)
        self._transfer_processing_screen = processing
        self.push_screen(processing)

        def worker() -> None:
            result = flow.execute()
            self.dispatch_to_ui(self._on_transfer_finished, result, amount, recipient)

        threading.Thread(target=worker, daemon=True).start()

    def _close_processing_screen(self: "WalletApp") -> None:
        screen = self._transfer_processing_screen
        self._transfer_processing_screen = None
        if screen is not None and screen.is_attached:
            screen.dismiss(None)

    def _on_transfer_finished(
        self: "WalletApp",
        result: TransferResult | None,
        amount: Decimal | None,
        recipient: str,
    ) -> None:
        self._close_processing_screen()
        if result is None:
            return
        success = TransferSuccessScreen(result, amount or Decimal("0"), recipient)
        self._transfer_success_screen = success
        self.push_screen(success, self._on_transfer_success_dismissed)
        self.refresh_transfer_history_async()

    def _on_transfer_success_dismissed(self: "WalletApp", action: Any) -> None:
        self._transfer_success_screen = None
        if action == "new" and self.transfer_flow is not None:
            self.transfer_flow.new_transfer()

    def _show_transfer_error(self: "WalletApp", message: str) -> None:
        self._close_processing_screen()
        self.push_screen(TransferErrorScreen(message))

    def _on_transfer_completed(self: "WalletApp", amount: Decimal, recipient: str) -> None:
        logger.info(f"Transfer of {amount} DZD completed")
        self.dispatch_to_ui(self.update_dashboard)

    def refresh_transfer_history_async(self: "WalletApp") -> None:
        service = self.transfer_service
        if service is None:
            return

        def worker() -> None:
            entries = service.get_recent_transfers()
            self.dispatch_to_ui(self._on_transfer_history_loaded, entries)

        threading.Thread(target=worker, daemon=True).start()

    def _on_transfer_history_loaded(self: "WalletApp", entries: list) -> None:
        try:
            table = cast(DataTable, self.query_one("#transfer-history-table"))
        except Exception:
            return
        table.clear(columns=True)
        table.add_column("Date", key="date")
        table.add_column("Direction", key="direction")
        table.add_column("Counterparty", key="counterparty")
        table.add_column("Amount", key="amount")
        table.add_column("Reference", key="reference")
        if not entries:
            table.add_row("[dim]No transfers yet[/dim]", "", "", "", "")
            return
        for entry in entries:
            table.add_row(
                entry.created_at.strftime("%Y-%m-%d %H:%M") if entry.created_at else "",
                entry.direction,
                entry.counterparty_name or entry.counterparty_email or "",
                format_dzd(entry.amount),
                entry.reference or "",
            )
