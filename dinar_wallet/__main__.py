"""Main application entry point for Dinar Wallet."""

import logging
import threading
from typing import Any, Callable, cast

from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal
from textual.widgets import (
    Button,
    DataTable,
    Footer,
    Header,
    Input,
    Label,
    Static,
    Tab,
    Tabs,
)

from dinar_wallet.config import AppConfig, ConfigurationError
from dinar_wallet.features.cards.handlers import CardHandlersMixin
from dinar_wallet.features.cards.service import CardService
from dinar_wallet.features.profile.handlers import ProfileHandlersMixin
from dinar_wallet.features.profile.service import ProfileService
from dinar_wallet.features.savings.handlers import SavingsHandlersMixin
from dinar_wallet.features.savings.service import SavingsService
from dinar_wallet.features.transfer.handlers import (
    TRANSFER_INPUT_IDS,
    TransferHandlersMixin,
)
from dinar_wallet.features.transfer.screen import TransferErrorScreen, format_dzd
from dinar_wallet.gateway import BackendGateway
from dinar_wallet.models import CURRENCIES, RemoteResult
from dinar_wallet.shared.logging import get_logger, get_user_friendly_error, setup_logging
from dinar_wallet.shared.network import NetworkClient
from dinar_wallet.styles import CSS
from dinar_wallet.wallet import Wallet

logger = logging.getLogger(__name__)

TAB_CONTAINERS = {
    "dashboard": "dashboard-tab",
    "transfer": "transfer-tab",
    "cards": "cards-tab",
    "savings": "savings-tab",
    "profile": "profile-tab",
}


class WalletApp(
    TransferHandlersMixin,
    CardHandlersMixin,
    SavingsHandlersMixin,
    ProfileHandlersMixin,
    App,
):
    CSS = CSS
    TITLE = "Dinar Wallet"

    BINDINGS = [
        ("ctrl+r", "refresh", "Refresh"),
        ("ctrl+q", "quit", "Quit"),
        ("tab", "focus_next", "Next"),
        ("shift+tab", "focus_previous", "Previous"),
    ]

    config: AppConfig | None = None
    wallet: Wallet | None = None
    _ui_thread_id: int | None = None
    _active_tab: str = "dashboard"

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static("[dim]● Starting...[/dim]", id="status-bar")
        self.tabs = Tabs(
            Tab("Dashboard", id="dashboard-tab-btn"),
            Tab("Transfer", id="transfer-tab-btn"),
            Tab("Cards", id="cards-tab-btn"),
            Tab("Savings", id="savings-tab-btn"),
            Tab("Profile", id="profile-tab-btn"),
        )
        yield self.tabs

        with Container(id="dashboard-tab"):
            yield Label("📊 Dashboard", id="dashboard-title")
            yield Static(id="balance-summary")
            yield Horizontal(
                Button("➕ Add Money", id="add-money-button"),
                Button("🔄 Refresh", id="refresh-dashboard-button"),
            )
            yield Label("Recent Transactions", classes="section-label")
            yield DataTable(id="transactions-table")

        with Container(id="transfer-tab"):
            yield Label("⚡ Instant Transfer", id="transfer-title")
            yield Static(
                "Send DZD instantly to another wallet by email or account number.",
                id="transfer-helper",
            )
            yield Static(id="transfer-balance")
            yield Label("Amount (DZD)")
            yield Input(placeholder="e.g. 2500", id="transfer-amount-input")
            yield Static(id="transfer-balance-after")
            yield Label("Recipient")
            yield Input(
                placeholder="Email or account number", id="transfer-recipient-input"
            )
            yield DataTable(id="recipient-results")
            yield Label("Description (optional)")
            yield Input(placeholder="Instant transfer", id="transfer-description-input")
            yield Horizontal(
                Button(
                    "➡ Next", id="transfer-next-button", variant="primary", disabled=True
                ),
                Button("✗ Clear", id="transfer-clear-button"),
                Button("🔄 History", id="refresh-transfer-history-button"),
                id="transfer-actions-row",
            )
            yield Label("Recent Transfers", classes="section-label")
            yield DataTable(id="transfer-history-table")

        with Container(id="cards-tab"):
            yield Label("💳 Cards", id="cards-title")
            yield DataTable(id="cards-table")
            yield Horizontal(
                Button("❄ Freeze / Unfreeze", id="freeze-card-button"),
                Button("🔧 Spending Limit", id="card-limit-button"),
                id="card-actions-row",
            )

        with Container(id="savings-tab"):
            yield Label("🏦 Savings & Investments", id="savings-title")
            yield Static(id="investment-summary")
            yield Label("Savings Goals", classes="section-label")
            yield DataTable(id="goals-table")
            yield Horizontal(
                Button("➕ New Goal", id="create-goal-button"),
                Button("💰 Deposit", id="goal-deposit-button"),
                id="goal-actions-row",
            )
            yield Label("Investments", classes="section-label")
            yield DataTable(id="investments-table")
            yield Horizontal(
                Button("📈 Invest", id="invest-button"),
                Button("📉 Withdraw", id="withdraw-investment-button"),
                Button("➕ New Plan", id="create-investment-button"),
                id="savings-actions-row",
            )

        with Container(id="profile-tab"):
            yield Label("👤 Profile", id="profile-title")
            yield Static(id="profile-details")
            yield Button("✎ Edit Profile", id="edit-profile-button")
            yield Label("Notifications", classes="section-label")
            yield DataTable(id="notifications-table")
            yield Horizontal(
                Button("✓ Mark Read", id="mark-notification-read-button"),
                Button("✓✓ Mark All Read", id="mark-all-read-button"),
                id="profile-actions-row",
            )
            yield Label("Referrals", classes="section-label")
            yield Static(id="referral-stats")
            yield Button("🔄 Refresh Referrals", id="refresh-referrals-button")

        yield Footer()

    def on_mount(self) -> None:
        self._ui_thread_id = threading.get_ident()
        logger.info("[on_mount] Application mounting")

        for table_id in (
            "#transactions-table",
            "#recipient-results",
            "#transfer-history-table",
            "#cards-table",
            "#goals-table",
            "#investments-table",
            "#notifications-table",
        ):
            cast(DataTable, self.query_one(table_id)).cursor_type = "row"
        self.query_one("#recipient-results").display = False
        self.action_switch_tab("dashboard")

        try:
            self.config = AppConfig.from_environment()
        except ConfigurationError as e:
            logger.error(f"[on_mount] Configuration error: {e}")
            self._set_status(f"[red]● {e}[/red]")
            self.push_screen(TransferErrorScreen(str(e), title="Configuration Error"))
            return

        client = NetworkClient(
            self.config.supabase_url,
            self.config.supabase_anon_key,
            access_token=self.config.access_token,
            timeout_config=self.config.timeout_config,
        )
        self.wallet = Wallet(
            BackendGateway(client),
            self.config.user_id,
            transfer_limits=self.config.transfer_limits,
        )
        self.card_service = CardService(self.wallet)
        self.savings_service = SavingsService(self.wallet)
        self.profile_service = ProfileService(self.wallet)
        self._init_transfer_flow()
        self.wallet.add_listener(self._on_wallet_changed)
        logger.info(f"[on_mount] Backend: {self.config.supabase_url}")

        if not self.config.user_id:
            self._set_status("[yellow]● Not signed in[/yellow]")
            self.notify("No signed-in user; set DINAR_WALLET_USER_ID", severity="warning")
            return

        self.refresh_data_async()

    def dispatch_to_ui(self, callback: Callable[..., Any], *args: Any) -> None:
        """Run callback on the UI thread, directly when already there."""
        if threading.get_ident() == self._ui_thread_id:
            callback(*args)
            return
        try:
            self.call_from_thread(callback, *args)
        except RuntimeError as e:
            logger.debug(f"UI dispatch skipped: {e}")

    def _set_status(self, text: str) -> None:
        try:
            cast(Static, self.query_one("#status-bar")).update(text)
        except Exception as e:
            logger.debug(f"Status bar not ready: {e}")

    def _on_wallet_changed(self, wallet: Wallet) -> None:
        self.dispatch_to_ui(self.refresh_views)

    def refresh_views(self) -> None:
        wallet = self.wallet
        if wallet is None:
            return
        if wallet.loading:
            self._set_status("[yellow]● Loading...[/yellow]")
        elif wallet.error:
            message, suggestion = get_user_friendly_error(wallet.error)
            if suggestion is None:
                message = wallet.error
            self._set_status(f"[red]● {message}[/red]")
        else:
            self._set_status("[green]● Connected[/green]")

        self.update_dashboard()
        self.update_cards()
        self.update_savings()
        self.update_profile_tab()
        self._render_transfer_form()

    def refresh_data_async(self) -> None:
        wallet = self.wallet
        if wallet is None:
            return

        def worker() -> None:
            result = wallet.load_user_data()
            self.dispatch_to_ui(self._on_data_loaded, result)

        threading.Thread(target=worker, daemon=True).start()

    def _on_data_loaded(self, result: RemoteResult) -> None:
        if result.error:
            self.notify(f"Failed to load wallet: {result.error.message}", severity="error")
            return
        logger.info("[_on_data_loaded] Wallet data loaded")
        self.refresh_views()
        self.refresh_transfer_history_async()
        self.refresh_referral_stats_async()

    def action_refresh(self) -> None:
        self.refresh_data_async()

    def on_tabs_tab_activated(self, event: Tabs.TabActivated) -> None:
        if not event.tab or not event.tab.id:
            return
        tab_name = event.tab.id.replace("-tab-btn", "")
        self.action_switch_tab(tab_name)

    def action_switch_tab(self, tab_name: str) -> None:
        target = TAB_CONTAINERS.get(tab_name)
        if not target:
            logger.warning(f"[action_switch_tab] Unknown tab name: {tab_name}")
            return
        for name, container_id in TAB_CONTAINERS.items():
            self.query_one(f"#{container_id}").display = name == tab_name
        self._active_tab = tab_name

        if tab_name == "dashboard":
            self.update_dashboard()
        elif tab_name == "transfer":
            self._render_transfer_form()
            self.refresh_transfer_history_async()
        elif tab_name == "cards":
            self.update_cards()
        elif tab_name == "savings":
            self.update_savings()
        elif tab_name == "profile":
            self.update_profile_tab()

    def update_dashboard(self) -> None:
        try:
            summary = cast(Static, self.query_one("#balance-summary"))
            table = cast(DataTable, self.query_one("#transactions-table"))
        except Exception:
            return
        wallet = self.wallet
        balance = wallet.balance if wallet else None
        if balance is None:
            summary.update("[dim]Balance not loaded[/dim]")
        else:
            lines = [f"[bold]{format_dzd(balance.dzd)}[/bold]"]
            for currency in CURRENCIES:
                if currency == "dzd":
                    continue
                lines.append(f"{currency.upper()}: {balance.get(currency):,.2f}")
            lines.append(f"Invested: {format_dzd(wallet.investment_balance)}")
            summary.update("\n".join(lines))

        table.clear(columns=True)
        table.add_column("Date", key="date")
        table.add_column("Type", key="type")
        table.add_column("Description", key="description")
        table.add_column("Amount", key="amount")
        table.add_column("Status", key="status")
        transactions = wallet.transactions[:10] if wallet else []
        if not transactions:
            table.add_row("[dim]No transactions yet[/dim]", "", "", "", "")
            return
        for transaction in transactions:
            sign = "-" if transaction.is_outgoing else "+"
            color = "red" if transaction.is_outgoing else "green"
            table.add_row(
                transaction.created_at.strftime("%Y-%m-%d %H:%M")
                if transaction.created_at
                else "",
                transaction.type,
                transaction.description,
                f"[{color}]{sign}{transaction.amount:,.2f} "
                f"{transaction.currency.upper()}[/{color}]",
                transaction.status,
                key=transaction.id,
            )

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id in TRANSFER_INPUT_IDS:
            self.handle_transfer_input_changed(event.input.id, event.value)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id in TRANSFER_INPUT_IDS:
            flow = self.transfer_flow
            if flow is not None and flow.can_proceed:
                self.show_transfer_confirmation()

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        if event.data_table.id == "recipient-results":
            self.select_recipient_row(event.row_key.value)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        # Modal screens handle their own buttons.
        if event.button.screen is not self.screen_stack[0]:
            return
        button_id = event.button.id
        logger.info(f"[on_button_pressed] Button ID: {button_id}")

        if self.wallet is None:
            self.notify("Wallet is not configured", severity="error")
            return

        if button_id == "transfer-next-button":
            self.show_transfer_confirmation()
        elif button_id == "transfer-clear-button":
            if self.transfer_flow is not None:
                self.transfer_flow.reset()
        elif button_id == "refresh-transfer-history-button":
            self.refresh_transfer_history_async()
        elif button_id == "refresh-dashboard-button":
            self.refresh_data_async()
        elif button_id == "add-money-button":
            self.show_add_money_dialog()
        elif button_id == "freeze-card-button":
            self.toggle_selected_card_freeze()
        elif button_id == "card-limit-button":
            self.change_selected_card_limit()
        elif button_id == "create-goal-button":
            self.show_create_goal_dialog()
        elif button_id == "goal-deposit-button":
            self.show_goal_deposit_dialog()
        elif button_id == "invest-button":
            self.show_invest_dialog()
        elif button_id == "withdraw-investment-button":
            self.show_withdraw_investment_dialog()
        elif button_id == "create-investment-button":
            self.show_create_investment_dialog()
        elif button_id == "edit-profile-button":
            self.show_edit_profile_dialog()
        elif button_id == "mark-notification-read-button":
            self.mark_selected_notification_read()
        elif button_id == "mark-all-read-button":
            self.mark_all_notifications_read()
        elif button_id == "refresh-referrals-button":
            self.refresh_referral_stats_async()
        else:
            logger.warning(f"[on_button_pressed] Unknown button ID: {button_id}")

    def on_unmount(self) -> None:
        if self.wallet is not None:
            self.wallet.remove_listener(self._on_wallet_changed)
        if self.transfer_flow is not None:
            self.transfer_flow.on_change = None
            self.transfer_flow.resolver.clear()


def main():
    """Entry point for the application."""
    setup_logging()
    get_logger(__name__).info("Dinar Wallet starting")
    app = WalletApp()
    app.run()


if __name__ == "__main__":
    main()
