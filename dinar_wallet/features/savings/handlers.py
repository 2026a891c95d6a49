"""Savings and investment event handlers for Dinar Wallet TUI."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any, Callable, cast

from textual.widgets import DataTable, Static

from dinar_wallet.features.savings.screen import (
    AmountInputScreen,
    CreateGoalScreen,
    CreateInvestmentScreen,
)
from dinar_wallet.features.savings.service import SavingsService
from dinar_wallet.features.transfer.screen import format_dzd
from dinar_wallet.models import RemoteResult, SavingsGoal

if TYPE_CHECKING:
    from dinar_wallet.__main__ import WalletApp

logger = logging.getLogger(__name__)


class SavingsHandlersMixin:
    """Mixin class providing savings-related event handlers for WalletApp."""

    savings_service: SavingsService | None = None

    def update_savings(self: "WalletApp") -> None:
        service = self.savings_service
        if service is None:
            return
        try:
            summary = cast(Static, self.query_one("#investment-summary"))
            goals_table = cast(DataTable, self.query_one("#goals-table"))
            investments_table = cast(DataTable, self.query_one("#investments-table"))
        except Exception:
            return

        summary.update(
            f"Available: [bold]{format_dzd(service.available_dzd)}[/bold]   "
            f"Invested: [bold]{format_dzd(self.wallet.investment_balance)}[/bold]"
        )

        goals_table.clear(columns=True)
        goals_table.add_column("Goal", key="name")
        goals_table.add_column("Saved", key="saved")
        goals_table.add_column("Target", key="target")
        goals_table.add_column("Progress", key="progress")
        goals_table.add_column("Deadline", key="deadline")
        goals = service.get_goals()
        if not goals:
            goals_table.add_row("[dim]No savings goals[/dim]", "", "", "", "")
        for goal in goals:
            goals_table.add_row(
                goal.name,
                format_dzd(goal.current_amount),
                format_dzd(goal.target_amount),
                f"{goal.progress:.0%}",
                goal.deadline.strftime("%Y-%m-%d") if goal.deadline else "",
                key=goal.id,
            )

        investments_table.clear(columns=True)
        investments_table.add_column("Plan", key="plan")
        investments_table.add_column("Amount", key="amount")
        investments_table.add_column("Rate", key="rate")
        investments_table.add_column("Status", key="status")
        investments_table.add_column("Ends", key="ends")
        investments = service.get_investments()
        if not investments:
            investments_table.add_row("[dim]No investments[/dim]", "", "", "", "")
        for investment in investments:
            investments_table.add_row(
                investment.type.title(),
                format_dzd(investment.amount),
                f"{investment.profit_rate}%",
                investment.status,
                investment.end_date.strftime("%Y-%m-%d") if investment.end_date else "",
            )

    def _get_selected_goal(self: "WalletApp") -> SavingsGoal | None:
        if self.savings_service is None:
            return None
        table = cast(DataTable, self.query_one("#goals-table"))
        if table.row_count == 0:
            return None
        try:
            row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
        except Exception:
            return None
        if row_key is None or row_key.value is None:
            return None
        return self.savings_service.get_goal(row_key.value)

    def show_create_goal_dialog(self: "WalletApp") -> None:
        def on_submit(values: Any) -> None:
            if not values:
                return
            self._run_savings_action(
                lambda: self.savings_service.create_goal(**values), "Savings goal created"
            )

        self.push_screen(CreateGoalScreen(), on_submit)

    def show_goal_deposit_dialog(self: "WalletApp") -> None:
        goal = self._get_selected_goal()
        if goal is None:
            self.notify("Select a savings goal first", severity="warning")
            return

        def on_submit(amount: Any) -> None:
            if not amount:
                return
            self._run_savings_action(
                lambda: self.savings_service.deposit_to_goal(goal.id, amount),
                f"Deposited into {goal.name}",
            )

        self.push_screen(
            AmountInputScreen(
                f"💰 Deposit to {goal.name}",
                f"Remaining to target: {format_dzd(goal.remaining)}",
            ),
            on_submit,
        )

    def show_add_money_dialog(self: "WalletApp") -> None:
        def on_submit(amount: Any) -> None:
            if not amount:
                return
            self._run_savings_action(
                lambda: self.savings_service.add_money(amount), "Wallet topped up"
            )

        self.push_screen(AmountInputScreen("➕ Add Money"), on_submit)

    def show_invest_dialog(self: "WalletApp") -> None:
        def on_submit(amount: Any) -> None:
            if not amount:
                return
            self._run_savings_action(
                lambda: self.savings_service.invest(amount), "Funds invested"
            )

        self.push_screen(AmountInputScreen("📈 Invest"), on_submit)

    def show_withdraw_investment_dialog(self: "WalletApp") -> None:
        def on_submit(amount: Any) -> None:
            if not amount:
                return
            self._run_savings_action(
                lambda: self.savings_service.withdraw_investment(amount),
                "Investment returned to balance",
            )

        self.push_screen(
            AmountInputScreen(
                "📉 Withdraw Investment",
                f"Invested: {format_dzd(self.wallet.investment_balance)}",
            ),
            on_submit,
        )

    def show_create_investment_dialog(self: "WalletApp") -> None:
        def on_submit(values: Any) -> None:
            if not values:
                return
            self._run_savings_action(
                lambda: self.savings_service.create_investment(
                    values["type"], values["amount"], values["profit_rate"]
                ),
                "Investment created",
            )

        self.push_screen(CreateInvestmentScreen(), on_submit)

    def _run_savings_action(
        self: "WalletApp", action: Callable[[], RemoteResult], success_message: str
    ) -> None:
        def worker() -> None:
            try:
                result = action()
            except Exception as e:
                logger.error(f"Savings action failed: {e}", exc_info=True)
                result = RemoteResult.failure(str(e))
            self.dispatch_to_ui(self._on_savings_action_finished, result, success_message)

        threading.Thread(target=worker, daemon=True).start()

    def _on_savings_action_finished(
        self: "WalletApp", result: RemoteResult, success_message: str
    ) -> None:
        if result.error:
            self.notify(result.error.message, severity="error")
            return
        self.update_savings()
        self.update_dashboard()
        self.notify(success_message, severity="information")
