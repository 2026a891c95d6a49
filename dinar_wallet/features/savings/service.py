"""Savings goals, wallet top-ups and investments for Dinar Wallet."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Protocol

from dinar_wallet.models import (
    Balance,
    Investment,
    RemoteResult,
    SavingsGoal,
    Transaction,
)
from dinar_wallet.shared.validation import parse_decimal

logger = logging.getLogger(__name__)

INVALID_AMOUNT_MESSAGE = "Amount must be greater than zero"

INVESTMENT_PERIODS = {
    "weekly": timedelta(days=7),
    "monthly": timedelta(days=30),
    "quarterly": timedelta(days=91),
    "yearly": timedelta(days=365),
}


def investment_end_date(investment_type: str, start_date: datetime) -> datetime:
    return start_date + INVESTMENT_PERIODS.get(investment_type, timedelta(days=30))


class WalletProtocol(Protocol):
    """Protocol defining wallet interface needed for savings and investments."""

    balance: Balance | None
    investment_balance: Decimal
    savings_goals: list[SavingsGoal]
    investments: list[Investment]

    def update_balance(self, balances: dict[str, Any]) -> RemoteResult[Balance]: ...
    def update_investment_balance(
        self, amount: Decimal, operation: str
    ) -> RemoteResult[Balance]: ...
    def add_transaction(self, transaction: dict[str, Any]) -> RemoteResult[Transaction]: ...
    def add_savings_goal(self, goal: dict[str, Any]) -> RemoteResult[SavingsGoal]: ...
    def update_goal(
        self, goal_id: str, updates: dict[str, Any]
    ) -> RemoteResult[SavingsGoal]: ...
    def add_investment(self, investment: dict[str, Any]) -> RemoteResult[Investment]: ...
    def add_notification(self, notification: dict[str, Any]) -> RemoteResult[Any]: ...


def _positive_amount(value: Any) -> Decimal | None:
    amount = parse_decimal(value)
    if amount is None or amount <= 0:
        return None
    return amount


class SavingsService:
    """Service for handling savings and investment business logic."""

    def __init__(self, wallet: WalletProtocol):
        self.wallet = wallet

    @property
    def available_dzd(self) -> Decimal:
        balance = self.wallet.balance
        return balance.dzd if balance is not None else Decimal("0")

    def get_goals(self) -> list[SavingsGoal]:
        return list(self.wallet.savings_goals)

    def get_goal(self, goal_id: str) -> SavingsGoal | None:
        for goal in self.wallet.savings_goals:
            if goal.id == goal_id:
                return goal
        return None

    def get_investments(self) -> list[Investment]:
        return list(self.wallet.investments)

    def create_goal(
        self,
        name: str,
        target_amount: str | Decimal,
        deadline: datetime | str,
        category: str | None = None,
        icon: str | None = None,
        color: str | None = None,
    ) -> RemoteResult[SavingsGoal]:
        return self.wallet.add_savings_goal(
            {
                "name": name.strip() if name else None,
                "target_amount": parse_decimal(target_amount),
                "current_amount": Decimal("0"),
                "deadline": deadline,
                "category": category,
                "icon": icon,
                "color": color,
            }
        )

    def deposit_to_goal(self, goal_id: str, amount: str | Decimal) -> RemoteResult[SavingsGoal]:
        """Move DZD from the main balance into a savings goal."""
        goal = self.get_goal(goal_id)
        if goal is None:
            return RemoteResult.failure("Savings goal not found")

        value = _positive_amount(amount)
        if value is None:
            return RemoteResult.failure(INVALID_AMOUNT_MESSAGE)

        available = self.available_dzd
        if value > available:
            return RemoteResult.failure("Insufficient balance for this deposit")

        balance_result = self.wallet.update_balance({"dzd": available - value})
        if balance_result.error:
            return RemoteResult(error=balance_result.error)

        new_amount = goal.current_amount + value
        updates: dict[str, Any] = {"current_amount": new_amount}
        if new_amount >= goal.target_amount:
            updates["status"] = "completed"
        goal_result = self.wallet.update_goal(goal_id, updates)
        if goal_result.error:
            return goal_result

        transaction = self.wallet.add_transaction(
            {
                "type": "transfer",
                "amount": value,
                "currency": "dzd",
                "description": f"Savings deposit: {goal.name}",
                "status": "completed",
            }
        )
        if transaction.error:
            logger.error(f"Failed to log savings deposit: {transaction.error.message}")
        return goal_result

    def add_money(self, amount: str | Decimal) -> RemoteResult[Balance]:
        """Top up the DZD balance and record it."""
        value = _positive_amount(amount)
        if value is None:
            return RemoteResult.failure(INVALID_AMOUNT_MESSAGE)

        result = self.wallet.update_balance({"dzd": self.available_dzd + value})
        if result.error:
            return result

        transaction = self.wallet.add_transaction(
            {
                "type": "recharge",
                "amount": value,
                "currency": "dzd",
                "description": "Wallet top-up",
                "status": "completed",
            }
        )
        if transaction.error:
            logger.error(f"Failed to log top-up: {transaction.error.message}")

        notification = self.wallet.add_notification(
            {
                "type": "success",
                "title": "Top-up successful",
                "message": f"{value:,} DZD added to your wallet",
                "is_read": False,
            }
        )
        if notification.error:
            logger.warning(f"Failed to record top-up notification: {notification.error.message}")
        return result

    def invest(self, amount: str | Decimal) -> RemoteResult[Balance]:
        """Move DZD into the investment balance."""
        value = _positive_amount(amount)
        if value is None:
            return RemoteResult.failure(INVALID_AMOUNT_MESSAGE)
        if value > self.available_dzd:
            return RemoteResult.failure("Insufficient balance for this investment")

        result = self.wallet.update_investment_balance(value, "add")
        if result.error:
            return result
        self._log_investment(value, "Investment")
        return result

    def withdraw_investment(self, amount: str | Decimal) -> RemoteResult[Balance]:
        """Return funds from the investment balance to DZD."""
        value = _positive_amount(amount)
        if value is None:
            return RemoteResult.failure(INVALID_AMOUNT_MESSAGE)
        if value > self.wallet.investment_balance:
            return RemoteResult.failure("Insufficient investment balance")

        result = self.wallet.update_investment_balance(value, "subtract")
        if result.error:
            return result
        self._log_investment(value, "Investment return")
        return result

    def _log_investment(self, amount: Decimal, description: str) -> None:
        transaction = self.wallet.add_transaction(
            {
                "type": "investment",
                "amount": amount,
                "currency": "dzd",
                "description": description,
                "status": "completed",
            }
        )
        if transaction.error:
            logger.error(f"Failed to log investment: {transaction.error.message}")

    def create_investment(
        self,
        investment_type: str,
        amount: str | Decimal,
        profit_rate: str | Decimal,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> RemoteResult[Investment]:
        start_date = start_date or datetime.now(timezone.utc)
        end_date = end_date or investment_end_date(investment_type, start_date)
        return self.wallet.add_investment(
            {
                "type": investment_type,
                "amount": parse_decimal(amount),
                "profit_rate": parse_decimal(profit_rate),
                "start_date": start_date,
                "end_date": end_date,
            }
        )
