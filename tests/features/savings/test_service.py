"""Tests for savings goals, top-ups and investments."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from dinar_wallet.features.savings.service import (
    INVALID_AMOUNT_MESSAGE,
    SavingsService,
    investment_end_date,
)
from dinar_wallet.models import Balance, RemoteResult, SavingsGoal


@pytest.fixture
def goal():
    return SavingsGoal(
        id="g1",
        user_id="u1",
        name="Hajj",
        target_amount=Decimal("10000"),
        current_amount=Decimal("9000"),
    )


@pytest.fixture
def wallet(goal):
    wallet = MagicMock()
    wallet.balance = Balance(user_id="u1", dzd=Decimal("15000"))
    wallet.investment_balance = Decimal("2000")
    wallet.savings_goals = [goal]
    wallet.investments = []
    wallet.update_balance.side_effect = lambda balances: RemoteResult.success(
        Balance(user_id="u1", dzd=balances["dzd"])
    )
    wallet.update_goal.side_effect = lambda goal_id, updates: RemoteResult.success(goal)
    wallet.update_investment_balance.return_value = RemoteResult.success(wallet.balance)
    wallet.add_transaction.return_value = RemoteResult.success(None)
    wallet.add_notification.return_value = RemoteResult.success(None)
    return wallet


@pytest.fixture
def service(wallet):
    return SavingsService(wallet)


@pytest.mark.unit
class TestGoals:
    def test_create_goal(self, service, wallet):
        service.create_goal("  Car ", "250,000", "2027-01-01", category="travel")
        payload = wallet.add_savings_goal.call_args.args[0]
        assert payload["name"] == "Car"
        assert payload["target_amount"] == Decimal("250000")
        assert payload["current_amount"] == Decimal("0")
        assert payload["category"] == "travel"

    def test_deposit_moves_funds(self, service, wallet):
        service.deposit_to_goal("g1", "500")

        wallet.update_balance.assert_called_once_with({"dzd": Decimal("14500")})
        wallet.update_goal.assert_called_once_with("g1", {"current_amount": Decimal("9500")})
        transaction = wallet.add_transaction.call_args.args[0]
        assert transaction["amount"] == Decimal("500")
        assert transaction["description"] == "Savings deposit: Hajj"

    def test_deposit_reaching_target_completes_goal(self, service, wallet):
        service.deposit_to_goal("g1", "1000")
        wallet.update_goal.assert_called_once_with(
            "g1", {"current_amount": Decimal("10000"), "status": "completed"}
        )

    def test_deposit_insufficient_balance(self, service, wallet):
        result = service.deposit_to_goal("g1", "20000")
        assert result.error.message == "Insufficient balance for this deposit"
        wallet.update_balance.assert_not_called()

    def test_deposit_invalid_amount(self, service, wallet):
        assert service.deposit_to_goal("g1", "-1").error.message == INVALID_AMOUNT_MESSAGE

    def test_deposit_unknown_goal(self, service):
        assert service.deposit_to_goal("nope", "100").error.message == "Savings goal not found"

    def test_balance_failure_skips_goal_update(self, service, wallet):
        wallet.update_balance.side_effect = None
        wallet.update_balance.return_value = RemoteResult.failure("timeout")

        result = service.deposit_to_goal("g1", "100")

        assert result.error.message == "timeout"
        wallet.update_goal.assert_not_called()


@pytest.mark.unit
class TestAddMoney:
    def test_top_up(self, service, wallet):
        result = service.add_money("1,000")

        assert result.data.dzd == Decimal("16000")
        assert wallet.add_transaction.call_args.args[0]["type"] == "recharge"
        notification = wallet.add_notification.call_args.args[0]
        assert notification["message"] == "1,000 DZD added to your wallet"

    def test_invalid(self, service, wallet):
        assert service.add_money("zero").error.message == INVALID_AMOUNT_MESSAGE
        wallet.update_balance.assert_not_called()

    def test_log_failure_does_not_fail_top_up(self, service, wallet):
        wallet.add_transaction.return_value = RemoteResult.failure("insert failed")
        assert service.add_money("100").ok


@pytest.mark.unit
class TestInvestments:
    def test_invest(self, service, wallet):
        service.invest("5000")
        wallet.update_investment_balance.assert_called_once_with(Decimal("5000"), "add")
        assert wallet.add_transaction.call_args.args[0]["description"] == "Investment"

    def test_invest_more_than_balance(self, service, wallet):
        result = service.invest("20000")
        assert result.error.message == "Insufficient balance for this investment"
        wallet.update_investment_balance.assert_not_called()

    def test_withdraw(self, service, wallet):
        service.withdraw_investment("2000")
        wallet.update_investment_balance.assert_called_once_with(Decimal("2000"), "subtract")
        assert wallet.add_transaction.call_args.args[0]["description"] == "Investment return"

    def test_withdraw_more_than_invested(self, service, wallet):
        assert service.withdraw_investment("2500").error.message == "Insufficient investment balance"

    def test_create_investment_derives_end_date(self, service, wallet):
        start = datetime(2026, 1, 1, tzinfo=timezone.utc)
        service.create_investment("monthly", "1000", "4.5", start_date=start)

        payload = wallet.add_investment.call_args.args[0]
        assert payload["amount"] == Decimal("1000")
        assert payload["profit_rate"] == Decimal("4.5")
        assert payload["end_date"] == start + timedelta(days=30)

    def test_end_date_periods(self):
        start = datetime(2026, 1, 1, tzinfo=timezone.utc)
        assert investment_end_date("weekly", start) == start + timedelta(days=7)
        assert investment_end_date("yearly", start) == start + timedelta(days=365)
        assert investment_end_date("unknown", start) == start + timedelta(days=30)
