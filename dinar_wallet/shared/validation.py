"""Validation of records before they are written to the backend."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any

TRANSACTION_TYPES = ("recharge", "transfer", "bill", "investment", "conversion", "withdrawal")
TRANSACTION_CURRENCIES = ("dzd", "eur", "usd", "gbp")
INVESTMENT_TYPES = ("weekly", "monthly", "quarterly", "yearly")

DEFAULT_TRANSACTION_DESCRIPTION = "Transaction"
DEFAULT_GOAL_NAME = "Savings goal"
DEFAULT_GOAL_CATEGORY = "general"
DEFAULT_GOAL_ICON = "target"
DEFAULT_GOAL_COLOR = "#3B82F6"


@dataclass
class ValidationResult:
    is_valid: bool
    error_message: str | None = None
    normalized_value: Any = None


def parse_decimal(value: Any) -> Decimal | None:
    """Parse ``value`` as a finite Decimal, returning None when it is not numeric."""
    if value is None:
        return None
    if isinstance(value, Decimal):
        amount = value
    else:
        text = str(value).strip().replace(",", "").replace(" ", "")
        if not text:
            return None
        try:
            amount = Decimal(text)
        except (InvalidOperation, ValueError):
            return None
    if not amount.is_finite():
        return None
    return amount


def _parse_datetime(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        parsed = value
    elif value:
        text = str(value)
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class TransactionValidator:
    @staticmethod
    def validate(transaction: dict[str, Any]) -> ValidationResult:
        amount = parse_decimal(transaction.get("amount")) or Decimal("0")
        normalized = {
            **transaction,
            "amount": abs(amount),
            "currency": (transaction.get("currency") or "dzd").lower(),
            "type": transaction.get("type") or "transfer",
            "status": transaction.get("status") or "completed",
            "description": transaction.get("description")
            or DEFAULT_TRANSACTION_DESCRIPTION,
        }

        if normalized["amount"] <= 0:
            return ValidationResult(
                is_valid=False,
                error_message="Transaction amount must be greater than zero",
            )

        if normalized["currency"] not in TRANSACTION_CURRENCIES:
            return ValidationResult(
                is_valid=False, error_message="Invalid currency"
            )

        if normalized["type"] not in TRANSACTION_TYPES:
            return ValidationResult(
                is_valid=False, error_message="Invalid transaction type"
            )

        return ValidationResult(is_valid=True, normalized_value=normalized)


class InvestmentValidator:
    @staticmethod
    def validate(investment: dict[str, Any]) -> ValidationResult:
        amount = parse_decimal(investment.get("amount")) or Decimal("0")
        profit_rate = parse_decimal(investment.get("profit_rate")) or Decimal("0")
        normalized = {
            **investment,
            "amount": abs(amount),
            "profit_rate": max(Decimal("0"), min(Decimal("100"), profit_rate)),
            "profit": Decimal("0"),
            "status": investment.get("status") or "active",
            "type": investment.get("type") or "monthly",
        }

        if normalized["amount"] <= 0:
            return ValidationResult(
                is_valid=False,
                error_message="Investment amount must be greater than zero",
            )

        if normalized["type"] not in INVESTMENT_TYPES:
            return ValidationResult(
                is_valid=False, error_message="Invalid investment type"
            )

        start_date = _parse_datetime(investment.get("start_date"))
        end_date = _parse_datetime(investment.get("end_date"))
        if start_date is None or end_date is None or end_date <= start_date:
            return ValidationResult(
                is_valid=False,
                error_message="Investment end date must be after the start date",
            )

        return ValidationResult(is_valid=True, normalized_value=normalized)


class SavingsGoalValidator:
    @staticmethod
    def validate(
        goal: dict[str, Any], now: datetime | None = None
    ) -> ValidationResult:
        target = parse_decimal(goal.get("target_amount")) or Decimal("0")
        current = parse_decimal(goal.get("current_amount")) or Decimal("0")
        normalized = {
            **goal,
            "target_amount": abs(target),
            "current_amount": max(Decimal("0"), current),
            "status": goal.get("status") or "active",
            "name": goal.get("name") or DEFAULT_GOAL_NAME,
            "category": goal.get("category") or DEFAULT_GOAL_CATEGORY,
            "icon": goal.get("icon") or DEFAULT_GOAL_ICON,
            "color": goal.get("color") or DEFAULT_GOAL_COLOR,
        }

        if normalized["target_amount"] <= 0:
            return ValidationResult(
                is_valid=False,
                error_message="Target amount must be greater than zero",
            )

        if normalized["current_amount"] > normalized["target_amount"]:
            return ValidationResult(
                is_valid=False,
                error_message="Current amount cannot exceed the target amount",
            )

        deadline = _parse_datetime(goal.get("deadline"))
        now = now or datetime.now(timezone.utc)
        if deadline is None or deadline <= now:
            return ValidationResult(
                is_valid=False,
                error_message="Deadline must be in the future",
            )

        return ValidationResult(is_valid=True, normalized_value=normalized)
