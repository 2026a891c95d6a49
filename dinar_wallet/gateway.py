"""Typed access to the wallet backend's tables and remote procedures.

Every method returns a :class:`RemoteResult`. Transport and HTTP failures
raised by :class:`NetworkClient` are converted into a :class:`RemoteError`
here, so callers only ever inspect ``result.error``.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Callable

from dinar_wallet.models import RemoteError, RemoteResult
from dinar_wallet.shared.network import NetworkClient, NetworkError, QueryOptions
from dinar_wallet.shared.validation import (
    InvestmentValidator,
    SavingsGoalValidator,
    TransactionValidator,
    parse_decimal,
)

logger = logging.getLogger(__name__)

NOT_FOUND_CODE = "PGRST116"

BALANCE_FIELDS = ("dzd", "eur", "usd", "gbp", "investment_balance")

TRANSFER_HISTORY_COLUMNS = (
    "*, recipient:users!transfer_requests_recipient_id_fkey(full_name, email)"
)
REFERRAL_COLUMNS = "*, referred_user:users!referrals_referred_id_fkey(full_name, email)"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def jsonable(value: Any) -> Any:
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [jsonable(v) for v in value]
    return value


def first_row(data: Any) -> Any:
    if isinstance(data, list):
        return data[0] if data else None
    return data


def start_of_month(now: datetime) -> datetime:
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


class BackendGateway:
    def __init__(self, client: NetworkClient):
        self.client = client

    def _call(self, operation: Callable[[], Any], context: str) -> RemoteResult:
        try:
            return RemoteResult.success(operation())
        except NetworkError as e:
            logger.error("%s failed: %s", context, e.message)
            return RemoteResult(
                error=RemoteError(
                    message=e.message, code=e.code, details=e.details, hint=e.hint
                )
            )

    def _rpc(self, function: str, params: dict[str, Any]) -> RemoteResult:
        return self._call(
            lambda: self.client.rpc(function, jsonable(params)), f"RPC {function}"
        )

    def _select(self, table: str, options: QueryOptions) -> RemoteResult:
        return self._call(lambda: self.client.select(table, options), f"Select {table}")

    def _insert(self, table: str, row: dict[str, Any]) -> RemoteResult:
        return self._call(
            lambda: self.client.insert(table, jsonable(row)), f"Insert {table}"
        )

    def _update_by_id(
        self, table: str, row_id: str, values: dict[str, Any], stamp: bool = True
    ) -> RemoteResult:
        payload = dict(values)
        if stamp:
            payload["updated_at"] = utc_now()
        return self._call(
            lambda: self.client.update(
                table, jsonable(payload), {"id": ("eq", row_id)}
            ),
            f"Update {table}",
        )

    # Profile

    def get_user_profile(self, user_id: str) -> RemoteResult:
        return self._select(
            "users", QueryOptions(filters={"id": ("eq", user_id)}, single=True)
        )

    def update_user_profile(self, user_id: str, updates: dict[str, Any]) -> RemoteResult:
        return self._update_by_id("users", user_id, updates)

    # Balance

    def get_user_balance(self, user_id: str) -> RemoteResult:
        return self._select(
            "balances", QueryOptions(filters={"user_id": ("eq", user_id)}, single=True)
        )

    def create_user_balance(self, row: dict[str, Any]) -> RemoteResult:
        return self._insert("balances", row)

    def get_investment_balance(self, user_id: str) -> RemoteResult:
        return self._select(
            "balances",
            QueryOptions(
                columns="investment_balance",
                filters={"user_id": ("eq", user_id)},
                single=True,
            ),
        )

    def update_user_balance(self, user_id: str, balances: dict[str, Any]) -> RemoteResult:
        params: dict[str, Any] = {"p_user_id": user_id}
        for name in BALANCE_FIELDS:
            if balances.get(name) is None:
                continue
            amount = parse_decimal(balances[name]) or Decimal("0")
            params[f"p_{name}"] = max(Decimal("0"), amount)

        result = self._rpc("update_user_balance", params)
        if result.error:
            return result
        return RemoteResult.success(first_row(result.data))

    def process_investment(
        self, user_id: str, amount: Decimal, operation: str
    ) -> RemoteResult:
        db_operation = "invest" if operation == "add" else "return"
        result = self._rpc(
            "process_investment",
            {"p_user_id": user_id, "p_amount": amount, "p_operation": db_operation},
        )
        if result.error:
            return result

        row = first_row(result.data)
        if not row or not row.get("success"):
            message = (row or {}).get("message") or "Failed to process investment"
            return RemoteResult.failure(message)

        return RemoteResult.success(
            {
                "user_id": user_id,
                "dzd": row.get("new_dzd_balance"),
                "investment_balance": row.get("new_investment_balance"),
                "updated_at": utc_now().isoformat(),
            }
        )

    # Transactions

    def create_transaction(self, transaction: dict[str, Any]) -> RemoteResult:
        validation = TransactionValidator.validate(transaction)
        if not validation.is_valid:
            return RemoteResult.failure(validation.error_message)
        return self._insert("transactions", validation.normalized_value)

    def get_user_transactions(self, user_id: str, limit: int = 50) -> RemoteResult:
        return self._select(
            "transactions",
            QueryOptions(
                filters={"user_id": ("eq", user_id)},
                order=("created_at", False),
                limit=limit,
            ),
        )

    # Investments

    def create_investment(self, investment: dict[str, Any]) -> RemoteResult:
        validation = InvestmentValidator.validate(investment)
        if not validation.is_valid:
            return RemoteResult.failure(validation.error_message)
        return self._insert("investments", validation.normalized_value)

    def get_user_investments(self, user_id: str) -> RemoteResult:
        return self._select(
            "investments",
            QueryOptions(
                filters={"user_id": ("eq", user_id)}, order=("created_at", False)
            ),
        )

    def update_investment(self, investment_id: str, updates: dict[str, Any]) -> RemoteResult:
        return self._update_by_id("investments", investment_id, updates)

    # Savings goals

    def create_savings_goal(self, goal: dict[str, Any]) -> RemoteResult:
        validation = SavingsGoalValidator.validate(goal)
        if not validation.is_valid:
            return RemoteResult.failure(validation.error_message)
        return self._insert("savings_goals", validation.normalized_value)

    def get_user_savings_goals(self, user_id: str) -> RemoteResult:
        return self._select(
            "savings_goals",
            QueryOptions(
                filters={"user_id": ("eq", user_id), "status": ("eq", "active")},
                order=("created_at", False),
            ),
        )

    def update_savings_goal(self, goal_id: str, updates: dict[str, Any]) -> RemoteResult:
        return self._update_by_id("savings_goals", goal_id, updates)

    # Cards

    def get_user_cards(self, user_id: str) -> RemoteResult:
        return self._select(
            "cards", QueryOptions(filters={"user_id": ("eq", user_id)})
        )

    def create_card(self, card: dict[str, Any]) -> RemoteResult:
        return self._insert("cards", card)

    def update_card(self, card_id: str, updates: dict[str, Any]) -> RemoteResult:
        return self._update_by_id("cards", card_id, updates)

    # Notifications

    def create_notification(self, notification: dict[str, Any]) -> RemoteResult:
        return self._insert("notifications", notification)

    def get_user_notifications(self, user_id: str) -> RemoteResult:
        return self._select(
            "notifications",
            QueryOptions(
                filters={"user_id": ("eq", user_id)}, order=("created_at", False)
            ),
        )

    def mark_notification_as_read(self, notification_id: str) -> RemoteResult:
        return self._update_by_id(
            "notifications", notification_id, {"is_read": True}, stamp=False
        )

    # Referrals

    def create_referral(self, referral: dict[str, Any]) -> RemoteResult:
        return self._insert("referrals", referral)

    def get_user_referrals(self, user_id: str) -> RemoteResult:
        return self._select(
            "referrals",
            QueryOptions(
                columns=REFERRAL_COLUMNS,
                filters={"referrer_id": ("eq", user_id)},
                order=("created_at", False),
            ),
        )

    def get_referral_stats(
        self, user_id: str, now: datetime | None = None
    ) -> RemoteResult:
        month_start = start_of_month(now or utc_now())

        def operation() -> dict[str, Any]:
            total = self.client.count("referrals", {"referrer_id": ("eq", user_id)})
            completed = self.client.count(
                "referrals",
                {"referrer_id": ("eq", user_id), "status": ("eq", "completed")},
            )
            this_month = self.client.count(
                "referrals",
                {
                    "referrer_id": ("eq", user_id),
                    "created_at": ("gte", month_start.isoformat()),
                },
            )
            earnings = self.client.select(
                "users",
                QueryOptions(
                    columns="referral_earnings",
                    filters={"id": ("eq", user_id)},
                    single=True,
                ),
            )
            return {
                "total_referrals": total,
                "completed_referrals": completed,
                "total_earnings": (earnings or {}).get("referral_earnings") or 0,
                "this_month_referrals": this_month,
                "pending_rewards": total - completed,
            }

        return self._call(operation, "Referral stats")

    # Instant transfers

    def process_simple_transfer(
        self,
        sender_email: str,
        recipient_identifier: str,
        amount: Decimal,
        description: str,
    ) -> RemoteResult:
        return self._rpc(
            "process_simple_transfer",
            {
                "p_sender_email": sender_email,
                "p_recipient_identifier": recipient_identifier,
                "p_amount": amount,
                "p_description": description,
            },
        )

    def find_user_simple(self, identifier: str) -> RemoteResult:
        return self._rpc("find_user_simple", {"p_identifier": identifier})

    def get_transfer_history_simple(self, user_email: str) -> RemoteResult:
        result = self._rpc("get_transfer_history_simple", {"p_user_email": user_email})
        if result.error:
            return result
        return RemoteResult.success(result.data or [])

    def get_transfer_requests(self, user_id: str, limit: int = 50) -> RemoteResult:
        return self._select(
            "transfer_requests",
            QueryOptions(
                columns=TRANSFER_HISTORY_COLUMNS,
                filters={"sender_id": ("eq", user_id)},
                order=("created_at", False),
                limit=limit,
            ),
        )

    def get_instant_transfer_stats(self, user_id: str) -> RemoteResult:
        result = self._rpc("get_instant_transfer_stats", {"p_user_id": user_id})
        if result.error:
            return result
        return RemoteResult.success(first_row(result.data))

    def check_instant_transfer_limits(self, user_id: str, amount: Decimal) -> RemoteResult:
        result = self._rpc(
            "check_instant_transfer_limits", {"p_user_id": user_id, "p_amount": amount}
        )
        if result.error:
            return result
        return RemoteResult.success(first_row(result.data))

    def get_transfer_limits(self, user_id: str) -> RemoteResult:
        result = self._select(
            "transfer_limits",
            QueryOptions(filters={"user_id": ("eq", user_id)}, single=True),
        )
        if result.error and result.error.code == NOT_FOUND_CODE:
            return RemoteResult.success(None)
        return result

    def get_user_balance_simple(self, identifier: str) -> RemoteResult:
        result = self._rpc("get_user_balance_simple", {"p_identifier": identifier})
        if result.error:
            return result
        return RemoteResult.success(first_row(result.data))

    def update_user_balance_simple(
        self, identifier: str, new_balance: Decimal
    ) -> RemoteResult:
        result = self._rpc(
            "update_user_balance_simple",
            {"p_identifier": identifier, "p_new_balance": new_balance},
        )
        if result.error:
            return result
        return RemoteResult.success(first_row(result.data))
