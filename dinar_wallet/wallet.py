"""Client-side view of a user's wallet backed by the remote store.

``Wallet`` wraps every remote call behind a method returning a
:class:`RemoteResult` and keeps cached copies of the user's records so the
UI can render without refetching. Listeners registered with
:meth:`Wallet.add_listener` are invoked after every cache change, possibly
from a worker or timer thread.
"""

from __future__ import annotations

import logging
import secrets
import threading
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal
from typing import Any, Callable, TypeVar

from dinar_wallet.config import DEFAULT_TRANSFER_LIMITS, TransferLimits
from dinar_wallet.gateway import NOT_FOUND_CODE, BackendGateway
from dinar_wallet.models import (
    Balance,
    Card,
    Investment,
    Notification,
    RecipientCandidate,
    Referral,
    ReferralStats,
    RemoteResult,
    SavingsGoal,
    Transaction,
    TransferHistoryEntry,
    TransferResult,
    UserProfile,
    to_decimal,
)
from dinar_wallet.shared.scheduling import Scheduler, thread_scheduler
from dinar_wallet.shared.validation import parse_decimal

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_BALANCE = {
    "dzd": Decimal("15000"),
    "eur": Decimal("75"),
    "usd": Decimal("85"),
    "gbp": Decimal("65.5"),
}
DEFAULT_CARDS = (
    ("solid", Decimal("100000")),
    ("virtual", Decimal("50000")),
)
DEFAULT_TRANSFER_DESCRIPTION = "Instant transfer"

MISSING_USER_MESSAGE = "User ID is not available"
MISSING_EMAIL_MESSAGE = "Sender email is not available"


def luhn_check_digit(partial: str) -> str:
    total = 0
    for index, char in enumerate(reversed(partial)):
        digit = int(char)
        if index % 2 == 0:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return str((10 - total % 10) % 10)


def is_luhn_valid(number: str) -> bool:
    if not number.isdigit() or len(number) < 2:
        return False
    return luhn_check_digit(number[:-1]) == number[-1]


def generate_card_number(prefix: str = "4", length: int = 16) -> str:
    body = prefix + "".join(
        str(secrets.randbelow(10)) for _ in range(length - len(prefix) - 1)
    )
    return body + luhn_check_digit(body)


def _map_rows(rows: Any, factory: Callable[[dict[str, Any]], T]) -> list[T]:
    return [factory(row) for row in rows or [] if isinstance(row, dict)]


def _replace_by_id(items: list[T], item_id: str, replacement: T) -> list[T]:
    return [replacement if getattr(item, "id", None) == item_id else item for item in items]


class Wallet:
    """Cached data-access layer for one signed-in user."""

    def __init__(
        self,
        gateway: BackendGateway,
        user_id: str | None,
        scheduler: Scheduler = thread_scheduler,
        transfer_limits: TransferLimits = DEFAULT_TRANSFER_LIMITS,
        max_workers: int = 4,
    ):
        self.gateway = gateway
        self.user_id = user_id
        self.scheduler = scheduler
        self.transfer_limits = transfer_limits
        self.max_workers = max_workers

        self.profile: UserProfile | None = None
        self.balance: Balance | None = None
        self.transactions: list[Transaction] = []
        self.investments: list[Investment] = []
        self.savings_goals: list[SavingsGoal] = []
        self.cards: list[Card] = []
        self.notifications: list[Notification] = []
        self.referrals: list[Referral] = []
        self.investment_balance: Decimal = Decimal("0")
        self.loading = False
        self.error: str | None = None

        self._lock = threading.RLock()
        self._listeners: list[Callable[["Wallet"], None]] = []

    # Listeners

    def add_listener(self, listener: Callable[["Wallet"], None]) -> None:
        with self._lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: Callable[["Wallet"], None]) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def _notify(self) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(self)
            except Exception as e:
                logger.error(f"Wallet listener failed: {e}", exc_info=True)

    def _set(self, **changes: Any) -> None:
        with self._lock:
            for name, value in changes.items():
                setattr(self, name, value)
        self._notify()

    def _fail(self, result: RemoteResult) -> RemoteResult:
        message = result.error.message if result.error else None
        self._set(error=message)
        return result

    def _require_user(self) -> RemoteResult | None:
        if not self.user_id:
            return RemoteResult.failure(MISSING_USER_MESSAGE)
        return None

    # Loading

    def _ensure_balance(self, user_id: str) -> None:
        existing = self.gateway.get_user_balance(user_id)
        if existing.data:
            return
        if existing.error and existing.error.code != NOT_FOUND_CODE:
            logger.warning(f"Could not check balance record: {existing.error.message}")
            return
        created = self.gateway.create_user_balance({"user_id": user_id, **DEFAULT_BALANCE})
        if created.error:
            logger.error(f"Failed to provision balance: {created.error.message}")
        else:
            logger.info("Provisioned default balance record")

    def _ensure_cards(self, user_id: str) -> None:
        existing = self.gateway.get_user_cards(user_id)
        if existing.error:
            logger.warning(f"Could not check cards: {existing.error.message}")
            return
        if existing.data:
            return
        for card_type, spending_limit in DEFAULT_CARDS:
            created = self.gateway.create_card(
                {
                    "user_id": user_id,
                    "card_number": generate_card_number(),
                    "card_type": card_type,
                    "is_frozen": False,
                    "spending_limit": spending_limit,
                }
            )
            if created.error:
                logger.error(f"Failed to provision {card_type} card: {created.error.message}")
        logger.info("Provisioned default cards")

    def load_user_data(self) -> RemoteResult:
        missing = self._require_user()
        if missing:
            return missing

        user_id = self.user_id
        self._set(loading=True, error=None)
        try:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                provisioning = [
                    pool.submit(self._ensure_balance, user_id),
                    pool.submit(self._ensure_cards, user_id),
                ]
                for future in provisioning:
                    future.result()

                loaders = {
                    "profile": pool.submit(self.gateway.get_user_profile, user_id),
                    "balance": pool.submit(self.gateway.get_user_balance, user_id),
                    "transactions": pool.submit(self.gateway.get_user_transactions, user_id),
                    "investments": pool.submit(self.gateway.get_user_investments, user_id),
                    "savings_goals": pool.submit(self.gateway.get_user_savings_goals, user_id),
                    "cards": pool.submit(self.gateway.get_user_cards, user_id),
                    "notifications": pool.submit(self.gateway.get_user_notifications, user_id),
                    "referrals": pool.submit(self.gateway.get_user_referrals, user_id),
                    "investment_balance": pool.submit(
                        self.gateway.get_investment_balance, user_id
                    ),
                }
                results = {name: future.result() for name, future in loaders.items()}

            self._apply_loaded(results)
        except Exception as e:
            logger.error(f"Failed to load user data: {e}", exc_info=True)
            self._set(loading=False, error=str(e))
            return RemoteResult.failure(str(e))

        self._set(loading=False)
        return RemoteResult.success(True)

    def _apply_loaded(self, results: dict[str, RemoteResult]) -> None:
        changes: dict[str, Any] = {}
        for name, result in results.items():
            if result.error:
                logger.warning(f"Keeping cached {name}: {result.error.message}")
                continue
            if result.data is None:
                continue
            data = result.data
            if name == "profile":
                changes[name] = UserProfile.from_dict(data)
            elif name == "balance":
                changes[name] = Balance.from_dict(data)
            elif name == "transactions":
                changes[name] = _map_rows(data, Transaction.from_dict)
            elif name == "investments":
                changes[name] = _map_rows(data, Investment.from_dict)
            elif name == "savings_goals":
                changes[name] = _map_rows(data, SavingsGoal.from_dict)
            elif name == "cards":
                changes[name] = _map_rows(data, Card.from_dict)
            elif name == "notifications":
                changes[name] = _map_rows(data, Notification.from_dict)
            elif name == "referrals":
                changes[name] = _map_rows(data, Referral.from_dict)
            elif name == "investment_balance":
                changes[name] = to_decimal(data.get("investment_balance"))
        with self._lock:
            for name, value in changes.items():
                setattr(self, name, value)

    # Profile

    def update_profile(self, updates: dict[str, Any]) -> RemoteResult[UserProfile]:
        missing = self._require_user()
        if missing:
            return missing
        result = self.gateway.update_user_profile(self.user_id, updates)
        if result.error:
            return self._fail(result)
        profile = UserProfile.from_dict(result.data)
        self._set(profile=profile)
        return RemoteResult.success(profile)

    # Balance

    def update_balance(self, balances: dict[str, Any]) -> RemoteResult[Balance]:
        missing = self._require_user()
        if missing:
            return missing

        provided = {name: value for name, value in balances.items() if value is not None}
        result = self.gateway.update_user_balance(self.user_id, provided)
        if result.error:
            return self._fail(result)

        if not result.data:
            return RemoteResult.success(self.balance)
        balance = Balance.from_dict(result.data)
        changes: dict[str, Any] = {"balance": balance}
        if result.data.get("investment_balance") is not None:
            changes["investment_balance"] = balance.investment_balance
        self._set(**changes)
        return RemoteResult.success(balance)

    def update_investment_balance(
        self, amount: Decimal, operation: str
    ) -> RemoteResult[Balance]:
        missing = self._require_user()
        if missing:
            return missing

        result = self.gateway.process_investment(self.user_id, amount, operation)
        if result.error:
            return self._fail(result)

        data = result.data
        with self._lock:
            balance = self.balance or Balance(user_id=self.user_id)
            if data.get("dzd") is not None:
                balance.dzd = to_decimal(data["dzd"])
            investment_balance = to_decimal(data.get("investment_balance"))
            balance.investment_balance = investment_balance
            self.balance = balance
            self.investment_balance = investment_balance
        self._notify()
        logger.info(f"Investment balance updated ({operation} {amount})")
        return RemoteResult.success(balance)

    # Records

    def add_transaction(self, transaction: dict[str, Any]) -> RemoteResult[Transaction]:
        missing = self._require_user()
        if missing:
            return missing
        result = self.gateway.create_transaction({**transaction, "user_id": self.user_id})
        if result.error:
            return self._fail(result)
        created = Transaction.from_dict(result.data)
        self._set(transactions=[created, *self.transactions])
        return RemoteResult.success(created)

    def add_investment(self, investment: dict[str, Any]) -> RemoteResult[Investment]:
        missing = self._require_user()
        if missing:
            return missing
        result = self.gateway.create_investment({**investment, "user_id": self.user_id})
        if result.error:
            return self._fail(result)
        created = Investment.from_dict(result.data)
        self._set(investments=[created, *self.investments])
        return RemoteResult.success(created)

    def update_investment_status(
        self, investment_id: str, updates: dict[str, Any]
    ) -> RemoteResult[Investment]:
        result = self.gateway.update_investment(investment_id, updates)
        if result.error:
            return self._fail(result)
        updated = Investment.from_dict(result.data)
        self._set(investments=_replace_by_id(self.investments, investment_id, updated))
        return RemoteResult.success(updated)

    def add_savings_goal(self, goal: dict[str, Any]) -> RemoteResult[SavingsGoal]:
        missing = self._require_user()
        if missing:
            return missing
        result = self.gateway.create_savings_goal({**goal, "user_id": self.user_id})
        if result.error:
            return self._fail(result)
        created = SavingsGoal.from_dict(result.data)
        self._set(savings_goals=[created, *self.savings_goals])
        return RemoteResult.success(created)

    def update_goal(self, goal_id: str, updates: dict[str, Any]) -> RemoteResult[SavingsGoal]:
        result = self.gateway.update_savings_goal(goal_id, updates)
        if result.error:
            return self._fail(result)
        updated = SavingsGoal.from_dict(result.data)
        self._set(savings_goals=_replace_by_id(self.savings_goals, goal_id, updated))
        return RemoteResult.success(updated)

    def update_card_status(self, card_id: str, updates: dict[str, Any]) -> RemoteResult[Card]:
        result = self.gateway.update_card(card_id, updates)
        if result.error:
            return self._fail(result)
        updated = Card.from_dict(result.data)
        self._set(cards=_replace_by_id(self.cards, card_id, updated))
        return RemoteResult.success(updated)

    def add_notification(self, notification: dict[str, Any]) -> RemoteResult[Notification]:
        missing = self._require_user()
        if missing:
            return missing
        result = self.gateway.create_notification({**notification, "user_id": self.user_id})
        if result.error:
            return self._fail(result)
        created = Notification.from_dict(result.data)
        self._set(notifications=[created, *self.notifications])
        return RemoteResult.success(created)

    def mark_as_read(self, notification_id: str) -> RemoteResult[Notification]:
        result = self.gateway.mark_notification_as_read(notification_id)
        if result.error:
            return self._fail(result)
        updated = Notification.from_dict(result.data)
        self._set(
            notifications=_replace_by_id(self.notifications, notification_id, updated)
        )
        return RemoteResult.success(updated)

    def add_referral(self, referral: dict[str, Any]) -> RemoteResult[Referral]:
        missing = self._require_user()
        if missing:
            return missing
        result = self.gateway.create_referral({**referral, "referrer_id": self.user_id})
        if result.error:
            return self._fail(result)
        created = Referral.from_dict(result.data)
        self._set(referrals=[created, *self.referrals])
        return RemoteResult.success(created)

    def get_referral_stats(self) -> RemoteResult[ReferralStats]:
        missing = self._require_user()
        if missing:
            return missing
        result = self.gateway.get_referral_stats(self.user_id)
        if result.error:
            return result
        data = result.data
        return RemoteResult.success(
            ReferralStats(
                total_referrals=data["total_referrals"],
                completed_referrals=data["completed_referrals"],
                total_earnings=to_decimal(data["total_earnings"]),
                this_month_referrals=data["this_month_referrals"],
                pending_rewards=data["pending_rewards"],
            )
        )

    # Instant transfers

    def process_transfer(
        self,
        amount: Decimal | str | float,
        recipient_identifier: str,
        description: str | None = None,
    ) -> RemoteResult[TransferResult]:
        """Execute one instant transfer through the backend.

        The backend moves the funds atomically. On success the cached DZD
        balance is replaced with the sender's new balance and a full reload is
        scheduled so the new transaction shows up in the history.
        """
        profile = self.profile
        if profile is None or not profile.email:
            logger.error("No sender email available for transfer")
            return RemoteResult.failure(MISSING_EMAIL_MESSAGE)

        parsed = parse_decimal(amount)
        if parsed is None or parsed <= 0:
            return RemoteResult.failure("Transfer amount must be greater than zero")

        recipient = (recipient_identifier or "").strip()
        if not recipient:
            return RemoteResult.failure("Recipient identifier is required")

        if parsed < self.transfer_limits.min_amount:
            return RemoteResult.failure(
                f"Minimum transfer amount is {self.transfer_limits.min_amount:,} DZD"
            )

        logger.info(f"Processing instant transfer of {parsed} DZD")
        result = self.gateway.process_simple_transfer(
            profile.email,
            recipient,
            parsed,
            description or DEFAULT_TRANSFER_DESCRIPTION,
        )

        if result.error:
            return RemoteResult(error=result.error)

        rows = result.data
        if not isinstance(rows, list) or not rows:
            logger.error("Transfer procedure returned no result")
            return RemoteResult.failure("No result returned from the server")

        row = rows[0]
        if not isinstance(row, dict):
            logger.error(f"Transfer procedure returned an unexpected row: {row!r}")
            return RemoteResult.failure("Unexpected response from the server")
        # Only an explicit success=false is a rejection.
        if row.get("success") is False:
            logger.warning(f"Transfer rejected: {row.get('message')}")
            return RemoteResult.failure(row.get("message") or "Failed to process transfer")

        transfer = TransferResult.from_rpc_row(row)
        transfer.success = True
        if not transfer.message:
            transfer.message = "Transfer completed successfully"

        if transfer.new_balance is not None:
            with self._lock:
                balance = self.balance or Balance(user_id=self.user_id or "")
                balance.dzd = transfer.new_balance
                self.balance = balance
            self._notify()

        logger.info(f"Transfer completed: reference {transfer.reference}")
        self.scheduler(self.transfer_limits.reload_delay_seconds, self._reload_after_transfer)
        return RemoteResult.success(transfer)

    def _reload_after_transfer(self) -> None:
        logger.info("Reloading user data after transfer")
        self.load_user_data()

    def search_users(self, query: str) -> RemoteResult[list[RecipientCandidate]]:
        text = (query or "").strip()
        if len(text) < self.transfer_limits.search_min_length:
            return RemoteResult.success([])

        result = self.gateway.find_user_simple(text)
        if result.error:
            return RemoteResult(data=[], error=result.error)
        return RemoteResult.success(_map_rows(result.data, RecipientCandidate.from_lookup_row))

    def get_instant_transfer_history(self) -> RemoteResult[list[TransferHistoryEntry]]:
        profile = self.profile
        if profile is None or not profile.email:
            return RemoteResult.failure(MISSING_EMAIL_MESSAGE)
        result = self.gateway.get_transfer_history_simple(profile.email)
        if result.error:
            return result
        return RemoteResult.success(_map_rows(result.data, TransferHistoryEntry.from_dict))

    def get_transfer_history(self) -> RemoteResult[list[TransferHistoryEntry]]:
        missing = self._require_user()
        if missing:
            return missing
        result = self.gateway.get_transfer_requests(self.user_id)
        if result.error:
            return result
        return RemoteResult.success(_map_rows(result.data, TransferHistoryEntry.from_dict))

    def get_instant_transfer_stats(self) -> RemoteResult[dict[str, Any]]:
        missing = self._require_user()
        if missing:
            return missing
        return self.gateway.get_instant_transfer_stats(self.user_id)

    def check_instant_transfer_limits(self, amount: Decimal) -> RemoteResult[dict[str, Any]]:
        missing = self._require_user()
        if missing:
            return missing
        return self.gateway.check_instant_transfer_limits(self.user_id, amount)

    def get_transfer_limits(self) -> RemoteResult[dict[str, Any]]:
        missing = self._require_user()
        if missing:
            return missing
        return self.gateway.get_transfer_limits(self.user_id)

    def get_user_balance_simple(self, identifier: str) -> RemoteResult[dict[str, Any]]:
        return self.gateway.get_user_balance_simple(identifier)

    def update_user_balance_simple(
        self, identifier: str, new_balance: Decimal
    ) -> RemoteResult[dict[str, Any]]:
        return self.gateway.update_user_balance_simple(identifier, new_balance)
