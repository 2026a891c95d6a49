"""Transfer business logic service for Dinar Wallet."""

from __future__ import annotations

import logging
import threading
from decimal import Decimal
from typing import Any, Callable, Protocol

from dinar_wallet.config import DEFAULT_TRANSFER_LIMITS, TransferLimits
from dinar_wallet.models import (
    Balance,
    RecipientCandidate,
    RemoteResult,
    TransferHistoryEntry,
    TransferResult,
    UserProfile,
)
from dinar_wallet.shared.scheduling import Debouncer, Scheduler, thread_scheduler

logger = logging.getLogger(__name__)


class WalletProtocol(Protocol):
    """Protocol defining wallet interface needed for transfers."""

    user_id: str | None
    profile: UserProfile | None
    balance: Balance | None

    def process_transfer(
        self, amount: Decimal, recipient_identifier: str, description: str | None = None
    ) -> RemoteResult[TransferResult]: ...

    def search_users(self, query: str) -> RemoteResult[list[RecipientCandidate]]: ...

    def get_instant_transfer_history(self) -> RemoteResult[list[TransferHistoryEntry]]: ...

    def get_instant_transfer_stats(self) -> RemoteResult[dict[str, Any]]: ...

    def check_instant_transfer_limits(self, amount: Decimal) -> RemoteResult[dict[str, Any]]: ...


class TransferService:
    """Service for handling transfer-related business logic."""

    def __init__(self, wallet: WalletProtocol):
        self.wallet = wallet

    @property
    def user_id(self) -> str | None:
        return self.wallet.user_id

    @property
    def balance_dzd(self) -> Decimal | None:
        balance = self.wallet.balance
        return balance.dzd if balance is not None else None

    def send_transfer(
        self, amount: Decimal, recipient: str, description: str
    ) -> RemoteResult[TransferResult]:
        """Send an instant transfer."""
        return self.wallet.process_transfer(amount, recipient, description)

    def search_recipients(self, query: str) -> RemoteResult[list[RecipientCandidate]]:
        return self.wallet.search_users(query)

    def get_recent_transfers(self, limit: int = 10) -> list[TransferHistoryEntry]:
        result = self.wallet.get_instant_transfer_history()
        if result.error:
            logger.warning(f"Could not load transfer history: {result.error.message}")
            return []
        return (result.data or [])[:limit]

    def get_stats(self) -> dict[str, Any] | None:
        result = self.wallet.get_instant_transfer_stats()
        if result.error:
            logger.warning(f"Could not load transfer stats: {result.error.message}")
            return None
        return result.data

    def check_limits(self, amount: Decimal) -> RemoteResult[dict[str, Any]]:
        return self.wallet.check_instant_transfer_limits(amount)


class RecipientResolver:
    """Debounced recipient lookup backing the transfer form.

    Results are advisory: the transfer is always sent with whatever identifier
    is in the input, whether or not a candidate was picked.
    """

    def __init__(
        self,
        search: Callable[[str], RemoteResult[list[RecipientCandidate]]],
        limits: TransferLimits = DEFAULT_TRANSFER_LIMITS,
        scheduler: Scheduler = thread_scheduler,
        on_change: Callable[["RecipientResolver"], None] | None = None,
    ):
        self.search = search
        self.limits = limits
        self.on_change = on_change
        self.query = ""
        self.results: list[RecipientCandidate] = []
        self.show_results = False
        self.selected: RecipientCandidate | None = None
        self._debouncer = Debouncer(limits.search_debounce_seconds, scheduler)
        self._lock = threading.RLock()

    @property
    def is_search_pending(self) -> bool:
        return self._debouncer.is_pending

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change(self)

    def update_query(self, text: str) -> None:
        with self._lock:
            self.query = text
            if self.selected is not None and text != self.selected.email:
                self.selected = None

            too_short = len(text.strip()) < self.limits.search_min_length
            if too_short:
                self.results = []
                self.show_results = False
                self.selected = None
            should_search = not too_short and self.selected is None

        if should_search:
            self._debouncer.submit(lambda: self.run_search(text))
        else:
            self._debouncer.cancel()
        self._changed()

    def run_search(self, query: str) -> None:
        result = self.search(query)
        if result.error:
            logger.warning(f"Recipient search failed: {result.error.message}")
        self.apply_results(query, result.data or [])

    def apply_results(self, query: str, candidates: list[RecipientCandidate]) -> bool:
        with self._lock:
            if query != self.query or self.selected is not None:
                return False
            self.results = list(candidates)
            self.show_results = True
        self._changed()
        return True

    def select(self, candidate: RecipientCandidate) -> None:
        self._debouncer.cancel()
        with self._lock:
            self.selected = candidate
            self.query = candidate.email
            self.show_results = False
        self._changed()

    def clear(self) -> None:
        self._debouncer.cancel()
        with self._lock:
            self.query = ""
            self.results = []
            self.show_results = False
            self.selected = None
        self._changed()
