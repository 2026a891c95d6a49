import tempfile
from decimal import Decimal
from pathlib import Path
from typing import Any, Callable
from unittest.mock import MagicMock

import pytest

from dinar_wallet.models import Balance, RemoteResult


class FakeCall:
    def __init__(self, delay: float, callback: Callable[[], None]):
        self.delay = delay
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """Collects scheduled callbacks so tests decide when timers fire."""

    def __init__(self):
        self.calls: list[FakeCall] = []

    def __call__(self, delay: float, callback: Callable[[], None]) -> FakeCall:
        call = FakeCall(delay, callback)
        self.calls.append(call)
        return call

    @property
    def pending(self) -> list[FakeCall]:
        return [c for c in self.calls if not c.cancelled and not c.fired]

    def fire(self, call: FakeCall) -> None:
        call.fired = True
        call.callback()

    def fire_all(self) -> None:
        for call in self.pending:
            self.fire(call)


@pytest.fixture
def fake_scheduler():
    return FakeScheduler()


@pytest.fixture(autouse=True)
def isolate_wallet_storage(monkeypatch):
    """Run tests with an isolated storage directory and no backend settings."""
    for name in (
        "DINAR_WALLET_SUPABASE_URL",
        "SUPABASE_URL",
        "VITE_SUPABASE_URL",
        "DINAR_WALLET_SUPABASE_ANON_KEY",
        "SUPABASE_ANON_KEY",
        "VITE_SUPABASE_ANON_KEY",
        "DINAR_WALLET_ACCESS_TOKEN",
        "DINAR_WALLET_USER_ID",
        "DINAR_WALLET_CONNECT_TIMEOUT",
        "DINAR_WALLET_READ_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)

    with tempfile.TemporaryDirectory(prefix="dinar-wallet-test-") as tmp_dir:
        monkeypatch.setenv("DINAR_WALLET_DIR", str(Path(tmp_dir)))
        yield


@pytest.fixture
def user_id():
    return "11111111-2222-3333-4444-555555555555"


@pytest.fixture
def sample_balance(user_id):
    return Balance(user_id=user_id, dzd=Decimal("15000"))


@pytest.fixture
def mock_gateway():
    """Gateway double whose calls succeed with empty data unless overridden."""
    gateway = MagicMock()

    def empty_list(*args: Any, **kwargs: Any) -> RemoteResult:
        return RemoteResult.success([])

    def no_row(*args: Any, **kwargs: Any) -> RemoteResult:
        return RemoteResult.success(None)

    for name in (
        "get_user_transactions",
        "get_user_investments",
        "get_user_savings_goals",
        "get_user_cards",
        "get_user_notifications",
        "get_user_referrals",
    ):
        getattr(gateway, name).side_effect = empty_list
    for name in (
        "get_user_profile",
        "get_user_balance",
        "get_investment_balance",
        "create_user_balance",
        "create_card",
    ):
        getattr(gateway, name).side_effect = no_row
    return gateway
