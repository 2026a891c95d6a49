"""Tests for the cached wallet data-access layer."""

from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from dinar_wallet.config import TransferLimits
from dinar_wallet.gateway import NOT_FOUND_CODE
from dinar_wallet.models import Balance, Card, RemoteResult, UserProfile
from dinar_wallet.wallet import (
    DEFAULT_BALANCE,
    MISSING_EMAIL_MESSAGE,
    MISSING_USER_MESSAGE,
    Wallet,
    generate_card_number,
    is_luhn_valid,
    luhn_check_digit,
)

SENDER_EMAIL = "sender@example.dz"


@pytest.fixture
def wallet(mock_gateway, user_id, fake_scheduler):
    return Wallet(mock_gateway, user_id, scheduler=fake_scheduler)


@pytest.fixture
def signed_in_wallet(wallet, user_id):
    wallet.profile = UserProfile(id=user_id, email=SENDER_EMAIL, full_name="Sender")
    wallet.balance = Balance(user_id=user_id, dzd=Decimal("15000"))
    return wallet


@pytest.mark.unit
class TestCardNumbers:
    def test_known_check_digit(self):
        assert luhn_check_digit("411111111111111") == "1"
        assert is_luhn_valid("4111111111111111")

    def test_invalid_number(self):
        assert not is_luhn_valid("4111111111111112")
        assert not is_luhn_valid("abc")

    def test_generated_numbers_are_valid(self):
        for _ in range(20):
            number = generate_card_number()
            assert len(number) == 16
            assert number.startswith("4")
            assert is_luhn_valid(number)


@pytest.mark.unit
class TestListeners:
    def test_listener_called_on_change(self, wallet):
        listener = MagicMock()
        wallet.add_listener(listener)

        wallet._set(error="x")

        listener.assert_called_once_with(wallet)

    def test_failing_listener_does_not_break_others(self, wallet):
        bad = MagicMock(side_effect=RuntimeError("boom"))
        good = MagicMock()
        wallet.add_listener(bad)
        wallet.add_listener(good)

        wallet._set(loading=True)

        good.assert_called_once()

    def test_removed_listener_not_called(self, wallet):
        listener = MagicMock()
        wallet.add_listener(listener)
        wallet.remove_listener(listener)
        wallet._set(loading=True)
        listener.assert_not_called()


@pytest.mark.unit
class TestLoadUserData:
    def test_requires_user(self, mock_gateway):
        wallet = Wallet(mock_gateway, None)
        result = wallet.load_user_data()
        assert result.error.message == MISSING_USER_MESSAGE
        mock_gateway.get_user_profile.assert_not_called()

    def test_provisions_missing_balance_and_cards(self, wallet, mock_gateway, user_id):
        wallet.load_user_data()

        mock_gateway.create_user_balance.assert_called_once_with(
            {"user_id": user_id, **DEFAULT_BALANCE}
        )
        assert mock_gateway.create_card.call_count == 2
        card_types = [c.args[0]["card_type"] for c in mock_gateway.create_card.call_args_list]
        assert card_types == ["solid", "virtual"]
        for call in mock_gateway.create_card.call_args_list:
            assert is_luhn_valid(call.args[0]["card_number"])

    def test_provisions_when_balance_not_found(self, wallet, mock_gateway):
        mock_gateway.get_user_balance.side_effect = lambda *_: RemoteResult.failure(
            "no rows", code=NOT_FOUND_CODE
        )
        wallet.load_user_data()
        mock_gateway.create_user_balance.assert_called_once()

    def test_does_not_provision_on_other_errors(self, wallet, mock_gateway):
        mock_gateway.get_user_balance.side_effect = lambda *_: RemoteResult.failure(
            "denied", code="42501"
        )
        mock_gateway.get_user_cards.side_effect = lambda *_: RemoteResult.failure("denied")

        wallet.load_user_data()

        mock_gateway.create_user_balance.assert_not_called()
        mock_gateway.create_card.assert_not_called()

    def test_existing_records_not_reprovisioned(self, wallet, mock_gateway, user_id):
        mock_gateway.get_user_balance.side_effect = lambda *_: RemoteResult.success(
            {"user_id": user_id, "dzd": 500}
        )
        mock_gateway.get_user_cards.side_effect = lambda *_: RemoteResult.success(
            [{"id": "c1", "user_id": user_id, "card_number": "4111111111111111", "card_type": "solid"}]
        )

        wallet.load_user_data()

        mock_gateway.create_user_balance.assert_not_called()
        mock_gateway.create_card.assert_not_called()
        assert wallet.balance.dzd == Decimal("500")
        assert wallet.cards[0].masked_number == "**** **** **** 1111"

    def test_maps_loaded_records(self, wallet, mock_gateway, user_id):
        mock_gateway.get_user_profile.side_effect = lambda *_: RemoteResult.success(
            {"id": user_id, "email": SENDER_EMAIL, "full_name": "Sender"}
        )
        mock_gateway.get_user_transactions.side_effect = lambda *_: RemoteResult.success(
            [{"id": "t1", "user_id": user_id, "type": "recharge", "amount": 100}]
        )
        mock_gateway.get_investment_balance.side_effect = lambda *_: RemoteResult.success(
            {"investment_balance": 2500}
        )

        result = wallet.load_user_data()

        assert result.ok
        assert wallet.profile.email == SENDER_EMAIL
        assert wallet.transactions[0].id == "t1"
        assert wallet.investment_balance == Decimal("2500")
        assert wallet.loading is False
        assert wallet.error is None

    def test_failed_loader_keeps_cached_value(self, wallet, mock_gateway):
        cached = [MagicMock(id="old")]
        wallet.transactions = cached
        mock_gateway.get_user_transactions.side_effect = lambda *_: RemoteResult.failure("down")

        wallet.load_user_data()

        assert wallet.transactions is cached

    def test_unexpected_exception_sets_error(self, wallet, mock_gateway):
        mock_gateway.get_user_profile.side_effect = RuntimeError("exploded")

        result = wallet.load_user_data()

        assert result.error.message == "exploded"
        assert wallet.error == "exploded"
        assert wallet.loading is False


@pytest.mark.unit
class TestCacheUpdates:
    def test_update_balance_sends_only_provided_fields(self, wallet, mock_gateway, user_id):
        mock_gateway.update_user_balance.return_value = RemoteResult.success(
            {"user_id": user_id, "dzd": 900, "investment_balance": 100}
        )

        result = wallet.update_balance({"dzd": Decimal("900"), "eur": None})

        mock_gateway.update_user_balance.assert_called_once_with(user_id, {"dzd": Decimal("900")})
        assert result.data.dzd == Decimal("900")
        assert wallet.balance.dzd == Decimal("900")
        assert wallet.investment_balance == Decimal("100")

    def test_update_balance_error_sets_wallet_error(self, wallet, mock_gateway):
        mock_gateway.update_user_balance.return_value = RemoteResult.failure("denied")

        result = wallet.update_balance({"dzd": 1})

        assert result.error.message == "denied"
        assert wallet.error == "denied"

    def test_update_investment_balance_merges(self, signed_in_wallet, mock_gateway):
        mock_gateway.process_investment.return_value = RemoteResult.success(
            {"dzd": 14000, "investment_balance": 1000}
        )

        signed_in_wallet.update_investment_balance(Decimal("1000"), "add")

        assert signed_in_wallet.balance.dzd == Decimal("14000")
        assert signed_in_wallet.investment_balance == Decimal("1000")

    def test_add_transaction_prepends(self, wallet, mock_gateway, user_id):
        wallet.transactions = [MagicMock(id="old")]
        mock_gateway.create_transaction.return_value = RemoteResult.success(
            {"id": "new", "user_id": user_id, "type": "recharge", "amount": 50}
        )

        wallet.add_transaction({"type": "recharge", "amount": 50})

        sent = mock_gateway.create_transaction.call_args.args[0]
        assert sent["user_id"] == user_id
        assert [t.id for t in wallet.transactions] == ["new", "old"]

    def test_update_card_status_replaces_by_id(self, wallet, mock_gateway, user_id):
        wallet.cards = [
            Card(id="c1", user_id=user_id, card_number="4111111111111111", card_type="solid"),
            Card(id="c2", user_id=user_id, card_number="4000000000000002", card_type="virtual"),
        ]
        mock_gateway.update_card.return_value = RemoteResult.success(
            {"id": "c2", "user_id": user_id, "card_number": "4000000000000002",
             "card_type": "virtual", "is_frozen": True}
        )

        wallet.update_card_status("c2", {"is_frozen": True})

        assert wallet.cards[0].is_frozen is False
        assert wallet.cards[1].is_frozen is True

    def test_add_referral_sets_referrer(self, wallet, mock_gateway, user_id):
        mock_gateway.create_referral.return_value = RemoteResult.success(
            {"id": "r1", "referrer_id": user_id, "referred_id": "u2"}
        )
        wallet.add_referral({"referred_id": "u2"})
        assert mock_gateway.create_referral.call_args.args[0]["referrer_id"] == user_id
        assert wallet.referrals[0].id == "r1"

    def test_referral_stats(self, wallet, mock_gateway):
        mock_gateway.get_referral_stats.return_value = RemoteResult.success(
            {
                "total_referrals": 4,
                "completed_referrals": 1,
                "total_earnings": 500,
                "this_month_referrals": 2,
                "pending_rewards": 3,
            }
        )
        stats = wallet.get_referral_stats().data
        assert stats.total_earnings == Decimal("500")
        assert stats.pending_rewards == 3


@pytest.mark.unit
class TestProcessTransfer:
    def success_rows(self, **overrides):
        row = {
            "success": True,
            "message": "Transfer completed",
            "reference_number": "TRF-123",
            "sender_new_balance": 14500,
        }
        row.update(overrides)
        return RemoteResult.success([row])

    def test_requires_sender_email(self, wallet, mock_gateway):
        result = wallet.process_transfer(Decimal("500"), "you@example.dz")
        assert result.error.message == MISSING_EMAIL_MESSAGE
        mock_gateway.process_simple_transfer.assert_not_called()

    def test_rejects_non_positive_amount(self, signed_in_wallet, mock_gateway):
        result = signed_in_wallet.process_transfer("0", "you@example.dz")
        assert result.error.message == "Transfer amount must be greater than zero"
        mock_gateway.process_simple_transfer.assert_not_called()

    def test_rejects_blank_recipient(self, signed_in_wallet, mock_gateway):
        result = signed_in_wallet.process_transfer(Decimal("500"), "   ")
        assert result.error.message == "Recipient identifier is required"

    def test_rejects_below_minimum(self, signed_in_wallet, mock_gateway):
        result = signed_in_wallet.process_transfer(Decimal("99"), "you@example.dz")
        assert result.error.message == "Minimum transfer amount is 100 DZD"
        mock_gateway.process_simple_transfer.assert_not_called()

    def test_success_updates_balance_and_schedules_reload(
        self, signed_in_wallet, mock_gateway, fake_scheduler
    ):
        mock_gateway.process_simple_transfer.return_value = self.success_rows()

        result = signed_in_wallet.process_transfer(Decimal("500"), " you@example.dz ", "Rent")

        mock_gateway.process_simple_transfer.assert_called_once_with(
            SENDER_EMAIL, "you@example.dz", Decimal("500"), "Rent"
        )
        assert result.data.reference == "TRF-123"
        assert signed_in_wallet.balance.dzd == Decimal("14500")
        assert len(fake_scheduler.pending) == 1
        assert fake_scheduler.pending[0].delay == 1.0

    def test_reload_runs_when_timer_fires(self, signed_in_wallet, mock_gateway, fake_scheduler):
        mock_gateway.process_simple_transfer.return_value = self.success_rows()
        signed_in_wallet.process_transfer(Decimal("500"), "you@example.dz")

        fake_scheduler.fire_all()

        mock_gateway.get_user_profile.assert_called_once()

    def test_default_description(self, signed_in_wallet, mock_gateway):
        mock_gateway.process_simple_transfer.return_value = self.success_rows()
        signed_in_wallet.process_transfer(Decimal("500"), "you@example.dz")
        assert mock_gateway.process_simple_transfer.call_args.args[3] == "Instant transfer"

    def test_default_success_message(self, signed_in_wallet, mock_gateway):
        mock_gateway.process_simple_transfer.return_value = self.success_rows(message=None)
        result = signed_in_wallet.process_transfer(Decimal("500"), "you@example.dz")
        assert result.data.message == "Transfer completed successfully"

    def test_backend_rejection_message_is_kept(self, signed_in_wallet, mock_gateway, fake_scheduler):
        mock_gateway.process_simple_transfer.return_value = RemoteResult.success(
            [{"success": False, "message": "Recipient not found"}]
        )

        result = signed_in_wallet.process_transfer(Decimal("500"), "ghost@example.dz")

        assert result.error.message == "Recipient not found"
        assert signed_in_wallet.balance.dzd == Decimal("15000")
        assert fake_scheduler.pending == []

    def test_missing_success_flag_counts_as_success(
        self, signed_in_wallet, mock_gateway, fake_scheduler
    ):
        mock_gateway.process_simple_transfer.return_value = RemoteResult.success(
            [{"reference_number": "TRF-1", "sender_new_balance": 14000, "message": "ok"}]
        )

        result = signed_in_wallet.process_transfer(Decimal("1000"), "you@example.dz")

        assert result.ok
        assert result.data.success is True
        assert result.data.reference == "TRF-1"
        assert result.data.message == "ok"
        assert signed_in_wallet.balance.dzd == Decimal("14000")
        assert len(fake_scheduler.pending) == 1

    def test_non_dict_row_is_an_error(self, signed_in_wallet, mock_gateway):
        mock_gateway.process_simple_transfer.return_value = RemoteResult.success(["TRF-1"])
        result = signed_in_wallet.process_transfer(Decimal("500"), "you@example.dz")
        assert result.error.message == "Unexpected response from the server"
        assert signed_in_wallet.balance.dzd == Decimal("15000")

    def test_empty_response(self, signed_in_wallet, mock_gateway):
        mock_gateway.process_simple_transfer.return_value = RemoteResult.success([])
        result = signed_in_wallet.process_transfer(Decimal("500"), "you@example.dz")
        assert result.error.message == "No result returned from the server"

    def test_transport_error_does_not_touch_wallet_error(self, signed_in_wallet, mock_gateway):
        mock_gateway.process_simple_transfer.return_value = RemoteResult.failure("timeout")

        result = signed_in_wallet.process_transfer(Decimal("500"), "you@example.dz")

        assert result.error.message == "timeout"
        assert signed_in_wallet.error is None

    def test_custom_minimum(self, mock_gateway, user_id, fake_scheduler):
        wallet = Wallet(
            mock_gateway,
            user_id,
            scheduler=fake_scheduler,
            transfer_limits=TransferLimits(min_amount=Decimal("1000")),
        )
        wallet.profile = UserProfile(id=user_id, email=SENDER_EMAIL)
        result = wallet.process_transfer(Decimal("500"), "you@example.dz")
        assert result.error.message == "Minimum transfer amount is 1,000 DZD"


@pytest.mark.unit
class TestSearchAndHistory:
    def test_short_query_skips_backend(self, wallet, mock_gateway):
        result = wallet.search_users(" a ")
        assert result.data == []
        mock_gateway.find_user_simple.assert_not_called()

    def test_search_maps_candidates(self, wallet, mock_gateway):
        mock_gateway.find_user_simple.return_value = RemoteResult.success(
            [{"user_email": "amina@example.dz", "user_name": "Amina"}]
        )
        result = wallet.search_users("am")
        assert result.data[0].email == "amina@example.dz"

    def test_search_error_returns_empty_list(self, wallet, mock_gateway):
        mock_gateway.find_user_simple.return_value = RemoteResult.failure("down")
        result = wallet.search_users("amina")
        assert result.data == []
        assert result.error.message == "down"

    def test_instant_history_requires_email(self, wallet):
        assert wallet.get_instant_transfer_history().error.message == MISSING_EMAIL_MESSAGE

    def test_instant_history(self, signed_in_wallet, mock_gateway):
        mock_gateway.get_transfer_history_simple.return_value = RemoteResult.success(
            [{"transfer_id": "t1", "amount": 500, "transfer_type": "sent"}]
        )
        entries = signed_in_wallet.get_instant_transfer_history().data
        mock_gateway.get_transfer_history_simple.assert_called_once_with(SENDER_EMAIL)
        assert entries[0].id == "t1"

    def test_limits_require_user(self, mock_gateway):
        wallet = Wallet(mock_gateway, None)
        assert wallet.get_transfer_limits().error.message == MISSING_USER_MESSAGE

    def test_transfer_history_requires_user(self, mock_gateway):
        wallet = Wallet(mock_gateway, None)
        assert wallet.get_transfer_history().error.message == MISSING_USER_MESSAGE
        mock_gateway.get_transfer_requests.assert_not_called()

    def test_transfer_history_maps_embedded_recipient(self, wallet, mock_gateway, user_id):
        mock_gateway.get_transfer_requests.return_value = RemoteResult.success(
            [
                {
                    "id": "t2",
                    "amount": 750,
                    "status": "pending",
                    "created_at": "2026-10-02T09:00:00+00:00",
                    "recipient": {"full_name": "Amina", "email": "amina@example.dz"},
                },
                {"id": "t1", "amount": 500, "created_at": "2026-10-01T09:00:00+00:00"},
            ]
        )

        entries = wallet.get_transfer_history().data

        mock_gateway.get_transfer_requests.assert_called_once_with(user_id)
        assert [entry.id for entry in entries] == ["t2", "t1"]
        assert entries[0].counterparty_name == "Amina"
        assert entries[0].counterparty_email == "amina@example.dz"
        assert entries[0].status == "pending"
        assert entries[1].counterparty_name is None

    def test_transfer_history_error(self, wallet, mock_gateway):
        mock_gateway.get_transfer_requests.return_value = RemoteResult.failure("denied")
        assert wallet.get_transfer_history().error.message == "denied"

    def test_check_limits_requires_user(self, mock_gateway):
        wallet = Wallet(mock_gateway, None)
        result = wallet.check_instant_transfer_limits(Decimal("500"))
        assert result.error.message == MISSING_USER_MESSAGE
        mock_gateway.check_instant_transfer_limits.assert_not_called()

    def test_check_limits_delegates(self, wallet, mock_gateway, user_id):
        mock_gateway.check_instant_transfer_limits.return_value = RemoteResult.success(
            {"allowed": True}
        )
        result = wallet.check_instant_transfer_limits(Decimal("500"))
        mock_gateway.check_instant_transfer_limits.assert_called_once_with(
            user_id, Decimal("500")
        )
        assert result.data == {"allowed": True}

    def test_balance_simple_needs_no_signed_in_user(self, mock_gateway):
        mock_gateway.get_user_balance_simple.return_value = RemoteResult.success(
            {"balance": 15000}
        )
        wallet = Wallet(mock_gateway, None)
        assert wallet.get_user_balance_simple("me@example.dz").data == {"balance": 15000}
        mock_gateway.get_user_balance_simple.assert_called_once_with("me@example.dz")

    def test_update_balance_simple_delegates(self, mock_gateway):
        mock_gateway.update_user_balance_simple.return_value = RemoteResult.failure("denied")
        wallet = Wallet(mock_gateway, None)
        result = wallet.update_user_balance_simple("me@example.dz", Decimal("1000"))
        mock_gateway.update_user_balance_simple.assert_called_once_with(
            "me@example.dz", Decimal("1000")
        )
        assert result.error.message == "denied"
