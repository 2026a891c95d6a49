"""Card management business logic for Dinar Wallet."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Protocol

from dinar_wallet.models import Card, RemoteResult
from dinar_wallet.shared.validation import parse_decimal

logger = logging.getLogger(__name__)


class WalletProtocol(Protocol):
    """Protocol defining wallet interface needed for cards."""

    cards: list[Card]

    def update_card_status(
        self, card_id: str, updates: dict[str, Any]
    ) -> RemoteResult[Card]: ...


class CardService:
    """Service for handling card-related business logic."""

    def __init__(self, wallet: WalletProtocol):
        self.wallet = wallet

    def get_cards(self) -> list[Card]:
        return list(self.wallet.cards)

    def get_card(self, card_id: str) -> Card | None:
        for card in self.wallet.cards:
            if card.id == card_id:
                return card
        return None

    def get_card_by_type(self, card_type: str) -> Card | None:
        for card in self.wallet.cards:
            if card.card_type == card_type:
                return card
        return None

    def set_frozen(self, card_id: str, frozen: bool) -> RemoteResult[Card]:
        if self.get_card(card_id) is None:
            return RemoteResult.failure("Card not found")
        result = self.wallet.update_card_status(card_id, {"is_frozen": frozen})
        if not result.error:
            logger.info(f"Card {card_id} {'frozen' if frozen else 'unfrozen'}")
        return result

    def toggle_frozen(self, card_id: str) -> RemoteResult[Card]:
        """Freeze an active card or unfreeze a frozen one."""
        card = self.get_card(card_id)
        if card is None:
            return RemoteResult.failure("Card not found")
        return self.set_frozen(card_id, not card.is_frozen)

    def set_spending_limit(self, card_id: str, limit: str | Decimal) -> RemoteResult[Card]:
        if self.get_card(card_id) is None:
            return RemoteResult.failure("Card not found")
        parsed = parse_decimal(limit)
        if parsed is None or parsed <= 0:
            return RemoteResult.failure("Spending limit must be greater than zero")
        return self.wallet.update_card_status(card_id, {"spending_limit": parsed})
