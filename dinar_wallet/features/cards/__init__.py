"""Card management feature module for Dinar Wallet."""

from dinar_wallet.features.cards.handlers import CardHandlersMixin
from dinar_wallet.features.cards.service import CardService
from dinar_wallet.features.cards.screen import FreezeCardScreen, SpendingLimitScreen

__all__ = [
    "CardHandlersMixin",
    "CardService",
    "FreezeCardScreen",
    "SpendingLimitScreen",
]
