"""Savings and investment feature module for Dinar Wallet."""

from dinar_wallet.features.savings.handlers import SavingsHandlersMixin
from dinar_wallet.features.savings.service import SavingsService
from dinar_wallet.features.savings.screen import (
    AmountInputScreen,
    CreateGoalScreen,
    CreateInvestmentScreen,
)

__all__ = [
    "SavingsHandlersMixin",
    "SavingsService",
    "AmountInputScreen",
    "CreateGoalScreen",
    "CreateInvestmentScreen",
]
