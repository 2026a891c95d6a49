"""Instant transfer feature module for Dinar Wallet."""

from dinar_wallet.features.transfer.flow import TransferFlow, TransferStep
from dinar_wallet.features.transfer.handlers import TransferHandlersMixin
from dinar_wallet.features.transfer.service import RecipientResolver, TransferService
from dinar_wallet.features.transfer.validators import TransferAmountValidator
from dinar_wallet.features.transfer.screen import (
    TransferConfirmScreen,
    TransferErrorScreen,
    TransferProcessingScreen,
    TransferSuccessScreen,
)

__all__ = [
    "TransferFlow",
    "TransferStep",
    "TransferHandlersMixin",
    "RecipientResolver",
    "TransferService",
    "TransferAmountValidator",
    "TransferConfirmScreen",
    "TransferErrorScreen",
    "TransferProcessingScreen",
    "TransferSuccessScreen",
]
