"""Dinar Wallet - A terminal-first TUI client for a DZD digital wallet.

This package is organized into feature-based modules:
- features.transfer: Instant peer-to-peer transfers
- features.cards: Card management
- features.savings: Savings goals and investments
- features.profile: Profile, notifications and referrals
- shared: Shared utilities (network, validation, logging, scheduling)
"""

from dinar_wallet.config import AppConfig, ConfigurationError, TransferLimits
from dinar_wallet.gateway import BackendGateway
from dinar_wallet.models import RemoteError, RemoteResult, TransferResult
from dinar_wallet.wallet import Wallet
from dinar_wallet.shared import (
    NetworkClient,
    NetworkError,
    NetworkErrorType,
    TimeoutConfig,
    ValidationResult,
)

__version__ = "0.1.0"
__all__ = [
    "AppConfig",
    "ConfigurationError",
    "TransferLimits",
    "BackendGateway",
    "Wallet",
    "RemoteError",
    "RemoteResult",
    "TransferResult",
    "NetworkClient",
    "NetworkError",
    "NetworkErrorType",
    "TimeoutConfig",
    "ValidationResult",
]
