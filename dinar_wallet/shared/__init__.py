"""Shared utilities for Dinar Wallet."""

from dinar_wallet.shared.logging import (
    ContextAdapter,
    LoggingConfig,
    LogLevel,
    format_error_for_user,
    get_logger,
    get_user_friendly_error,
    sanitize_dict,
    sanitize_message,
    setup_logging,
)
from dinar_wallet.shared.network import (
    NetworkClient,
    NetworkError,
    NetworkErrorType,
    QueryOptions,
    TimeoutConfig,
)
from dinar_wallet.shared.scheduling import Debouncer, Scheduler, thread_scheduler
from dinar_wallet.shared.validation import (
    InvestmentValidator,
    SavingsGoalValidator,
    TransactionValidator,
    ValidationResult,
)

__all__ = [
    "NetworkClient",
    "NetworkError",
    "NetworkErrorType",
    "QueryOptions",
    "TimeoutConfig",
    "Debouncer",
    "Scheduler",
    "thread_scheduler",
    "InvestmentValidator",
    "SavingsGoalValidator",
    "TransactionValidator",
    "ValidationResult",
    "ContextAdapter",
    "LoggingConfig",
    "LogLevel",
    "format_error_for_user",
    "get_logger",
    "get_user_friendly_error",
    "sanitize_dict",
    "sanitize_message",
    "setup_logging",
]
