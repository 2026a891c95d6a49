"""Transfer-specific validators for Dinar Wallet."""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

from dinar_wallet.config import DEFAULT_TRANSFER_LIMITS, TransferLimits

MISSING_FIELDS_MESSAGE = "Please fill in all required fields"
INVALID_AMOUNT_MESSAGE = "Please enter a valid amount"
UNKNOWN_BALANCE_MESSAGE = "Unable to determine current balance"
INSUFFICIENT_BALANCE_MESSAGE = "Insufficient balance for this transfer"


@dataclass
class TransferValidationResult:
    is_valid: bool
    error_message: str | None = None
    normalized_value: Any = None


class TransferAmountValidator:
    """Checks a DZD transfer amount against the instant-transfer limits and balance."""

    def __init__(self, limits: TransferLimits = DEFAULT_TRANSFER_LIMITS):
        self.limits = limits

    @staticmethod
    def parse_amount(value: str) -> TransferValidationResult:
        if not value or not value.strip():
            return TransferValidationResult(
                is_valid=False,
                error_message="Amount is required",
            )

        raw_amount = value.strip().replace(",", "").replace(" ", "")

        try:
            amount_decimal = Decimal(raw_amount)
        except (InvalidOperation, ValueError):
            return TransferValidationResult(
                is_valid=False,
                error_message="Amount must be a valid number",
            )

        if not amount_decimal.is_finite():
            return TransferValidationResult(
                is_valid=False,
                error_message="Invalid numeric format (special value detected)",
            )

        if amount_decimal <= 0:
            return TransferValidationResult(
                is_valid=False,
                error_message="Amount must be greater than zero",
            )

        return TransferValidationResult(
            is_valid=True,
            normalized_value=amount_decimal,
        )

    @property
    def min_amount_message(self) -> str:
        return f"Minimum transfer amount is {self.limits.min_amount:,} DZD"

    @property
    def max_amount_message(self) -> str:
        return f"Maximum transfer amount is {self.limits.max_amount:,} DZD"

    def can_proceed(
        self, amount: str, recipient: str, balance_dzd: Decimal | None
    ) -> bool:
        """Whether the "Next" action is enabled for the current form values."""
        if not amount or not recipient or not recipient.strip():
            return False
        parsed = self.parse_amount(amount)
        if not parsed.is_valid:
            return False
        value = parsed.normalized_value
        if value < self.limits.min_amount or value > self.limits.max_amount:
            return False
        if balance_dzd is not None and value > balance_dzd:
            return False
        return True

    def validate_for_next(
        self, amount: str, recipient: str, balance_dzd: Decimal | None
    ) -> TransferValidationResult:
        if not amount or not recipient or not recipient.strip():
            return TransferValidationResult(
                is_valid=False, error_message=MISSING_FIELDS_MESSAGE
            )

        parsed = self.parse_amount(amount)
        if not parsed.is_valid:
            return TransferValidationResult(
                is_valid=False, error_message=INVALID_AMOUNT_MESSAGE
            )
        value = parsed.normalized_value

        if balance_dzd is None:
            return TransferValidationResult(
                is_valid=False, error_message=UNKNOWN_BALANCE_MESSAGE
            )

        balance_result = self.validate_against_balance(value, balance_dzd)
        if not balance_result.is_valid:
            return balance_result

        if value < self.limits.min_amount:
            return TransferValidationResult(
                is_valid=False, error_message=self.min_amount_message
            )

        if value > self.limits.max_amount:
            return TransferValidationResult(
                is_valid=False, error_message=self.max_amount_message
            )

        return TransferValidationResult(is_valid=True, normalized_value=value)

    @staticmethod
    def validate_against_balance(
        amount: Decimal, balance_dzd: Decimal
    ) -> TransferValidationResult:
        if amount > balance_dzd:
            return TransferValidationResult(
                is_valid=False,
                error_message=INSUFFICIENT_BALANCE_MESSAGE,
            )

        return TransferValidationResult(is_valid=True)
