"""Step state machine for the instant transfer screen.

``FORM -> CONFIRM -> PROCESSING -> SUCCESS``, with ``CONFIRM -> FORM`` on
"back", ``PROCESSING -> FORM`` on any failure and ``SUCCESS -> FORM`` after a
timed or manual reset. Only one transfer can be processing at a time.
"""

from __future__ import annotations

import logging
import threading
from decimal import Decimal
from enum import Enum
from typing import Callable

from dinar_wallet.config import DEFAULT_TRANSFER_LIMITS, TransferLimits
from dinar_wallet.features.transfer.service import RecipientResolver, TransferService
from dinar_wallet.features.transfer.validators import (
    INSUFFICIENT_BALANCE_MESSAGE,
    INVALID_AMOUNT_MESSAGE,
    TransferAmountValidator,
    TransferValidationResult,
)
from dinar_wallet.models import RecipientCandidate, RemoteResult, TransferResult
from dinar_wallet.shared.scheduling import ScheduledCall, Scheduler, thread_scheduler

logger = logging.getLogger(__name__)

DEFAULT_DESCRIPTION = "Instant transfer"
MISSING_USER_MESSAGE = "User ID is not available"
TRANSFER_FAILED_MESSAGE = "Transfer failed"
NO_TRANSFER_DATA_MESSAGE = "No transfer data was returned"
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred during the transfer"


class TransferStep(Enum):
    FORM = 1
    CONFIRM = 2
    PROCESSING = 3
    SUCCESS = 4


class TransferFlow:
    def __init__(
        self,
        service: TransferService,
        resolver: RecipientResolver | None = None,
        limits: TransferLimits = DEFAULT_TRANSFER_LIMITS,
        scheduler: Scheduler = thread_scheduler,
        on_change: Callable[["TransferFlow"], None] | None = None,
        on_error: Callable[[str], None] | None = None,
        on_transfer: Callable[[Decimal, str], None] | None = None,
    ):
        self.service = service
        self.limits = limits
        self.validator = TransferAmountValidator(limits)
        self.resolver = resolver or RecipientResolver(
            service.search_recipients, limits=limits, scheduler=scheduler
        )
        self.scheduler = scheduler
        self.on_change = on_change
        self.on_error = on_error
        self.on_transfer = on_transfer

        self.step = TransferStep.FORM
        self.amount = ""
        self.recipient = ""
        self.description = ""
        self.result: TransferResult | None = None
        self.error_message: str | None = None
        self.is_processing = False

        self._lock = threading.RLock()
        self._reset_handle: ScheduledCall | None = None
        self._reset_generation = 0
        self._pending: tuple[Decimal | None, str, str] | None = None

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change(self)

    def _show_error(self, message: str) -> None:
        self.error_message = message
        if self.on_error is not None:
            self.on_error(message)

    # Form

    def update_amount(self, text: str) -> None:
        self.amount = text
        self._changed()

    def update_recipient(self, text: str) -> None:
        self.recipient = text
        self.resolver.update_query(text)
        self._changed()

    def update_description(self, text: str) -> None:
        self.description = text
        self._changed()

    def select_recipient(self, candidate: RecipientCandidate) -> None:
        self.resolver.select(candidate)
        self.recipient = candidate.email
        self._changed()

    @property
    def parsed_amount(self) -> Decimal | None:
        parsed = self.validator.parse_amount(self.amount)
        return parsed.normalized_value if parsed.is_valid else None

    @property
    def can_proceed(self) -> bool:
        return self.validator.can_proceed(
            self.amount, self.recipient, self.service.balance_dzd
        )

    @property
    def balance_after(self) -> Decimal | None:
        """Projected DZD balance shown under the amount while filling the form."""
        if self.step is not TransferStep.FORM:
            return None
        amount = self.parsed_amount
        balance = self.service.balance_dzd
        if amount is None or balance is None:
            return None
        return balance - amount

    def next(self) -> TransferValidationResult:
        validation = self.validator.validate_for_next(
            self.amount, self.recipient, self.service.balance_dzd
        )
        if not validation.is_valid:
            self._show_error(validation.error_message)
            self._changed()
            return validation

        with self._lock:
            if self.step is TransferStep.FORM:
                self.step = TransferStep.CONFIRM
                self.error_message = None
        self._changed()
        return validation

    def back(self) -> None:
        with self._lock:
            if self.step is not TransferStep.CONFIRM:
                return
            self.step = TransferStep.FORM
        self._changed()

    # Execution

    def start_processing(self) -> bool:
        """Claim the flow for one transfer; returns False if one is already running."""
        with self._lock:
            if self.is_processing or self.step is not TransferStep.CONFIRM:
                return False
            self.is_processing = True
            self.step = TransferStep.PROCESSING
            self._pending = (
                self.parsed_amount,
                self.recipient.strip(),
                self.description.strip() or DEFAULT_DESCRIPTION,
            )
        self._changed()
        return True

    def execute(self) -> TransferResult | None:
        """Run the claimed transfer. Blocking; call from a worker thread."""
        with self._lock:
            pending = self._pending
            self._pending = None
        if pending is None:
            return None

        amount, recipient, description = pending
        try:
            if not self.service.user_id:
                self._abort(MISSING_USER_MESSAGE)
                return None

            if amount is None:
                self._abort(INVALID_AMOUNT_MESSAGE)
                return None

            balance = self.service.balance_dzd
            if balance is not None and amount > balance:
                self._abort(INSUFFICIENT_BALANCE_MESSAGE)
                return None

            logger.info(f"Submitting instant transfer of {amount} DZD")
            result = self.service.send_transfer(amount, recipient, description)
            return self.finish_processing(result, amount, recipient)
        except Exception as e:
            logger.error(f"Unexpected transfer error: {e}", exc_info=True)
            self._abort(str(e) or UNEXPECTED_ERROR_MESSAGE)
            return None
        finally:
            with self._lock:
                self.is_processing = False
            self._changed()

    def finish_processing(
        self, result: RemoteResult[TransferResult], amount: Decimal, recipient: str
    ) -> TransferResult | None:
        if result.error:
            logger.warning(f"Transfer failed: {result.error.message}")
            self._abort(result.error.message or TRANSFER_FAILED_MESSAGE)
            return None

        if result.data is None:
            self._abort(NO_TRANSFER_DATA_MESSAGE)
            return None

        with self._lock:
            self.result = result.data
            self.step = TransferStep.SUCCESS
            self.error_message = None
        self._schedule_reset()
        self._changed()

        if self.on_transfer is not None:
            try:
                self.on_transfer(amount, recipient)
            except Exception as e:
                logger.error(f"Transfer callback failed: {e}", exc_info=True)
        return result.data

    def confirm(self) -> TransferResult | None:
        if not self.start_processing():
            return None
        return self.execute()

    def _abort(self, message: str) -> None:
        with self._lock:
            self.step = TransferStep.FORM
        self._show_error(message)

    # Reset

    def _schedule_reset(self) -> None:
        with self._lock:
            if self._reset_handle is not None:
                self._reset_handle.cancel()
            self._reset_generation += 1
            generation = self._reset_generation

        def auto_reset() -> None:
            with self._lock:
                if generation != self._reset_generation:
                    return
            self.reset()

        handle = self.scheduler(self.limits.success_reset_seconds, auto_reset)
        with self._lock:
            if generation == self._reset_generation:
                self._reset_handle = handle

    def reset(self) -> None:
        with self._lock:
            self._reset_generation += 1
            if self._reset_handle is not None:
                self._reset_handle.cancel()
                self._reset_handle = None
            if self.step is TransferStep.PROCESSING:
                return
            self.step = TransferStep.FORM
            self.result = None
            self.amount = ""
            self.recipient = ""
            self.description = ""
        self.resolver.clear()
        self._changed()

    def new_transfer(self) -> None:
        self.reset()
