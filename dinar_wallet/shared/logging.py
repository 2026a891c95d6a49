"""Logging setup for Dinar Wallet.

Log records go to ``dinar-wallet.log`` in the wallet directory (and
optionally stdout) as either human-readable lines or JSON objects. Bearer
tokens, API keys, passwords and card numbers are masked before anything is
written. Raw backend errors can be turned into short user-facing text with
:func:`get_user_friendly_error`.
"""

from __future__ import annotations

import json
import logging
import os
import re
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any

DEFAULT_LOG_DIR = Path.home() / ".config" / "dinar-wallet"
TRUTHY = ("1", "true", "yes", "on")


class LogLevel(Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    @property
    def numeric(self) -> int:
        return logging.getLevelName(self.value)


@dataclass
class LoggingConfig:
    log_level: LogLevel = LogLevel.INFO
    log_format: str = "human"
    log_to_file: bool = True
    log_to_stdout: bool = False
    log_dir: Path | None = None
    log_filename: str = "dinar-wallet.log"
    sanitize_sensitive: bool = True
    include_context: bool = True

    @classmethod
    def from_environment(cls) -> "LoggingConfig":
        try:
            level = LogLevel(os.getenv("DINAR_WALLET_LOG_LEVEL", "INFO").upper())
        except ValueError:
            level = LogLevel.INFO

        log_format = os.getenv("DINAR_WALLET_LOG_FORMAT", "human").lower()
        wallet_dir = os.getenv("DINAR_WALLET_DIR")
        return cls(
            log_level=level,
            log_format="json" if log_format == "json" else "human",
            log_to_stdout=os.getenv("DINAR_WALLET_LOG_STDOUT", "").lower() in TRUTHY,
            log_dir=Path(wallet_dir).expanduser() if wallet_dir else None,
        )

    @property
    def log_path(self) -> Path:
        return (self.log_dir or DEFAULT_LOG_DIR) / self.log_filename


# Redactions are applied in order; the JWT rule must run after the bearer rule.
REDACTIONS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"(bearer\s+)[\w-]+\.[\w-]+\.[\w-]+", re.IGNORECASE), r"\1[REDACTED]"),
    (
        re.compile(
            r"((?:api[_-]?key|anon[_-]?key|access[_-]?token|password)['\"]?\s*[:=]\s*['\"]?)"
            r"[^\s'\",}]+",
            re.IGNORECASE,
        ),
        r"\1[REDACTED]",
    ),
    (re.compile(r"\beyJ[\w-]+\.[\w-]+\.[\w-]+\b"), "[TOKEN_REDACTED]"),
    (re.compile(r"\b\d{4}[ -]?\d{4}[ -]?\d{4}[ -]?(\d{4})\b"), r"**** **** **** \1"),
]

EMAIL_PATTERN = re.compile(r"\b[\w.+-]+@[\w-]+\.[\w.-]+\b")

SENSITIVE_KEYS = ("password", "secret", "token", "apikey", "api_key", "authorization")


def sanitize_message(message: str, preserve_emails: bool = True) -> str:
    if not message:
        return message
    for pattern, replacement in REDACTIONS:
        message = pattern.sub(replacement, message)
    if not preserve_emails:
        message = EMAIL_PATTERN.sub("[EMAIL_REDACTED]", message)
    return message


def _sanitize_value(value: Any, preserve_emails: bool) -> Any:
    if isinstance(value, str):
        return sanitize_message(value, preserve_emails)
    if isinstance(value, dict):
        return sanitize_dict(value, preserve_emails)
    if isinstance(value, (list, tuple)):
        return [_sanitize_value(item, preserve_emails) for item in value]
    return value


def sanitize_dict(data: dict[str, Any], preserve_emails: bool = True) -> dict[str, Any]:
    """Copy ``data`` with sensitive keys blanked and string values masked."""
    sanitized: dict[str, Any] = {}
    for key, value in data.items():
        if any(marker in key.lower() for marker in SENSITIVE_KEYS):
            sanitized[key] = "[REDACTED]"
        else:
            sanitized[key] = _sanitize_value(value, preserve_emails)
    return sanitized


@dataclass(frozen=True)
class ErrorMapping:
    pattern: re.Pattern[str]
    message: str
    suggestion: str | None = None


def _mapping(pattern: str, message: str, suggestion: str | None = None) -> ErrorMapping:
    return ErrorMapping(re.compile(pattern, re.IGNORECASE), message, suggestion)


# First match wins, so specific "not found" cases precede the generic one.
ERROR_MAPPINGS: list[ErrorMapping] = [
    _mapping(
        r"timeout|timed out",
        "Connection timed out. The server may be slow or unavailable.",
        "Try again later or check your network connection.",
    ),
    _mapping(
        r"connection refused|cannot connect|connection error",
        "Unable to connect to the server.",
        "Check your internet connection and try again.",
    ),
    _mapping(
        r"insufficient (balance|funds)|not enough balance",
        "Insufficient balance for this operation.",
        "Top up your wallet or lower the amount.",
    ),
    _mapping(
        r"(recipient|user).*not found",
        "The recipient could not be found.",
        "Check the email address or account number.",
    ),
    _mapping(
        r"jwt expired|invalid jwt|unauthorized|forbidden|\b40[13]\b",
        "Access denied. Your session may have expired.",
        "Sign in again and retry.",
    ),
    _mapping(
        r"limit.*exceeded|exceeds.*limit",
        "This amount exceeds your transfer limit.",
        "Lower the amount or try again tomorrow.",
    ),
    _mapping(
        r"rate limit|too many requests|\b429\b",
        "Too many requests. Please slow down.",
        "Wait a moment and try again.",
    ),
    _mapping(
        r"not found|\b404\b",
        "The requested record was not found.",
        "It may have been removed; refresh and try again.",
    ),
    _mapping(
        r"network.*error|networkerror",
        "A network error occurred.",
        "Check your internet connection.",
    ),
]


def get_user_friendly_error(error: Exception | str) -> tuple[str, str | None]:
    """Return ``(message, suggestion)``; suggestion is None for unmapped errors."""
    text = str(error)
    for mapping in ERROR_MAPPINGS:
        if mapping.pattern.search(text):
            return mapping.message, mapping.suggestion
    return "An unexpected error occurred.", None


def format_error_for_user(error: Exception | str) -> str:
    message, suggestion = get_user_friendly_error(error)
    return f"{message} {suggestion}" if suggestion else message


class StructuredFormatter(logging.Formatter):
    """One JSON object per record, with any ``context`` extra attached."""

    def __init__(
        self,
        sanitize: bool = True,
        include_context: bool = True,
        preserve_emails: bool = True,
    ):
        super().__init__()
        self.sanitize = sanitize
        self.include_context = include_context
        self.preserve_emails = preserve_emails

    def _clean(self, text: str) -> str:
        return sanitize_message(text, self.preserve_emails) if self.sanitize else text

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": self._clean(record.getMessage()),
        }
        if self.include_context:
            payload.update(
                module=record.module,
                function=record.funcName,
                line=record.lineno,
                thread=record.threadName,
            )

        context = getattr(record, "context", None)
        if isinstance(context, dict) and context:
            payload["context"] = (
                sanitize_dict(context, self.preserve_emails) if self.sanitize else context
            )
        if record.exc_info:
            payload["exception"] = self._clean(self.formatException(record.exc_info))

        return json.dumps(payload, default=str)


class HumanReadableFormatter(logging.Formatter):
    def __init__(self, sanitize: bool = True, preserve_emails: bool = True):
        super().__init__(
            fmt="%(asctime)s [%(threadName)s] %(name)s %(levelname)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        self.sanitize = sanitize
        self.preserve_emails = preserve_emails

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        return sanitize_message(line, self.preserve_emails) if self.sanitize else line


class ContextAdapter(logging.LoggerAdapter):
    """Logger adapter that carries a ``context`` dict into every record."""

    def __init__(self, logger: logging.Logger, context: dict[str, Any] | None = None):
        super().__init__(logger, dict(context or {}))

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        if self.extra:
            extra["context"] = {**self.extra, **extra.get("context", {})}
        kwargs["extra"] = extra
        return msg, kwargs

    def with_context(self, **context: Any) -> "ContextAdapter":
        return ContextAdapter(self.logger, {**self.extra, **context})


_configured = False


def _build_formatter(config: LoggingConfig) -> logging.Formatter:
    if config.log_format == "json":
        return StructuredFormatter(
            sanitize=config.sanitize_sensitive, include_context=config.include_context
        )
    return HumanReadableFormatter(sanitize=config.sanitize_sensitive)


def _build_handlers(config: LoggingConfig) -> list[logging.Handler]:
    handlers: list[logging.Handler] = []
    if config.log_to_file:
        path = config.log_path
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path, mode="a", encoding="utf-8"))
    if config.log_to_stdout:
        handlers.append(logging.StreamHandler(sys.stdout))
    for handler in handlers:
        handler.setFormatter(_build_formatter(config))
    return handlers


def setup_logging(config: LoggingConfig | None = None) -> None:
    """Configure the root logger once; later calls are no-ops."""
    global _configured
    if _configured:
        return

    config = config or LoggingConfig.from_environment()
    root = logging.getLogger()
    root.setLevel(config.log_level.numeric)
    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in _build_handlers(config):
        root.addHandler(handler)

    # urllib3 logs every connection at DEBUG, including request URLs.
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    _configured = True


def get_logger(name: str, context: dict[str, Any] | None = None) -> ContextAdapter:
    setup_logging()
    return ContextAdapter(logging.getLogger(name), context)


__all__ = [
    "ContextAdapter",
    "ErrorMapping",
    "HumanReadableFormatter",
    "LogLevel",
    "LoggingConfig",
    "StructuredFormatter",
    "format_error_for_user",
    "get_logger",
    "get_user_friendly_error",
    "sanitize_dict",
    "sanitize_message",
    "setup_logging",
]
