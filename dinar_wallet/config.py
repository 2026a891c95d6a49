"""Runtime configuration for Dinar Wallet."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Any

from dinar_wallet.shared.network import TimeoutConfig

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    pass


@dataclass(frozen=True)
class TransferLimits:
    min_amount: Decimal = Decimal("100")
    max_amount: Decimal = Decimal("100000")
    search_min_length: int = 2
    search_debounce_seconds: float = 0.3
    success_reset_seconds: float = 5.0
    reload_delay_seconds: float = 1.0


DEFAULT_TRANSFER_LIMITS = TransferLimits()


def resolve_storage_dir(storage_dir: str | Path | None = None) -> Path:
    if storage_dir:
        return Path(storage_dir).expanduser()

    env_dir = os.getenv("DINAR_WALLET_DIR")
    if env_dir:
        return Path(env_dir).expanduser()

    return Path.home() / ".config" / "dinar-wallet"


def _first_env(*names: str) -> str | None:
    for name in names:
        value = os.getenv(name)
        if value:
            return value
    return None


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r", name, raw)
        return default


@dataclass
class AppConfig:
    supabase_url: str
    supabase_anon_key: str
    access_token: str | None = None
    user_id: str | None = None
    storage_dir: Path = field(default_factory=resolve_storage_dir)
    timeout_config: TimeoutConfig = field(default_factory=TimeoutConfig)
    transfer_limits: TransferLimits = DEFAULT_TRANSFER_LIMITS

    @property
    def config_file(self) -> Path:
        return self.storage_dir / "config.json"

    @staticmethod
    def _load_file(path: Path) -> dict[str, Any]:
        if not path.exists():
            return {}
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Failed to read config file %s: %s", path, e)
            return {}
        return data if isinstance(data, dict) else {}

    @classmethod
    def from_environment(cls, storage_dir: str | Path | None = None) -> "AppConfig":
        resolved_dir = resolve_storage_dir(storage_dir)
        file_values = cls._load_file(resolved_dir / "config.json")

        url = _first_env(
            "DINAR_WALLET_SUPABASE_URL", "SUPABASE_URL", "VITE_SUPABASE_URL"
        ) or file_values.get("supabase_url")
        anon_key = _first_env(
            "DINAR_WALLET_SUPABASE_ANON_KEY",
            "SUPABASE_ANON_KEY",
            "VITE_SUPABASE_ANON_KEY",
        ) or file_values.get("supabase_anon_key")

        if not url or not anon_key:
            raise ConfigurationError(
                "Missing backend configuration. Set SUPABASE_URL and "
                "SUPABASE_ANON_KEY (or their DINAR_WALLET_ / VITE_ variants), "
                f"or add them to {resolved_dir / 'config.json'}."
            )

        timeout_config = TimeoutConfig(
            connect_timeout=_float_env(
                "DINAR_WALLET_CONNECT_TIMEOUT", TimeoutConfig.connect_timeout
            ),
            read_timeout=_float_env(
                "DINAR_WALLET_READ_TIMEOUT", TimeoutConfig.read_timeout
            ),
        )

        return cls(
            supabase_url=url,
            supabase_anon_key=anon_key,
            access_token=os.getenv("DINAR_WALLET_ACCESS_TOKEN")
            or file_values.get("access_token"),
            user_id=os.getenv("DINAR_WALLET_USER_ID") or file_values.get("user_id"),
            storage_dir=resolved_dir,
            timeout_config=timeout_config,
        )
