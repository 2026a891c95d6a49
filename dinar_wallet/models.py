"""Records mirrored from the wallet backend."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Generic, TypeVar

T = TypeVar("T")

CURRENCIES = ("dzd", "eur", "usd", "gbp")


def to_decimal(value: Any, default: Decimal = Decimal("0")) -> Decimal:
    if value is None or value == "":
        return default
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return default


def decimal_to_json(value: Decimal | None) -> float | None:
    return float(value) if value is not None else None


def parse_timestamp(value: Any) -> datetime | None:
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def format_timestamp(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


@dataclass
class RemoteError:
    message: str
    code: str | None = None
    details: str | None = None
    hint: str | None = None

    def __str__(self) -> str:
        return self.message


@dataclass
class RemoteResult(Generic[T]):
    data: T | None = None
    error: RemoteError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, data: T | None) -> "RemoteResult[T]":
        return cls(data=data)

    @classmethod
    def failure(
        cls, message: str, code: str | None = None, **extra: Any
    ) -> "RemoteResult[T]":
        return cls(error=RemoteError(message=message, code=code, **extra))


@dataclass
class Balance:
    user_id: str
    dzd: Decimal = Decimal("0")
    eur: Decimal = Decimal("0")
    usd: Decimal = Decimal("0")
    gbp: Decimal = Decimal("0")
    investment_balance: Decimal = Decimal("0")
    updated_at: datetime | None = None

    def get(self, currency: str) -> Decimal:
        return getattr(self, currency.lower())

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "dzd": decimal_to_json(self.dzd),
            "eur": decimal_to_json(self.eur),
            "usd": decimal_to_json(self.usd),
            "gbp": decimal_to_json(self.gbp),
            "investment_balance": decimal_to_json(self.investment_balance),
            "updated_at": format_timestamp(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Balance":
        return cls(
            user_id=data.get("user_id", ""),
            dzd=to_decimal(data.get("dzd")),
            eur=to_decimal(data.get("eur")),
            usd=to_decimal(data.get("usd")),
            gbp=to_decimal(data.get("gbp")),
            investment_balance=to_decimal(data.get("investment_balance")),
            updated_at=parse_timestamp(data.get("updated_at")),
        )


@dataclass
class Transaction:
    id: str
    user_id: str
    type: str
    amount: Decimal
    currency: str = "dzd"
    description: str = ""
    status: str = "completed"
    reference: str | None = None
    recipient: str | None = None
    created_at: datetime | None = None

    @property
    def is_outgoing(self) -> bool:
        return self.type in ("transfer", "bill", "investment", "withdrawal")

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "type": self.type,
            "amount": decimal_to_json(self.amount),
            "currency": self.currency,
            "description": self.description,
            "status": self.status,
            "reference": self.reference,
            "recipient": self.recipient,
            "created_at": format_timestamp(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Transaction":
        return cls(
            id=str(data.get("id", "")),
            user_id=data.get("user_id", ""),
            type=data.get("type", "transfer"),
            amount=to_decimal(data.get("amount")),
            currency=(data.get("currency") or "dzd").lower(),
            description=data.get("description") or "",
            status=data.get("status") or "completed",
            reference=data.get("reference"),
            recipient=data.get("recipient"),
            created_at=parse_timestamp(data.get("created_at")),
        )


@dataclass
class TransferResult:
    success: bool
    message: str
    reference: str | None = None
    new_balance: Decimal | None = None

    @classmethod
    def from_rpc_row(cls, row: dict[str, Any]) -> "TransferResult":
        new_balance = row.get("sender_new_balance")
        return cls(
            success=bool(row.get("success")),
            message=row.get("message") or "",
            reference=row.get("reference_number"),
            new_balance=to_decimal(new_balance) if new_balance is not None else None,
        )


@dataclass
class UserProfile:
    id: str
    email: str
    full_name: str = ""
    phone: str | None = None
    address: str | None = None
    username: str | None = None
    account_number: str | None = None
    referral_code: str | None = None
    referral_earnings: Decimal = Decimal("0")

    @property
    def display_name(self) -> str:
        return self.full_name or self.email

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UserProfile":
        return cls(
            id=data.get("id", ""),
            email=data.get("email") or "",
            full_name=data.get("full_name") or "",
            phone=data.get("phone"),
            address=data.get("address"),
            username=data.get("username"),
            account_number=data.get("account_number"),
            referral_code=data.get("referral_code"),
            referral_earnings=to_decimal(data.get("referral_earnings")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "full_name": self.full_name,
            "phone": self.phone,
            "address": self.address,
            "username": self.username,
            "account_number": self.account_number,
            "referral_code": self.referral_code,
            "referral_earnings": decimal_to_json(self.referral_earnings),
        }


@dataclass
class RecipientCandidate:
    email: str
    full_name: str
    account_number: str | None = None
    balance: Decimal | None = None

    @property
    def label(self) -> str:
        if self.account_number:
            return f"{self.full_name} <{self.email}> ({self.account_number})"
        return f"{self.full_name} <{self.email}>"

    @classmethod
    def from_lookup_row(cls, row: dict[str, Any]) -> "RecipientCandidate":
        balance = row.get("balance")
        return cls(
            email=row.get("user_email") or "",
            full_name=row.get("user_name") or "",
            account_number=row.get("account_number"),
            balance=to_decimal(balance) if balance is not None else None,
        )


@dataclass
class Card:
    id: str
    user_id: str
    card_number: str
    card_type: str
    is_frozen: bool = False
    spending_limit: Decimal = Decimal("0")
    created_at: datetime | None = None

    @property
    def masked_number(self) -> str:
        digits = "".join(ch for ch in self.card_number if ch.isdigit())
        return f"**** **** **** {digits[-4:]}" if digits else "****"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Card":
        return cls(
            id=str(data.get("id", "")),
            user_id=data.get("user_id", ""),
            card_number=data.get("card_number") or "",
            card_type=data.get("card_type") or "virtual",
            is_frozen=bool(data.get("is_frozen", False)),
            spending_limit=to_decimal(data.get("spending_limit")),
            created_at=parse_timestamp(data.get("created_at")),
        )


@dataclass
class Investment:
    id: str
    user_id: str
    type: str
    amount: Decimal
    profit_rate: Decimal = Decimal("0")
    profit: Decimal = Decimal("0")
    status: str = "active"
    start_date: datetime | None = None
    end_date: datetime | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Investment":
        return cls(
            id=str(data.get("id", "")),
            user_id=data.get("user_id", ""),
            type=data.get("type") or "monthly",
            amount=to_decimal(data.get("amount")),
            profit_rate=to_decimal(data.get("profit_rate")),
            profit=to_decimal(data.get("profit")),
            status=data.get("status") or "active",
            start_date=parse_timestamp(data.get("start_date")),
            end_date=parse_timestamp(data.get("end_date")),
        )


@dataclass
class SavingsGoal:
    id: str
    user_id: str
    name: str
    target_amount: Decimal
    current_amount: Decimal = Decimal("0")
    deadline: datetime | None = None
    category: str = "other"
    icon: str = "target"
    color: str = "#3B82F6"
    status: str = "active"

    @property
    def progress(self) -> float:
        if self.target_amount <= 0:
            return 0.0
        return min(float(self.current_amount / self.target_amount), 1.0)

    @property
    def remaining(self) -> Decimal:
        return max(self.target_amount - self.current_amount, Decimal("0"))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SavingsGoal":
        return cls(
            id=str(data.get("id", "")),
            user_id=data.get("user_id", ""),
            name=data.get("name") or "",
            target_amount=to_decimal(data.get("target_amount")),
            current_amount=to_decimal(data.get("current_amount")),
            deadline=parse_timestamp(data.get("deadline")),
            category=data.get("category") or "other",
            icon=data.get("icon") or "target",
            color=data.get("color") or "#3B82F6",
            status=data.get("status") or "active",
        )


@dataclass
class Notification:
    id: str
    user_id: str
    type: str
    title: str
    message: str
    is_read: bool = False
    created_at: datetime | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Notification":
        return cls(
            id=str(data.get("id", "")),
            user_id=data.get("user_id", ""),
            type=data.get("type") or "info",
            title=data.get("title") or "",
            message=data.get("message") or "",
            is_read=bool(data.get("is_read", False)),
            created_at=parse_timestamp(data.get("created_at")),
        )


@dataclass
class Referral:
    id: str
    referrer_id: str
    referred_id: str
    status: str = "pending"
    reward_amount: Decimal = Decimal("0")
    referred_name: str | None = None
    referred_email: str | None = None
    created_at: datetime | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Referral":
        referred_user = data.get("referred_user") or {}
        return cls(
            id=str(data.get("id", "")),
            referrer_id=data.get("referrer_id", ""),
            referred_id=data.get("referred_id", ""),
            status=data.get("status") or "pending",
            reward_amount=to_decimal(data.get("reward_amount")),
            referred_name=referred_user.get("full_name"),
            referred_email=referred_user.get("email"),
            created_at=parse_timestamp(data.get("created_at")),
        )


@dataclass
class ReferralStats:
    total_referrals: int = 0
    completed_referrals: int = 0
    total_earnings: Decimal = Decimal("0")
    this_month_referrals: int = 0
    pending_rewards: int = 0


@dataclass
class TransferHistoryEntry:
    """Row from the instant-transfer history procedure or legacy table."""

    id: str
    amount: Decimal
    description: str = ""
    status: str = "completed"
    reference: str | None = None
    counterparty_name: str | None = None
    counterparty_email: str | None = None
    direction: str = "sent"
    created_at: datetime | None = None
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TransferHistoryEntry":
        recipient = data.get("recipient") if isinstance(data.get("recipient"), dict) else {}
        return cls(
            id=str(data.get("id") or data.get("transfer_id") or ""),
            amount=to_decimal(data.get("amount")),
            description=data.get("description") or "",
            status=data.get("status") or "completed",
            reference=data.get("reference_number") or data.get("reference"),
            counterparty_name=data.get("other_party_name")
            or data.get("recipient_name")
            or recipient.get("full_name"),
            counterparty_email=data.get("other_party_email")
            or data.get("recipient_email")
            or recipient.get("email"),
            direction=data.get("direction") or data.get("transfer_type") or "sent",
            created_at=parse_timestamp(data.get("created_at")),
            raw=dict(data),
        )
