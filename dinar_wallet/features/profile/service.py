"""Profile, notifications and referral business logic for Dinar Wallet."""

from __future__ import annotations

import logging
from typing import Any, Protocol

from dinar_wallet.models import (
    Notification,
    Referral,
    ReferralStats,
    RemoteResult,
    UserProfile,
)

logger = logging.getLogger(__name__)


class WalletProtocol(Protocol):
    """Protocol defining wallet interface needed for the profile screen."""

    profile: UserProfile | None
    notifications: list[Notification]
    referrals: list[Referral]

    def update_profile(self, updates: dict[str, Any]) -> RemoteResult[UserProfile]: ...
    def mark_as_read(self, notification_id: str) -> RemoteResult[Notification]: ...
    def get_referral_stats(self) -> RemoteResult[ReferralStats]: ...


def username_from_email(email: str) -> str:
    return email.split("@", 1)[0] if email else ""


class ProfileService:
    """Service for handling profile-related business logic."""

    def __init__(self, wallet: WalletProtocol):
        self.wallet = wallet

    @property
    def profile(self) -> UserProfile | None:
        return self.wallet.profile

    def update_profile(
        self, full_name: str, phone: str = "", address: str = ""
    ) -> RemoteResult[UserProfile]:
        profile = self.wallet.profile
        if profile is None:
            return RemoteResult.failure("Profile is not loaded")

        name = (full_name or "").strip()
        if not name:
            return RemoteResult.failure("Full name is required")

        return self.wallet.update_profile(
            {
                "full_name": name,
                "phone": (phone or "").strip() or None,
                "address": (address or "").strip() or None,
                "username": username_from_email(profile.email),
            }
        )

    def get_notifications(self) -> list[Notification]:
        return list(self.wallet.notifications)

    @property
    def unread_count(self) -> int:
        return sum(1 for n in self.wallet.notifications if not n.is_read)

    def mark_as_read(self, notification_id: str) -> RemoteResult[Notification]:
        return self.wallet.mark_as_read(notification_id)

    def mark_all_as_read(self) -> int:
        """Mark every unread notification as read; returns how many succeeded."""
        marked = 0
        for notification in self.get_notifications():
            if notification.is_read:
                continue
            result = self.wallet.mark_as_read(notification.id)
            if result.error:
                logger.warning(f"Could not mark notification {notification.id}: {result.error.message}")
                continue
            marked += 1
        return marked

    def get_referrals(self) -> list[Referral]:
        return list(self.wallet.referrals)

    def get_referral_stats(self) -> RemoteResult[ReferralStats]:
        return self.wallet.get_referral_stats()
