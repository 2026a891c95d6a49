"""Profile feature module for Dinar Wallet."""

from dinar_wallet.features.profile.handlers import ProfileHandlersMixin
from dinar_wallet.features.profile.service import ProfileService, username_from_email
from dinar_wallet.features.profile.screen import EditProfileScreen

__all__ = [
    "ProfileHandlersMixin",
    "ProfileService",
    "EditProfileScreen",
    "username_from_email",
]
