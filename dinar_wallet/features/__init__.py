"""Feature modules for Dinar Wallet.

This package contains self-contained feature modules organized by functionality:

- transfer: Instant peer-to-peer transfers and recipient lookup
- cards: Card listing, freezing and spending limits
- savings: Savings goals, wallet top-ups and investments
- profile: Profile details, notifications and referrals
"""

from dinar_wallet.features import transfer
from dinar_wallet.features import cards
from dinar_wallet.features import savings
from dinar_wallet.features import profile

__all__ = ["transfer", "cards", "savings", "profile"]
