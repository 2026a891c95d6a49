"""Profile event handlers for Dinar Wallet TUI."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any, cast

from textual.widgets import DataTable, Static

from dinar_wallet.features.profile.screen import EditProfileScreen
from dinar_wallet.features.profile.service import ProfileService
from dinar_wallet.features.transfer.screen import format_dzd
from dinar_wallet.models import ReferralStats, RemoteResult

if TYPE_CHECKING:
    from dinar_wallet.__main__ import WalletApp

logger = logging.getLogger(__name__)


class ProfileHandlersMixin:
    """Mixin class providing profile-related event handlers for WalletApp."""

    profile_service: ProfileService | None = None

    def update_profile_tab(self: "WalletApp") -> None:
        service = self.profile_service
        if service is None:
            return
        try:
            details = cast(Static, self.query_one("#profile-details"))
            table = cast(DataTable, self.query_one("#notifications-table"))
        except Exception:
            return

        profile = service.profile
        if profile is None:
            details.update("[dim]Profile not loaded[/dim]")
        else:
            details.update(
                f"[bold]{profile.display_name}[/bold]\n"
                f"Email: {profile.email}\n"
                f"Phone: {profile.phone or '-'}\n"
                f"Address: {profile.address or '-'}\n"
                f"Account: {profile.account_number or '-'}\n"
                f"Referral code: {profile.referral_code or '-'}"
            )

        table.clear(columns=True)
        table.add_column("", key="read")
        table.add_column("Title", key="title")
        table.add_column("Message", key="message")
        table.add_column("Date", key="date")
        notifications = service.get_notifications()
        if not notifications:
            table.add_row("", "[dim]No notifications[/dim]", "", "")
        for notification in notifications:
            table.add_row(
                "" if notification.is_read else "[yellow]●[/yellow]",
                notification.title,
                notification.message,
                notification.created_at.strftime("%Y-%m-%d %H:%M")
                if notification.created_at
                else "",
                key=notification.id,
            )

    def show_edit_profile_dialog(self: "WalletApp") -> None:
        service = self.profile_service
        if service is None or service.profile is None:
            self.notify("Profile is not loaded yet", severity="warning")
            return

        def on_submit(values: Any) -> None:
            if not values:
                return

            def worker() -> None:
                result = service.update_profile(**values)
                self.dispatch_to_ui(self._on_profile_saved, result)

            threading.Thread(target=worker, daemon=True).start()

        self.push_screen(EditProfileScreen(service.profile), on_submit)

    def _on_profile_saved(self: "WalletApp", result: RemoteResult) -> None:
        if result.error:
            self.notify(result.error.message, severity="error")
            return
        self.update_profile_tab()
        self.notify("Profile updated", severity="information")

    def mark_selected_notification_read(self: "WalletApp") -> None:
        service = self.profile_service
        if service is None:
            return
        table = cast(DataTable, self.query_one("#notifications-table"))
        if table.row_count == 0:
            return
        try:
            row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
        except Exception:
            return
        if row_key is None or row_key.value is None:
            return
        notification_id = row_key.value

        def worker() -> None:
            result = service.mark_as_read(notification_id)
            self.dispatch_to_ui(self._on_notification_marked, result)

        threading.Thread(target=worker, daemon=True).start()

    def mark_all_notifications_read(self: "WalletApp") -> None:
        service = self.profile_service
        if service is None:
            return

        def worker() -> None:
            marked = service.mark_all_as_read()
            self.dispatch_to_ui(self.notify, f"{marked} notification(s) marked as read")
            self.dispatch_to_ui(self.update_profile_tab)

        threading.Thread(target=worker, daemon=True).start()

    def _on_notification_marked(self: "WalletApp", result: RemoteResult) -> None:
        if result.error:
            self.notify(result.error.message, severity="error")
            return
        self.update_profile_tab()

    def refresh_referral_stats_async(self: "WalletApp") -> None:
        service = self.profile_service
        if service is None:
            return

        def worker() -> None:
            result = service.get_referral_stats()
            self.dispatch_to_ui(self._on_referral_stats_loaded, result)

        threading.Thread(target=worker, daemon=True).start()

    def _on_referral_stats_loaded(self: "WalletApp", result: RemoteResult[ReferralStats]) -> None:
        try:
            widget = cast(Static, self.query_one("#referral-stats"))
        except Exception:
            return
        if result.error:
            widget.update(f"[red]{result.error.message}[/red]")
            return
        stats = result.data
        widget.update(
            f"Referrals: {stats.total_referrals} "
            f"(completed {stats.completed_referrals}, pending {stats.pending_rewards}, "
            f"this month {stats.this_month_referrals})\n"
            f"Earnings: {format_dzd(stats.total_earnings)}"
        )
