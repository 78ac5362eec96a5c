"""Live dashboard shown while the automation is running."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from rich.text import Text
from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal, Vertical, VerticalScroll
from textual.widgets import DataTable, Footer, Static

from adapters.activity_formatting import format_activity_event, format_channel_activity, format_reward
from core.config import AutomationConfig
from core.lookup import LookupCoordinator
from core.models import PreferenceEntry
from core.preferences import PreferenceStore, PreferenceStoreError
from core.scheduler import cooldown_remaining
from core.stats import ConnectionStatus, EventType, Stats
from core.timefmt import format_clock, format_duration, format_until
from core.tracker import Tracker
from core.verifier import WishlistVerifier

from .constants import DISCORD_BLURPLE
from .modals import AddCharacterScreen, ConfirmDeleteScreen, LookupScreen

REFRESH_SECONDS = 1.0
FEED_LINES = 30

_STATUS_COLOURS = {
    ConnectionStatus.CONNECTED: "#57f287",
    ConnectionStatus.CONNECTING: "#fee75c",
    ConnectionStatus.RECONNECTING: "#fee75c",
    ConnectionStatus.DISCONNECTED: "#ed4245",
}


class DashboardApp(App):
    """Read-mostly view over the live runtime state.

    Mutations go through the same async owners the engine uses, so the
    dashboard never writes shared state directly.
    """

    BINDINGS = [
        ("p", "toggle_pause", "Pause/Resume"),
        ("s", "lookup", "Lookup"),
        ("a", "add_character", "Add"),
        ("d", "delete_character", "Delete"),
        ("v", "verify_wishlist", "Verify"),
        ("q", "quit", "Quit"),
    ]

    CSS_PATH = "app.tcss"

    def __init__(
        self,
        stats: Stats,
        tracker: Tracker,
        preferences: PreferenceStore,
        coordinator: LookupCoordinator,
        verifier: Optional[WishlistVerifier],
        automation: AutomationConfig,
        channels: list[int],
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self._stats = stats
        self._tracker = tracker
        self._preferences = preferences
        self._coordinator = coordinator
        self._verifier = verifier
        self._automation = automation
        self._channels = channels
        self._wishlist_rows: list[tuple] = []

    def compose(self) -> ComposeResult:
        with Container(id="header"):
            with Horizontal(id="header-row"):
                with Vertical(id="header-left"):
                    yield Static(self._title_text(), id="title")
                    yield Static("rollwatch v0.1.0", classes="subtle")
                with Vertical(id="header-right"):
                    yield Static("", id="dash-connection")
                    yield Static("", id="dash-user", classes="subtle")
                    yield Static("", id="dash-paused")
        with Horizontal(id="dash-body"):
            with Vertical(id="dash-left"):
                yield Static("Status", classes="section-title")
                yield Static("", id="dash-stats")
                yield Static("Wishlist", classes="section-title")
                yield DataTable(id="wishlist-table", cursor_type="row")
            with Vertical(id="dash-middle"):
                yield Static("Activity", classes="section-title")
                with VerticalScroll(id="activity-scroll"):
                    yield Static("", id="dash-activity")
            with Vertical(id="dash-right"):
                yield Static("Channel", classes="section-title")
                with VerticalScroll(id="channel-scroll"):
                    yield Static("", id="dash-channel")
        yield Footer()

    def on_mount(self) -> None:
        table = self.query_one("#wishlist-table", DataTable)
        table.add_column("", key="verified", width=2)
        table.add_column("name", key="name", width=22)
        table.add_column("series", key="series", width=22)
        table.add_column("P", key="priority", width=3)
        table.zebra_stripes = True
        self._refresh()
        self.set_interval(REFRESH_SECONDS, self._refresh)

    def _title_text(self) -> Text:
        return Text.assemble(("ROLL", f"bold {DISCORD_BLURPLE}"), ("/", "bold #c3c8de"), ("WATCH", "bold #ffffff"))

    def _refresh(self) -> None:
        self._refresh_header()
        self._refresh_stats()
        self._refresh_feeds()
        self._refresh_wishlist()

    def _refresh_header(self) -> None:
        status = self._stats.connection_status
        colour = _STATUS_COLOURS.get(status, "#c3c8de")
        self.query_one("#dash-connection", Static).update(Text(f"● {status.value}", style=colour))
        username = self._stats.username or "not logged in"
        self.query_one("#dash-user", Static).update(f"user: {username}")
        paused = self.query_one("#dash-paused", Static)
        if self._tracker.paused:
            paused.update(Text("PAUSED", style="bold #fee75c"))
        else:
            paused.update(Text("running", style="#57f287"))

    def _refresh_stats(self) -> None:
        now = datetime.now(timezone.utc)
        snapshot = self._tracker.snapshot()
        stats = self._stats
        lines = [
            f"uptime           {format_clock(stats.uptime())}",
            f"total uptime     {format_clock(timedelta(seconds=stats.total_uptime_seconds()))}",
            f"rolled           {stats.characters_rolled}",
            f"claimed          {stats.characters_claimed}",
            f"wishlist hits    {stats.wishlist_matches}",
            f"kakera           {stats.kakera_collected}",
            f"rolls executed   {stats.rolls_executed}",
            f"rolls left       {snapshot.remaining}",
            f"reset            {format_until(snapshot.reset_at, now)}",
            f"claim            {'available' if snapshot.claim_available else 'on cooldown'}",
        ]
        for command in self._automation.roll_commands:
            remaining = cooldown_remaining(self._tracker, command)
            label = "ready" if not remaining else format_duration(remaining)
            lines.append(f"{command:<16} {label}")
        if snapshot.last_daily is not None:
            lines.append(f"daily            {snapshot.last_daily.astimezone().strftime('%Y-%m-%d %H:%M')}")
        self.query_one("#dash-stats", Static).update("\n".join(lines))

    def _refresh_feeds(self) -> None:
        activity = Text("\n").join(
            format_activity_event(event) for event in self._stats.activity_log()[-FEED_LINES:]
        )
        self.query_one("#dash-activity", Static).update(activity)
        channel = Text("\n").join(
            format_channel_activity(item) for item in self._stats.channel_activity()[-FEED_LINES:]
        )
        self.query_one("#dash-channel", Static).update(channel)

    def _refresh_wishlist(self) -> None:
        entries = self._preferences.list_all()
        rows = [(entry.name, entry.series, entry.verified, entry.priority) for entry in entries]
        table = self.query_one("#wishlist-table", DataTable)
        if rows == self._wishlist_rows:
            return
        table.clear()
        for entry in entries:
            table.add_row(
                "✓" if entry.verified else "?",
                entry.name,
                entry.series or "",
                str(entry.priority),
                key=entry.name,
            )
        self._wishlist_rows = rows

    def _selected_entry(self) -> Optional[PreferenceEntry]:
        table = self.query_one("#wishlist-table", DataTable)
        if table.row_count == 0:
            return None
        row_index = table.cursor_row
        if row_index is None or row_index < 0:
            return None
        entries = self._preferences.list_all()
        if row_index >= len(entries):
            return None
        return entries[row_index]

    async def action_toggle_pause(self) -> None:
        paused = await self._tracker.toggle_paused()
        state = "paused" if paused else "resumed"
        self._stats.log_event(EventType.INFO, f"Automation {state}")
        self._refresh_header()

    def action_lookup(self) -> None:
        if not self._channels:
            self.notify("No channel configured for lookups.", severity="warning")
            return
        self.push_screen(LookupScreen(), self._handle_lookup_query)

    def _handle_lookup_query(self, query: str | None) -> None:
        if query:
            self.run_worker(self._lookup(query), exclusive=False)

    async def _lookup(self, query: str) -> None:
        self.notify(f"Looking up {query}...")
        summary = await self._coordinator.request(query, self._channels[0])
        if summary is None:
            self.notify(f"No result for {query}", severity="warning")
            return
        self.notify(f"{summary.name} ({summary.series}){format_reward(summary.reward_value)}")

    def action_add_character(self) -> None:
        self.push_screen(AddCharacterScreen(can_verify=self._verifier is not None), self._handle_add)

    def _handle_add(self, payload: dict[str, Any] | None) -> None:
        if payload:
            self.run_worker(self._add(payload), exclusive=False)

    async def _add(self, payload: dict[str, Any]) -> None:
        name = payload["name"]
        series = payload.get("series")
        try:
            if self._verifier is None:
                added = await self._preferences.add(PreferenceEntry(name=name, series=series))
            elif payload.get("verify"):
                self.notify(f"Verifying {name}...")
                added = await self._verifier.add_and_verify(name, series)
            else:
                added = await self._verifier.add_unverified(name, series)
        except PreferenceStoreError as exc:
            self._report_store_error(exc)
            return
        if added:
            self._stats.log_event(EventType.WISHLIST, f"Added to wishlist: {name}")
            self.notify(f"Added {name}")
        else:
            self.notify(f"{name} was not added", severity="warning")
        self._refresh_wishlist()

    def action_delete_character(self) -> None:
        entry = self._selected_entry()
        if entry is None:
            self.notify("Select a wishlist entry first.", severity="warning")
            return

        def _confirm(confirmed: bool | None) -> None:
            if confirmed:
                self.run_worker(self._remove(entry.name), exclusive=False)

        self.push_screen(ConfirmDeleteScreen("Remove from wishlist?", entry.name), _confirm)

    async def _remove(self, name: str) -> None:
        try:
            removed = await self._preferences.remove(name)
        except PreferenceStoreError as exc:
            self._report_store_error(exc)
            return
        if removed:
            self._stats.log_event(EventType.WISHLIST, f"Removed from wishlist: {name}")
        self._refresh_wishlist()

    def action_verify_wishlist(self) -> None:
        if self._verifier is None:
            self.notify("No channel configured for lookups.", severity="warning")
            return
        if not self._preferences.unverified():
            self.notify("Nothing to verify.")
            return
        self.run_worker(self._verify(), exclusive=True, group="verify")

    async def _verify(self) -> None:
        report = await self._verifier.verify_unverified()
        message = f"Verified {report.verified}/{report.total} ({report.success_rate:.0f}%)"
        self._stats.log_event(EventType.WISHLIST, message)
        self.notify(message)
        if report.save_errors:
            self._report_store_error(f"{report.save_errors} verification(s) not saved")
        self._refresh_wishlist()

    def _report_store_error(self, error: object) -> None:
        """Surface a failed wishlist write; the in-memory wishlist is kept."""

        message = f"Wishlist not saved: {error}"
        self._stats.log_event(EventType.ERROR, message)
        self.notify(message, severity="error")
        self._refresh_wishlist()

