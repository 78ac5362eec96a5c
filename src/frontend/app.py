"""Textual config panel for rollwatch (`rollwatch config`)."""

from __future__ import annotations

from typing import Any

from rich.text import Text
from textual import on
from textual.app import App, ComposeResult
from textual.containers import Center, Container, Horizontal, Vertical
from textual.css.query import NoMatches
from textual.widgets import Button, ContentSwitcher, Footer, Static, Tab, Tabs

from .constants import CONFIG_PATH, DB_PATH, DISCORD_BLURPLE
from .modals import unsaved_on_exit, unsaved_on_reload
from .state import ConfigState, ConfigStatus
from .tabs.channels import ChannelsTab
from .tabs.data import DataTab
from .tabs.guide import GuideTab
from .tabs.settings import SettingsTab

TABS = (
    ("channels", "Channels"),
    ("settings", "Settings"),
    ("data", "Data"),
    ("guide", "Guide"),
)

_STATUS_CLASSES = {
    ConfigStatus.LOADED: "status-loaded",
    ConfigStatus.MODIFIED: "status-modified",
    ConfigStatus.ERROR: "status-error",
}


class ConfigPanelApp(App):
    """Edits config.json; tabs read and write the shared ConfigState."""

    BINDINGS = [
        ("ctrl+s", "save_config", "Save"),
        ("ctrl+r", "reload_config", "Reload"),
        ("q", "request_quit", "Quit"),
        ("ctrl+c", "request_quit", "Quit"),
    ]

    CSS_PATH = "app.tcss"

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.config_state = ConfigState(CONFIG_PATH)

    def compose(self) -> ComposeResult:
        with Container(id="header"):
            with Horizontal(id="header-row"):
                with Vertical(id="header-left"):
                    yield Static(
                        Text.assemble(("ROLL", DISCORD_BLURPLE), ("WATCH > Config Panel", "bold")),
                        id="title",
                    )
                    yield Static("rollwatch v0.1.0", classes="subtle")
                with Vertical(id="header-right"):
                    yield Static(f"config: {CONFIG_PATH.name}", classes="subtle")
                    yield Static(f"db: {DB_PATH.name}", classes="subtle")
                    yield Static("", id="header-status")
                    yield Horizontal(
                        Button("Save", id="save-btn"),
                        Button("Reload", id="reload-btn"),
                        id="header-actions",
                    )

        with Container(id="tabs-bar"):
            with Center(id="tabs-center"):
                yield Tabs(*(Tab(label, id=tab_id) for tab_id, label in TABS), id="tabs")

        with ContentSwitcher(id="content", initial="channels"):
            yield ChannelsTab(id="channels")
            yield SettingsTab(id="settings")
            yield DataTab(id="data")
            yield GuideTab(id="guide")
        yield Footer()

    def on_mount(self) -> None:
        self._reload()

    def on_tabs_tab_activated(self, event: Tabs.TabActivated) -> None:
        if event.tab.id:
            self.query_one("#content", ContentSwitcher).current = event.tab.id

    @on(Button.Pressed, "#save-btn")
    def _on_save_pressed(self) -> None:
        self.action_save_config()

    @on(Button.Pressed, "#reload-btn")
    def _on_reload_pressed(self) -> None:
        self.action_reload_config()

    def action_save_config(self) -> None:
        self.config_state.save()
        self._refresh_header()

    def action_reload_config(self) -> None:
        if not self.config_state.dirty:
            self._reload()
            return

        def _choose(choice: str | None) -> None:
            if choice == "reload" or (choice == "save" and self.config_state.save()):
                self._reload()
            else:
                self._refresh_header()

        self.push_screen(unsaved_on_reload(), _choose)

    def action_request_quit(self) -> None:
        if not self.config_state.dirty:
            self.exit()
            return

        def _choose(choice: str | None) -> None:
            if choice == "discard" or (choice == "save" and self.config_state.save()):
                self.exit()
            else:
                self._refresh_header()

        self.push_screen(unsaved_on_exit(), _choose)

    def update_config_section(self, section: str, value: Any) -> None:
        """Replace one top-level config key in memory and mark it unsaved."""

        self.config_state.set_section(section, value)
        self._refresh_header()

    def _reload(self) -> None:
        self.config_state.load()
        self._refresh_header()
        for tab_type in (ChannelsTab, SettingsTab):
            try:
                self.query_one(tab_type).reload_from_config()
            except NoMatches:
                continue

    def _refresh_header(self) -> None:
        state = self.config_state
        status = self.query_one("#header-status", Static)
        status.remove_class(*_STATUS_CLASSES.values())
        status.add_class(_STATUS_CLASSES[state.status])
        label = f"config: {state.status.value}"
        if state.error:
            label = f"{label} ({state.error})"
        status.update(label)
        self.query_one("#save-btn", Button).disabled = not state.can_save
