"""Settings tab implementation."""

from __future__ import annotations

from typing import Any, Optional

from textual import on
from textual.containers import Container, Horizontal, ScrollableContainer, Vertical
from textual.widgets import ContentSwitcher, DataTable, Input, Select, Static, Switch, TextArea

from ..validators import parse_daily_time, parse_roll_commands, parse_threshold


class SettingsTab(Container):
    """Settings tab for editing automation, wishlist, discord, and logging."""

    LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]

    SECTION_LABELS = [
        ("automation", "Automation", "Rolls, kakera, daily commands"),
        ("wishlist", "Wishlist", "File and fuzzy matching"),
        ("discord", "Discord", "Account type and lookups"),
        ("logging", "Logging", "Console/file logging + redaction"),
    ]

    # Switch id -> (section, key, default)
    SWITCHES = {
        "automation-auto-roll": ("automation", "auto_roll", True),
        "automation-auto-kakera": ("automation", "auto_react_kakera", True),
        "automation-auto-daily": ("automation", "auto_daily", True),
        "wishlist-enabled": ("wishlist", "enabled", True),
        "wishlist-fuzzy": ("wishlist", "fuzzy_match", True),
        "wishlist-priority-verified": ("wishlist", "priority_verified", True),
        "discord-bot-account": ("discord", "bot_account", True),
        "logging-enabled": ("logging", "enabled", False),
        "logging-console": ("logging", "console", True),
    }

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._loading_form = False
        self._current_section: Optional[str] = None
        self._table_ready = False

    def compose(self):
        with Vertical(id="settings-panel"):
            with Horizontal(id="settings-body"):
                with Container(id="settings-left"):
                    yield DataTable(id="settings-table", cursor_type="row")
                with Container(id="settings-right"):
                    with ContentSwitcher(id="settings-forms"):
                        with ScrollableContainer(id="settings-automation"):
                            yield Static("Automation", classes="settings-title")
                            yield Static("roll_commands (space separated)", classes="form-label")
                            yield Input(placeholder="$wa $ha", id="automation-commands")
                            yield Static("roll_cooldown_seconds", classes="form-label")
                            yield Input(placeholder="3600", id="automation-cooldown")
                            yield Static("initial_budget", classes="form-label")
                            yield Input(placeholder="10", id="automation-budget")
                            yield Static("auto_roll", classes="form-label")
                            yield Switch(id="automation-auto-roll")
                            yield Static("auto_react_kakera", classes="form-label")
                            yield Switch(id="automation-auto-kakera")
                            yield Static("auto_daily", classes="form-label")
                            yield Switch(id="automation-auto-daily")
                            yield Static("daily_time (HH:MM, local)", classes="form-label")
                            yield Input(placeholder="00:00", id="automation-daily-time")
                            yield Static("", id="automation-error", classes="settings-error")

                        with Container(id="settings-wishlist"):
                            yield Static("Wishlist", classes="settings-title")
                            yield Static("enabled", classes="form-label")
                            yield Switch(id="wishlist-enabled")
                            yield Static("path", classes="form-label")
                            yield Input(placeholder="wishlist.json", id="wishlist-path")
                            yield Static("fuzzy_match", classes="form-label")
                            yield Switch(id="wishlist-fuzzy")
                            yield Static("fuzzy_threshold (0-1)", classes="form-label")
                            yield Input(placeholder="0.8", id="wishlist-threshold")
                            yield Static("priority_verified", classes="form-label")
                            yield Switch(id="wishlist-priority-verified")
                            yield Static("", id="wishlist-error", classes="settings-error")

                        with Container(id="settings-discord"):
                            yield Static("Discord", classes="settings-title")
                            yield Static("bot_account", classes="form-label")
                            yield Switch(id="discord-bot-account")
                            yield Static("lookup_timeout_seconds", classes="form-label")
                            yield Input(placeholder="10", id="discord-lookup-timeout")
                            yield Static("stats_save_interval_seconds", classes="form-label")
                            yield Input(placeholder="60", id="discord-stats-interval")
                            yield Static("", id="discord-error", classes="settings-error")

                        with ScrollableContainer(id="settings-logging"):
                            yield Static("Logging", classes="settings-title")
                            yield Static("enabled", classes="form-label")
                            yield Switch(id="logging-enabled")
                            yield Static("level", classes="form-label")
                            yield Select(
                                [(level, level) for level in self.LOG_LEVELS],
                                id="logging-level",
                                allow_blank=False,
                            )
                            yield Static("console (headless runs only)", classes="form-label")
                            yield Switch(id="logging-console")
                            yield Static("file.enabled", classes="form-label")
                            yield Switch(id="logging-file-enabled")
                            yield Static("file.path", classes="form-label")
                            yield Input(placeholder="logs/rollwatch.log", id="logging-file-path")
                            yield Static("file.max_bytes", classes="form-label")
                            yield Input(placeholder="5242880", id="logging-file-max-bytes")
                            yield Static("file.backup_count", classes="form-label")
                            yield Input(placeholder="5", id="logging-file-backup")
                            yield Static("redact.enabled", classes="form-label")
                            yield Switch(id="logging-redact-enabled")
                            yield Static("redact.patterns (env var names, one per line)", classes="form-label")
                            yield TextArea(id="logging-redact-patterns")
                            yield Static("", id="logging-error", classes="settings-error")

    def on_mount(self) -> None:
        table = self.query_one("#settings-table", DataTable)
        table.add_column("section", key="section", width=18)
        table.add_column("description", key="description", width=34)
        for key, label, description in self.SECTION_LABELS:
            table.add_row(label, description, key=key)
        table.zebra_stripes = True
        self._table_ready = True
        self._select_section("automation")
        self.reload_from_config()

    def reload_from_config(self) -> None:
        self._loading_form = True
        for switch_id, (section, key, default) in self.SWITCHES.items():
            value = self._get_section(section).get(key, default)
            self.query_one(f"#{switch_id}", Switch).value = bool(value)
        self._load_automation()
        self._load_wishlist()
        self._load_discord()
        self._load_logging()
        self._loading_form = False

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        section_id = self._coerce_row_key(event.row_key)
        self._select_section(section_id)

    def _select_section(self, section_id: str) -> None:
        self._current_section = section_id
        switcher = self.query_one("#settings-forms", ContentSwitcher)
        switcher.current = f"settings-{section_id}"

    def _get_section(self, key: str) -> dict[str, Any]:
        data = self.app.config_state.data or {}
        section = data.get(key)
        if isinstance(section, dict):
            return section
        return {}

    def _update_section(self, key: str, section: dict[str, Any]) -> None:
        self.app.update_config_section(key, section)

    def _load_automation(self) -> None:
        automation = self._get_section("automation")
        commands = automation.get("roll_commands", ["$wa", "$ha"])
        if isinstance(commands, str):
            commands = [commands]
        self.query_one("#automation-commands", Input).value = " ".join(commands)
        self.query_one("#automation-cooldown", Input).value = str(automation.get("roll_cooldown_seconds", 3600))
        self.query_one("#automation-budget", Input).value = str(automation.get("initial_budget", 10))
        self.query_one("#automation-daily-time", Input).value = str(automation.get("daily_time", "00:00"))
        self._apply_daily_state(bool(automation.get("auto_daily", True)))
        self._set_error("automation-error", "")

    def _load_wishlist(self) -> None:
        wishlist = self._get_section("wishlist")
        self.query_one("#wishlist-path", Input).value = str(wishlist.get("path", "wishlist.json"))
        self.query_one("#wishlist-threshold", Input).value = str(wishlist.get("fuzzy_threshold", 0.8))
        self.query_one("#wishlist-threshold", Input).disabled = not bool(wishlist.get("fuzzy_match", True))
        self._set_error("wishlist-error", "")

    def _load_discord(self) -> None:
        discord = self._get_section("discord")
        self.query_one("#discord-lookup-timeout", Input).value = str(discord.get("lookup_timeout_seconds", 10))
        data = self.app.config_state.data or {}
        self.query_one("#discord-stats-interval", Input).value = str(data.get("stats_save_interval_seconds", 60))
        self._set_error("discord-error", "")

    def _load_logging(self) -> None:
        logging = self._get_section("logging")
        file_cfg = self._get_subdict(logging, "file")
        redact_cfg = self._get_subdict(logging, "redact")
        file_enabled = bool(file_cfg.get("enabled", False))
        redact_enabled = bool(redact_cfg.get("enabled", False))

        self._set_select_value("#logging-level", logging.get("level", "INFO"), self.LOG_LEVELS, "logging-error")
        self.query_one("#logging-file-enabled", Switch).value = file_enabled
        self.query_one("#logging-file-path", Input).value = str(file_cfg.get("path", "logs/rollwatch.log"))
        self.query_one("#logging-file-max-bytes", Input).value = str(file_cfg.get("max_bytes", 5 * 1024 * 1024))
        self.query_one("#logging-file-backup", Input).value = str(file_cfg.get("backup_count", 5))
        self.query_one("#logging-redact-enabled", Switch).value = redact_enabled
        self.query_one("#logging-redact-patterns", TextArea).text = "\n".join(redact_cfg.get("patterns", []) or [])
        self._apply_logging_state(file_enabled, redact_enabled)
        self._set_error("logging-error", "")

    def _set_select_value(self, selector: str, value: str, allowed: list[str], error_id: str) -> None:
        select = self.query_one(selector, Select)
        if value in allowed:
            select.value = value
            self._set_error(error_id, "")
        else:
            select.value = allowed[0] if allowed else Select.BLANK
            self._set_error(error_id, f"Invalid value: {value}")

    def _set_error(self, error_id: str, message: str) -> None:
        self.query_one(f"#{error_id}", Static).update(message)

    def _apply_daily_state(self, auto_daily: bool) -> None:
        self.query_one("#automation-daily-time", Input).disabled = not auto_daily

    def _apply_logging_state(self, file_enabled: bool, redact_enabled: bool) -> None:
        self.query_one("#logging-file-path", Input).disabled = not file_enabled
        self.query_one("#logging-file-max-bytes", Input).disabled = not file_enabled
        self.query_one("#logging-file-backup", Input).disabled = not file_enabled
        self.query_one("#logging-redact-patterns", TextArea).disabled = not redact_enabled

    # Handlers --------------------------------------------------------------

    @on(Switch.Changed)
    def _on_switch_changed(self, event: Switch.Changed) -> None:
        if self._loading_form:
            return
        switch_id = event.switch.id or ""
        if switch_id in self.SWITCHES:
            section_name, key, _ = self.SWITCHES[switch_id]
            section = self._get_section(section_name)
            section[key] = bool(event.value)
            self._update_section(section_name, section)
        if switch_id == "automation-auto-daily":
            self._apply_daily_state(bool(event.value))
        elif switch_id == "wishlist-fuzzy":
            self.query_one("#wishlist-threshold", Input).disabled = not event.value
        elif switch_id in {"logging-file-enabled", "logging-redact-enabled"}:
            self._on_logging_toggle(switch_id, bool(event.value))

    def _on_logging_toggle(self, switch_id: str, value: bool) -> None:
        logging = self._get_section("logging")
        subkey = "file" if switch_id == "logging-file-enabled" else "redact"
        nested = self._get_subdict(logging, subkey)
        nested["enabled"] = value
        logging[subkey] = nested
        self._update_section("logging", logging)
        file_enabled = bool(self._get_subdict(logging, "file").get("enabled", False))
        redact_enabled = bool(self._get_subdict(logging, "redact").get("enabled", False))
        self._apply_logging_state(file_enabled, redact_enabled)

    @on(Input.Changed, "#automation-commands")
    def _on_commands_changed(self, event: Input.Changed) -> None:
        if self._loading_form:
            return
        commands, error = parse_roll_commands(event.value)
        self._set_error("automation-error", error or "")
        if error:
            return
        automation = self._get_section("automation")
        automation["roll_commands"] = commands
        self._update_section("automation", automation)

    @on(Input.Changed, "#automation-cooldown")
    def _on_cooldown_changed(self, event: Input.Changed) -> None:
        if self._loading_form:
            return
        self._update_int_field("automation", "roll_cooldown_seconds", event.value, "automation-error")

    @on(Input.Changed, "#automation-budget")
    def _on_budget_changed(self, event: Input.Changed) -> None:
        if self._loading_form:
            return
        self._update_int_field("automation", "initial_budget", event.value, "automation-error")

    @on(Input.Changed, "#automation-daily-time")
    def _on_daily_time_changed(self, event: Input.Changed) -> None:
        if self._loading_form:
            return
        error = parse_daily_time(event.value)
        self._set_error("automation-error", error or "")
        if error:
            return
        automation = self._get_section("automation")
        automation["daily_time"] = event.value.strip()
        self._update_section("automation", automation)

    @on(Input.Changed, "#wishlist-path")
    def _on_wishlist_path(self, event: Input.Changed) -> None:
        if self._loading_form:
            return
        path = event.value.strip()
        if not path:
            self._set_error("wishlist-error", "path is required")
            return
        self._set_error("wishlist-error", "")
        wishlist = self._get_section("wishlist")
        wishlist["path"] = path
        self._update_section("wishlist", wishlist)

    @on(Input.Changed, "#wishlist-threshold")
    def _on_wishlist_threshold(self, event: Input.Changed) -> None:
        if self._loading_form:
            return
        value, error = parse_threshold(event.value)
        self._set_error("wishlist-error", error or "")
        if value is None:
            return
        wishlist = self._get_section("wishlist")
        wishlist["fuzzy_threshold"] = value
        self._update_section("wishlist", wishlist)

    @on(Input.Changed, "#discord-lookup-timeout")
    def _on_lookup_timeout(self, event: Input.Changed) -> None:
        if self._loading_form:
            return
        self._update_int_field("discord", "lookup_timeout_seconds", event.value, "discord-error")

    @on(Input.Changed, "#discord-stats-interval")
    def _on_stats_interval(self, event: Input.Changed) -> None:
        if self._loading_form:
            return
        parsed = self._parse_int(event.value, "discord-error")
        if parsed is None:
            return
        self.app.update_config_section("stats_save_interval_seconds", max(parsed, 1))

    @on(Select.Changed, "#logging-level")
    def _on_logging_level(self, event: Select.Changed) -> None:
        if self._loading_form or event.value is Select.BLANK:
            return
        logging = self._get_section("logging")
        logging["level"] = event.value
        self._update_section("logging", logging)

    @on(Input.Changed, "#logging-file-path")
    def _on_logging_file_path(self, event: Input.Changed) -> None:
        if self._loading_form:
            return
        logging = self._get_section("logging")
        file_cfg = self._get_subdict(logging, "file")
        file_cfg["path"] = event.value
        logging["file"] = file_cfg
        self._update_section("logging", logging)

    @on(Input.Changed, "#logging-file-max-bytes")
    def _on_logging_file_max(self, event: Input.Changed) -> None:
        if self._loading_form:
            return
        self._update_nested_int_field("logging", ("file", "max_bytes"), event.value, "logging-error")

    @on(Input.Changed, "#logging-file-backup")
    def _on_logging_file_backup(self, event: Input.Changed) -> None:
        if self._loading_form:
            return
        self._update_nested_int_field("logging", ("file", "backup_count"), event.value, "logging-error")

    @on(TextArea.Changed, "#logging-redact-patterns")
    def _on_logging_redact_patterns(self, event: TextArea.Changed) -> None:
        if self._loading_form:
            return
        logging = self._get_section("logging")
        redact_cfg = self._get_subdict(logging, "redact")
        redact_cfg["patterns"] = [line.strip() for line in event.text_area.text.splitlines() if line.strip()]
        logging["redact"] = redact_cfg
        self._update_section("logging", logging)

    # Parsing helpers -------------------------------------------------------

    def _update_int_field(self, section: str, key: str, value: str, error_id: str) -> None:
        parsed = self._parse_int(value, error_id)
        if parsed is None:
            return
        config = self._get_section(section)
        config[key] = parsed
        self._update_section(section, config)

    def _update_nested_int_field(
        self,
        section: str,
        path: tuple[str, str],
        value: str,
        error_id: str,
    ) -> None:
        parsed = self._parse_int(value, error_id)
        if parsed is None:
            return
        config = self._get_section(section)
        nested = self._get_subdict(config, path[0])
        nested[path[1]] = parsed
        config[path[0]] = nested
        self._update_section(section, config)

    def _parse_int(self, value: str, error_id: str) -> Optional[int]:
        stripped = value.strip()
        if not stripped:
            self._set_error(error_id, "")
            return None
        if not stripped.isdigit():
            self._set_error(error_id, "Enter a non-negative integer")
            return None
        self._set_error(error_id, "")
        return int(stripped)

    @staticmethod
    def _coerce_row_key(value: Any) -> str:
        if hasattr(value, "value"):
            return str(value.value)
        return str(value)

    @staticmethod
    def _get_subdict(parent: dict[str, Any], key: str) -> dict[str, Any]:
        value = parent.get(key)
        if isinstance(value, dict):
            return value
        return {}
