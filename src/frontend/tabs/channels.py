"""Channels tab implementation."""

from __future__ import annotations

from typing import Any, Iterable, Optional

from textual import on
from textual.containers import Container, Horizontal, Vertical
from textual.widgets import Button, DataTable, Input, Static, Switch

from ..modals import AddChannelScreen, ConfirmDeleteScreen
from ..validators import parse_channel_id


class ChannelsTab(Container):
    """Channels tab for editing config.channels."""

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._loading_form = False
        self._current_row_key: Optional[str] = None
        self._table_ready = False

    def compose(self):
        with Vertical(id="channels-panel"):
            with Horizontal(id="channels-body"):
                with Container(id="channels-left"):
                    yield DataTable(id="channels-table", cursor_type="row")
                with Container(id="channels-right"):
                    yield Static("Channel details", id="channels-title")
                    yield Static("channel_id", classes="form-label")
                    yield Input(placeholder="123456789012345678", id="channel-id-input")
                    yield Static("", id="channel-id-error")
                    yield Static("alias", classes="form-label")
                    yield Input(placeholder="Alias", id="alias-input")
                    yield Static("enabled", classes="form-label")
                    yield Switch(value=False, id="enabled-toggle")
                    yield Static("order", classes="form-label")
                    yield Static("", id="channel-order")
            with Horizontal(id="channels-actions"):
                yield Button("Add", id="add-channel", variant="success")
                yield Button("Delete", id="delete-channel", variant="error")

    def on_mount(self) -> None:
        table = self.query_one("#channels-table", DataTable)
        table.add_column("#", key="order", width=4)
        table.add_column("enabled", key="enabled", width=8)
        table.add_column("channel_id", key="channel_id", width=22)
        table.add_column("alias", key="alias", width=24)
        table.zebra_stripes = True
        self._table_ready = True
        self.reload_from_config()
        self._set_form_state(None)

    def reload_from_config(self) -> None:
        if not self._table_ready:
            return
        table = self.query_one("#channels-table", DataTable)
        table.clear()
        for index, channel in self._iter_channels():
            enabled_label = "yes" if channel.get("enabled", True) else "no"
            table.add_row(
                str(index + 1),
                enabled_label,
                str(channel.get("channel_id", "")),
                channel.get("alias", ""),
                key=str(index),
            )
        self._update_action_state()

    def _iter_channels(self) -> Iterable[tuple[int, dict[str, Any]]]:
        yield from enumerate(self._get_channels())

    def _get_channels(self) -> list[dict[str, Any]]:
        data = self.app.config_state.data or {}
        channels = data.get("channels")
        if isinstance(channels, list):
            return channels
        return []

    def _set_channels(self, channels: list[dict[str, Any]]) -> None:
        self.app.update_config_section("channels", channels)

    def _update_action_state(self) -> None:
        delete_btn = self.query_one("#delete-channel", Button)
        delete_btn.disabled = self._current_row_key is None

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        self._current_row_key = self._coerce_row_key(event.row_key)
        self._set_form_state(self._current_row_key)
        self._update_action_state()

    @on(Input.Changed, "#alias-input")
    def _on_alias_changed(self, event: Input.Changed) -> None:
        if self._loading_form:
            return
        channel = self._current_channel()
        if channel is None:
            return
        index, channels = channel
        alias = event.value.strip()
        if alias:
            channels[index]["alias"] = alias
        else:
            channels[index].pop("alias", None)
        self._set_channels(channels)
        self._update_table_cell(index, "alias", alias)

    @on(Input.Changed, "#channel-id-input")
    def _on_channel_id_changed(self) -> None:
        if self._loading_form:
            return
        self._set_channel_id_error("")

    @on(Input.Submitted, "#channel-id-input")
    def _on_channel_id_submitted(self, event: Input.Submitted) -> None:
        if self._loading_form:
            return
        channel = self._current_channel()
        if channel is None:
            return
        index, channels = channel
        info = parse_channel_id(event.value)
        if info.error or info.normalized is None:
            self._set_channel_id_error(info.error or "invalid channel_id")
            return
        channels[index]["channel_id"] = info.normalized
        self._set_channels(channels)
        self._update_table_cell(index, "channel_id", str(info.normalized))
        self._loading_form = True
        event.input.value = str(info.normalized)
        self._loading_form = False

    @on(Switch.Changed, "#enabled-toggle")
    def _on_enabled_changed(self, event: Switch.Changed) -> None:
        if self._loading_form:
            return
        channel = self._current_channel()
        if channel is None:
            return
        index, channels = channel
        channels[index]["enabled"] = bool(event.value)
        self._set_channels(channels)
        self._update_table_cell(index, "enabled", "yes" if event.value else "no")

    @on(Button.Pressed, "#add-channel")
    def _on_add_channel(self) -> None:
        self.app.push_screen(AddChannelScreen(), self._handle_add_channel)

    @on(Button.Pressed, "#delete-channel")
    def _on_delete_channel(self) -> None:
        channel = self._current_channel()
        if channel is None:
            return
        index, channels = channel
        label = str(channels[index].get("alias") or channels[index].get("channel_id", ""))
        self.app.push_screen(ConfirmDeleteScreen("Delete channel?", label), self._handle_delete_channel)

    def _handle_add_channel(self, payload: dict[str, Any] | None) -> None:
        if not payload:
            return
        channels = self._get_channels()
        if any(item.get("channel_id") == payload["channel_id"] for item in channels):
            self.app.notify("Channel already configured", severity="warning")
            return
        channels.append(payload)
        self._set_channels(channels)
        self.reload_from_config()

    def _handle_delete_channel(self, confirmed: bool | None) -> None:
        if not confirmed:
            return
        channel = self._current_channel()
        if channel is None:
            return
        index, channels = channel
        channels.pop(index)
        self._set_channels(channels)
        self._current_row_key = None
        self.reload_from_config()
        self._set_form_state(None)

    def _update_table_cell(self, index: int, column_key: str, value: Any) -> None:
        table = self.query_one("#channels-table", DataTable)
        row_key = str(index)
        try:
            table.get_row(row_key)
        except Exception:
            self.reload_from_config()
            return
        table.update_cell(row_key, column_key, value)

    def _set_form_state(self, row_key: Optional[str]) -> None:
        self._loading_form = True
        alias_input = self.query_one("#alias-input", Input)
        enabled_toggle = self.query_one("#enabled-toggle", Switch)
        id_input = self.query_one("#channel-id-input", Input)
        order_display = self.query_one("#channel-order", Static)
        self._set_channel_id_error("")
        channels = self._get_channels()
        index = int(row_key) if row_key is not None else None
        if index is None or index >= len(channels):
            alias_input.value = ""
            alias_input.disabled = True
            enabled_toggle.value = False
            enabled_toggle.disabled = True
            id_input.value = ""
            id_input.disabled = True
            order_display.update("")
        else:
            channel = channels[index]
            alias_input.value = channel.get("alias", "")
            alias_input.disabled = False
            enabled_toggle.value = bool(channel.get("enabled", True))
            enabled_toggle.disabled = False
            id_input.value = str(channel.get("channel_id", ""))
            id_input.disabled = False
            order_display.update(str(index + 1))
        self._loading_form = False

    def _current_channel(self) -> Optional[tuple[int, list[dict[str, Any]]]]:
        if self._current_row_key is None:
            return None
        try:
            index = int(self._current_row_key)
        except ValueError:
            return None
        channels = self._get_channels()
        if index >= len(channels):
            return None
        return index, channels

    @staticmethod
    def _coerce_row_key(value: Any) -> str:
        if hasattr(value, "value"):
            return str(value.value)
        return str(value)

    def _set_channel_id_error(self, message: str) -> None:
        self.query_one("#channel-id-error", Static).update(message)
