"""Modal dialogs for the Textual config panel and dashboard."""

from __future__ import annotations

from typing import Any

from textual.app import ComposeResult
from textual.containers import Container, Horizontal
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Static, Switch

from .validators import parse_channel_id


class PendingChangesScreen(ModalScreen[str]):
    """Ask what to do with unsaved edits before an action that drops them.

    Dismisses with "save", the given ``action`` value, or "cancel".
    """

    def __init__(self, title: str, body: str, action: str, action_label: str) -> None:
        super().__init__()
        self._title = title
        self._body = body
        self._action = action
        self._action_label = action_label

    def compose(self) -> ComposeResult:
        yield Container(
            Static(self._title, classes="modal-title"),
            Static(self._body, classes="modal-body"),
            Horizontal(
                Button("Save", name="save", variant="success"),
                Button(self._action_label, name=self._action, variant="error"),
                Button("Cancel", name="cancel"),
                classes="modal-actions",
            ),
            classes="modal-dialog modal-dialog--confirm",
        )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.name or "cancel")


def unsaved_on_exit() -> PendingChangesScreen:
    return PendingChangesScreen("Unsaved changes", "Save changes before exit?", "discard", "Discard")


def unsaved_on_reload() -> PendingChangesScreen:
    return PendingChangesScreen("Reload config?", "Unsaved changes will be lost.", "reload", "Reload")


class AddChannelScreen(ModalScreen[dict[str, Any] | None]):
    """Modal form for adding a new roll channel."""

    def compose(self) -> ComposeResult:
        yield Container(
            Static("Add channel", classes="modal-title"),
            Static("", id="add-error", classes="modal-error"),
            Static("channel_id", classes="form-label"),
            Input(placeholder="123456789012345678 or channel link", id="add-channel-id"),
            Static("alias (optional)", classes="form-label"),
            Input(placeholder="Alias", id="add-alias"),
            Static("enabled", classes="form-label"),
            Switch(value=True, id="add-enabled"),
            Horizontal(
                Button("Add", id="add-confirm", variant="success"),
                Button("Cancel", id="add-cancel"),
                classes="modal-actions",
            ),
            classes="modal-dialog modal-dialog--form",
        )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "add-cancel":
            self.dismiss(None)
            return
        if event.button.id != "add-confirm":
            return
        raw_id = self.query_one("#add-channel-id", Input).value
        alias = self.query_one("#add-alias", Input).value.strip()
        enabled = self.query_one("#add-enabled", Switch).value
        info = parse_channel_id(raw_id)
        error = self.query_one("#add-error", Static)
        if info.error or info.normalized is None:
            error.update(info.error or "invalid channel_id")
            return
        payload: dict[str, Any] = {"channel_id": info.normalized, "enabled": bool(enabled)}
        if alias:
            payload["alias"] = alias
        self.dismiss(payload)


class ConfirmDeleteScreen(ModalScreen[bool]):
    """Confirm deletion of a channel or wishlist entry."""

    def __init__(self, title: str, subject: str) -> None:
        super().__init__()
        self._title = title
        self._subject = subject or "(unnamed)"

    def compose(self) -> ComposeResult:
        yield Container(
            Static(self._title, classes="modal-title"),
            Static(self._subject, classes="modal-body"),
            Horizontal(
                Button("Delete", id="delete-confirm", variant="error"),
                Button("Cancel", id="delete-cancel"),
                classes="modal-actions",
            ),
            classes="modal-dialog modal-dialog--confirm",
        )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "delete-confirm":
            self.dismiss(True)
        else:
            self.dismiss(False)


class AddCharacterScreen(ModalScreen[dict[str, Any] | None]):
    """Modal form for adding a wishlist character from the dashboard."""

    def __init__(self, can_verify: bool) -> None:
        super().__init__()
        self._can_verify = can_verify

    def compose(self) -> ComposeResult:
        yield Container(
            Static("Add character", classes="modal-title"),
            Static("", id="character-error", classes="modal-error"),
            Static("name", classes="form-label"),
            Input(placeholder="Character name", id="character-name"),
            Static("series (optional)", classes="form-label"),
            Input(placeholder="Series", id="character-series"),
            Static("verify with the game bot", classes="form-label"),
            Switch(value=self._can_verify, id="character-verify", disabled=not self._can_verify),
            Horizontal(
                Button("Add", id="character-confirm", variant="success"),
                Button("Cancel", id="character-cancel"),
                classes="modal-actions",
            ),
            classes="modal-dialog modal-dialog--form",
        )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "character-cancel":
            self.dismiss(None)
            return
        if event.button.id != "character-confirm":
            return
        name = self.query_one("#character-name", Input).value.strip()
        series = self.query_one("#character-series", Input).value.strip()
        if not name:
            self.query_one("#character-error", Static).update("name is required")
            return
        self.dismiss(
            {
                "name": name,
                "series": series or None,
                "verify": bool(self.query_one("#character-verify", Switch).value),
            }
        )


class LookupScreen(ModalScreen[str | None]):
    """Ask for a character name to look up with the game bot."""

    def compose(self) -> ComposeResult:
        yield Container(
            Static("Character lookup", classes="modal-title"),
            Static("", id="lookup-error", classes="modal-error"),
            Input(placeholder="Character name", id="lookup-query"),
            Horizontal(
                Button("Search", id="lookup-confirm", variant="success"),
                Button("Cancel", id="lookup-cancel"),
                classes="modal-actions",
            ),
            classes="modal-dialog modal-dialog--form",
        )

    def _submit(self) -> None:
        query = self.query_one("#lookup-query", Input).value.strip()
        if not query:
            self.query_one("#lookup-error", Static).update("name is required")
            return
        self.dismiss(query)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self._submit()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "lookup-confirm":
            self._submit()
        else:
            self.dismiss(None)
