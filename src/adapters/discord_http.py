"""Discord REST adapter for outbound actions.

Implements ChatClientPort over the public HTTP API. Component clicks go
through the interactions endpoint because there is no gateway call for them.
"""

from __future__ import annotations

import logging
import random
from typing import Any, Optional
from urllib.parse import quote

import httpx

from core.ports import ChatActionError

LOGGER = logging.getLogger(__name__)

API_BASE = "https://discord.com/api/v10"
INTERACTION_TYPE_COMPONENT = 3
COMPONENT_TYPE_BUTTON = 2


def build_interaction_payload(
    message_id: int,
    channel_id: int,
    guild_id: Optional[int],
    application_id: int,
    custom_id: str,
    nonce: Optional[str] = None,
) -> dict[str, Any]:
    """Body for a button click; snowflakes are sent as strings."""

    payload: dict[str, Any] = {
        "type": INTERACTION_TYPE_COMPONENT,
        "nonce": nonce or str(random.getrandbits(63)),
        "channel_id": str(channel_id),
        "message_id": str(message_id),
        "application_id": str(application_id),
        "data": {
            "component_type": COMPONENT_TYPE_BUTTON,
            "custom_id": custom_id,
        },
    }
    if guild_id is not None:
        payload["guild_id"] = str(guild_id)
    return payload


def authorization_header(token: str, bot_account: bool) -> str:
    return f"Bot {token}" if bot_account else token


class DiscordHttpClient:
    """ChatClientPort adapter backed by a shared httpx.AsyncClient."""

    def __init__(
        self,
        token: str,
        bot_account: bool = True,
        timeout: float = 15.0,
        http: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._http = http or httpx.AsyncClient(
            base_url=API_BASE,
            timeout=timeout,
            headers={
                "Authorization": authorization_header(token, bot_account),
                "Content-Type": "application/json",
            },
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, path: str, action: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._http.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise ChatActionError(f"{action} failed: {exc}") from exc
        if response.is_error:
            raise ChatActionError(f"{action} failed: {response.status_code} - {response.text}")
        return response

    async def send_text(self, channel_id: int, text: str) -> None:
        await self._request(
            "POST",
            f"/channels/{channel_id}/messages",
            "Send message",
            json={"content": text},
        )
        LOGGER.debug("Sent message to channel %s: %s", channel_id, text)

    async def add_reaction(self, channel_id: int, message_id: int, glyph: str) -> None:
        emoji = quote(glyph, safe="")
        await self._request(
            "PUT",
            f"/channels/{channel_id}/messages/{message_id}/reactions/{emoji}/@me",
            "Add reaction",
        )
        LOGGER.debug("Added reaction %s to message %s", glyph, message_id)

    async def click_button(
        self,
        message_id: int,
        channel_id: int,
        guild_id: Optional[int],
        application_id: int,
        action_id: str,
    ) -> None:
        payload = build_interaction_payload(message_id, channel_id, guild_id, application_id, action_id)
        await self._request("POST", "/interactions", "Click button", json=payload)
        LOGGER.debug("Clicked button %s on message %s", action_id, message_id)
