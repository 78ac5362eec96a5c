from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from adapters.discord_http import (
    API_BASE,
    DiscordHttpClient,
    authorization_header,
    build_interaction_payload,
)
from core.ports import ChatActionError


def _client(handler) -> DiscordHttpClient:
    http = httpx.AsyncClient(base_url=API_BASE, transport=httpx.MockTransport(handler))
    return DiscordHttpClient("token", http=http)


def test_interaction_payload_uses_string_snowflakes() -> None:
    payload = build_interaction_payload(1, 2, 3, 4, "claim-1", nonce="n")

    assert payload == {
        "type": 3,
        "nonce": "n",
        "guild_id": "3",
        "channel_id": "2",
        "message_id": "1",
        "application_id": "4",
        "data": {"component_type": 2, "custom_id": "claim-1"},
    }


def test_interaction_payload_without_guild() -> None:
    payload = build_interaction_payload(1, 2, None, 4, "claim-1")

    assert "guild_id" not in payload
    assert payload["nonce"].isdigit()


def test_authorization_header() -> None:
    assert authorization_header("abc", bot_account=True) == "Bot abc"
    assert authorization_header("abc", bot_account=False) == "abc"


def test_client_defaults_to_bot_authorization() -> None:
    client = DiscordHttpClient("abc")
    assert client._http.headers["Authorization"] == "Bot abc"
    asyncio.run(client.aclose())


def test_requests_hit_expected_endpoints() -> None:
    seen: list[tuple[str, str, bytes]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.method, request.url.path, request.content))
        return httpx.Response(200, json={})

    client = _client(handler)

    async def run() -> None:
        await client.send_text(20, "$wa")
        await client.add_reaction(20, 10, "💖")
        await client.click_button(10, 20, 30, 40, "claim-1")
        await client.aclose()

    asyncio.run(run())

    assert seen[0][:2] == ("POST", "/api/v10/channels/20/messages")
    assert json.loads(seen[0][2]) == {"content": "$wa"}
    assert seen[1][0] == "PUT"
    assert seen[1][1] == "/api/v10/channels/20/messages/10/reactions/💖/@me"
    assert seen[2][:2] == ("POST", "/api/v10/interactions")
    body = json.loads(seen[2][2])
    assert body["data"]["custom_id"] == "claim-1"
    assert body["guild_id"] == "30"


def test_error_status_raises_chat_action_error() -> None:
    client = _client(lambda request: httpx.Response(403, text="Missing Access"))

    with pytest.raises(ChatActionError, match="403"):
        asyncio.run(client.send_text(20, "$wa"))


def test_transport_error_raises_chat_action_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("offline", request=request)

    client = _client(handler)

    with pytest.raises(ChatActionError, match="offline"):
        asyncio.run(client.add_reaction(20, 10, "💎"))
