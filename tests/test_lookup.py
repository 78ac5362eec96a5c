from __future__ import annotations

import asyncio

from core.lookup import LookupCoordinator, LookupSummary, summary_from_event
from core.models import Author, BudgetStatus, Embed, LookupResult, Message, Unrecognized
from core.ports import ChatActionError


class FakeClient:
    def __init__(self, fail: bool = False) -> None:
        self.sent: list[tuple[int, str]] = []
        self.fail = fail

    async def send_text(self, channel_id: int, text: str) -> None:
        if self.fail:
            raise ChatActionError("403 Forbidden")
        self.sent.append((channel_id, text))


async def _wait_for_sends(client: FakeClient, count: int) -> None:
    while len(client.sent) < count:
        await asyncio.sleep(0)


def _result(name: str) -> LookupResult:
    return LookupResult(name=name, series="Re:Zero", reward_value=100)


def test_reply_resolves_pending_request() -> None:
    client = FakeClient()
    coordinator = LookupCoordinator(client, timeout=1.0)

    async def run():
        task = asyncio.create_task(coordinator.request("Rem", 5))
        await _wait_for_sends(client, 1)
        assert coordinator.is_pending()
        assert coordinator.is_pending(5)
        assert not coordinator.is_pending(6)
        assert not coordinator.offer(_result("Rem"), 6)
        assert coordinator.offer(_result("Rem"), 5)
        return await task

    summary = asyncio.run(run())
    assert summary == LookupSummary(name="Rem", series="Re:Zero", found=True, reward_value=100)
    assert client.sent == [(5, "$im Rem")]
    assert not coordinator.is_pending()


def test_timeout_returns_none_and_clears_slot() -> None:
    client = FakeClient()
    coordinator = LookupCoordinator(client, timeout=0.01)

    assert asyncio.run(coordinator.request("Nobody", 5)) is None
    assert not coordinator.is_pending()


def test_send_failure_returns_none() -> None:
    coordinator = LookupCoordinator(FakeClient(fail=True), timeout=1.0)

    assert asyncio.run(coordinator.request("Rem", 5)) is None
    assert not coordinator.is_pending()


def test_offer_without_pending_request_is_discarded() -> None:
    coordinator = LookupCoordinator(FakeClient())
    assert not coordinator.offer(_result("Rem"), 5)


def test_offer_ignores_events_without_an_answer() -> None:
    client = FakeClient()
    coordinator = LookupCoordinator(client, timeout=0.05)

    async def run():
        task = asyncio.create_task(coordinator.request("Rem", 5))
        await _wait_for_sends(client, 1)
        assert not coordinator.offer(BudgetStatus(remaining_count=3), 5)
        return await task

    assert asyncio.run(run()) is None


def test_second_request_waits_for_the_first() -> None:
    client = FakeClient()
    coordinator = LookupCoordinator(client, timeout=1.0)

    async def run():
        first = asyncio.create_task(coordinator.request("Rem", 5))
        second = asyncio.create_task(coordinator.request("Ram", 5))
        await _wait_for_sends(client, 1)
        for _ in range(5):
            await asyncio.sleep(0)
        assert client.sent == [(5, "$im Rem")]
        coordinator.offer(_result("Rem"), 5)
        await _wait_for_sends(client, 2)
        coordinator.offer(_result("Ram"), 5)
        return await first, await second

    first, second = asyncio.run(run())
    assert first.name == "Rem"
    assert second.name == "Ram"


def test_summary_from_unrecognized_embed() -> None:
    embed = Embed(author_name="Rem", description="Re:Zero\nmore", footer_text="77 <:kakera:1>")
    message = Message(id=1, channel_id=5, author=Author(id=1, name="Mudae", bot=True), embeds=(embed,))

    summary = summary_from_event(Unrecognized(message=message))
    assert summary == LookupSummary(name="Rem", series="Re:Zero", found=True, reward_value=77)
    assert summary_from_event(Unrecognized(message=Message(id=2, channel_id=5, author=message.author))) is None
