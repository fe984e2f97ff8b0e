from __future__ import annotations

import json

import httpx
import pytest

from mentionhook.channels.base import RoomHandle
from mentionhook.channels.rocketchat import RocketChatHost, message_from_outgoing_webhook
from mentionhook.config import RocketChatConfig

CONFIG = RocketChatConfig(url="https://chat.example.com/", user_id="bot-id", auth_token="pat")


def _host(handler) -> tuple[RocketChatHost, list[httpx.Request]]:
    seen: list[httpx.Request] = []

    def _record(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    return RocketChatHost(CONFIG, transport=httpx.MockTransport(_record)), seen


@pytest.mark.asyncio
async def test_get_bot_identity() -> None:
    host, seen = _host(lambda request: httpx.Response(200, json={"_id": "bot-id", "username": "ai_bot"}))

    assert await host.get_bot_identity() == "bot-id"
    assert seen[0].url == "https://chat.example.com/api/v1/me"
    assert seen[0].headers["X-User-Id"] == "bot-id"
    assert seen[0].headers["X-Auth-Token"] == "pat"


@pytest.mark.asyncio
async def test_get_bot_identity_failure_returns_none() -> None:
    host, _ = _host(lambda request: httpx.Response(401, json={"status": "error"}))
    assert await host.get_bot_identity() is None


@pytest.mark.asyncio
async def test_get_bot_identity_requires_credentials() -> None:
    host = RocketChatHost(RocketChatConfig(url="https://chat.example.com"))
    assert await host.get_bot_identity() is None


@pytest.mark.asyncio
async def test_send_message_posts_to_room() -> None:
    host, seen = _host(lambda request: httpx.Response(200, json={"success": True}))

    await host.send_message(RoomHandle(id="r1", name="dev"), "hello")

    assert seen[0].method == "POST"
    assert seen[0].url.path == "/api/v1/chat.postMessage"
    assert json.loads(seen[0].content) == {"roomId": "r1", "text": "hello"}


@pytest.mark.asyncio
async def test_send_message_raises_on_rejection() -> None:
    host, _ = _host(lambda request: httpx.Response(400, json={"success": False}))

    with pytest.raises(httpx.HTTPStatusError):
        await host.send_message(RoomHandle(id="r1"), "hello")


@pytest.mark.asyncio
async def test_fetch_room_reads_display_name_and_description() -> None:
    payload = {
        "room": {"_id": "r1", "name": "dev", "fname": "Dev Team", "description": "backend", "topic": "ignored"},
        "success": True,
    }
    host, seen = _host(lambda request: httpx.Response(200, json=payload))

    room = await host.fetch_room("r1")

    assert room == RoomHandle(id="r1", name="Dev Team", topic="backend")
    assert seen[0].url.params["roomId"] == "r1"


@pytest.mark.asyncio
async def test_fetch_room_failure_returns_none() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("down", request=request)

    host, _ = _host(handler)
    assert await host.fetch_room("r1") is None


def test_message_from_outgoing_webhook() -> None:
    payload = {
        "token": "abc",
        "channel_id": "r1",
        "channel_name": "dev",
        "message_id": "m1",
        "user_id": "u1",
        "user_name": "alice",
        "text": "@ai_qwen help",
    }

    message = message_from_outgoing_webhook(payload, room=RoomHandle(id="r1", name="Dev Team", topic="backend"))

    assert message.text == "@ai_qwen help"
    assert message.id == "m1"
    assert message.sender_id == "u1"
    assert message.sender_username == "alice"
    assert message.room_id == "r1"
    assert message.room_name == "Dev Team"
    assert message.room_topic == "backend"


def test_message_from_sparse_webhook() -> None:
    message = message_from_outgoing_webhook({"text": "@ai_qwen hi", "channel_name": "dev"})

    assert message.room_name == "dev"
    assert message.room_id is None
    assert message.room_topic is None
    assert message.sender_id is None
