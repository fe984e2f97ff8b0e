"""Rocket.Chat host binding (REST API + outgoing webhooks)."""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from mentionhook.channels.base import ChatHost, InboundMessage, RoomHandle
from mentionhook.config import RocketChatConfig

logger = structlog.get_logger()


class RocketChatHost(ChatHost):
    def __init__(
        self,
        config: RocketChatConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._transport = transport

    @property
    def name(self) -> str:
        return "rocketchat"

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.config.url.strip().rstrip("/"),
            headers={
                "X-User-Id": self.config.user_id.strip(),
                "X-Auth-Token": self.config.auth_token.strip(),
            },
            timeout=httpx.Timeout(self.config.timeout_s),
            verify=self.config.tls_verify,
            transport=self._transport,
        )

    async def get_bot_identity(self) -> str | None:
        if not self.config.configured:
            logger.warning("channels.rocketchat.not_configured")
            return None
        try:
            async with self._client() as client:
                resp = await client.get("/api/v1/me")
                resp.raise_for_status()
                payload = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("channels.rocketchat.identity_failed", error=str(e))
            return None

        user_id = payload.get("_id") if isinstance(payload, dict) else None
        if isinstance(user_id, str) and user_id.strip():
            return user_id.strip()
        return None

    async def send_message(self, room: RoomHandle, text: str) -> None:
        async with self._client() as client:
            resp = await client.post(
                "/api/v1/chat.postMessage",
                json={"roomId": room.id, "text": text},
            )
            if resp.status_code >= 400:
                logger.warning(
                    "channels.rocketchat.send_failed",
                    status_code=resp.status_code,
                    body=resp.text[:300],
                )
            resp.raise_for_status()

    async def fetch_room(self, room_id: str) -> RoomHandle | None:
        if not room_id or not self.config.configured:
            return None
        try:
            async with self._client() as client:
                resp = await client.get("/api/v1/rooms.info", params={"roomId": room_id})
                resp.raise_for_status()
                payload = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("channels.rocketchat.room_lookup_failed", room_id=room_id, error=str(e))
            return None

        room = payload.get("room") if isinstance(payload, dict) else None
        if not isinstance(room, dict):
            return None
        return RoomHandle(
            id=room_id,
            name=_first_text(room, "fname", "name"),
            topic=_first_text(room, "description", "topic"),
        )


def _first_text(data: dict[str, Any], *keys: str) -> str | None:
    for key in keys:
        value = data.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def message_from_outgoing_webhook(
    payload: dict[str, Any],
    room: RoomHandle | None = None,
) -> InboundMessage:
    """Build an :class:`InboundMessage` from a Rocket.Chat outgoing webhook body.

    ``room`` (from :meth:`RocketChatHost.fetch_room`) supplies the display
    name and topic the webhook payload does not carry.
    """
    room_id = _first_text(payload, "channel_id")
    room_name = (room.name if room else None) or _first_text(payload, "channel_name")
    return InboundMessage(
        text=payload.get("text") if isinstance(payload.get("text"), str) else None,
        id=_first_text(payload, "message_id"),
        sender_id=_first_text(payload, "user_id"),
        sender_username=_first_text(payload, "user_name"),
        room_id=room_id,
        room_name=room_name,
        room_topic=room.topic if room else None,
    )
