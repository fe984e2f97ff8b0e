"""Core chat host abstractions."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class InboundMessage:
    """Snapshot of one chat message as delivered by the host.

    Every field is optional; hosts fill in what they know.
    """

    text: str | None = None
    id: str | None = None
    sender_id: str | None = None
    sender_username: str | None = None
    room_id: str | None = None
    room_name: str | None = None
    room_topic: str | None = None


@dataclass(frozen=True)
class RoomHandle:
    """Destination for outbound chat messages."""

    id: str
    name: str | None = None
    topic: str | None = None


class ChatHost(ABC):
    """Narrow interface the dispatcher uses to talk to the chat platform."""

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    async def get_bot_identity(self) -> str | None:
        """Return the user id the bot posts as, or None if unknown."""
        ...

    @abstractmethod
    async def send_message(self, room: RoomHandle, text: str) -> None:
        """Post ``text`` into ``room``. Raises on failure."""
        ...

    async def fetch_room(self, room_id: str) -> RoomHandle | None:
        """Look up room display name and topic. Hosts without lookup return None."""
        return None
