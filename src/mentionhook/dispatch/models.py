"""Dispatch data model."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from mentionhook.channels.base import InboundMessage, RoomHandle

UNKNOWN = "unknown"
NO_TOPIC = "no topic set"


class ActionKind(str, Enum):
    """External or internal response to a bot mention."""

    CREATE_ISSUE = "create_issue"
    TRIGGER_PIPELINE = "trigger_pipeline"
    ECHO_REPLY = "echo_reply"


class DispatchState(str, Enum):
    NO_ACTION = "no_action"
    COMPLETED = "completed"


@dataclass(frozen=True)
class BotMention:
    """An ``@identifier`` token addressing one of the known bots."""

    raw_match: str
    bot_id: str


@dataclass(frozen=True)
class MessageContext:
    """Fully-defaulted view of an inbound message.

    Builders only read this view, so a missing room, sender, or message id
    degrades to a placeholder instead of raising.
    """

    text: str
    message_id: str
    sender_username: str
    channel_name: str
    channel_topic: str
    room: RoomHandle | None = None
    has_topic: bool = False

    @classmethod
    def from_message(cls, message: InboundMessage) -> MessageContext:
        topic = (message.room_topic or "").strip()
        room: RoomHandle | None = None
        if message.room_id:
            room = RoomHandle(
                id=message.room_id,
                name=message.room_name,
                topic=message.room_topic,
            )
        return cls(
            text=message.text or "",
            message_id=message.id or "",
            sender_username=(message.sender_username or "").strip() or UNKNOWN,
            channel_name=(message.room_name or "").strip() or UNKNOWN,
            channel_topic=topic or NO_TOPIC,
            room=room,
            has_topic=bool(topic),
        )


_REQUIRED_FIELDS: dict[ActionKind, tuple[str, ...]] = {
    ActionKind.CREATE_ISSUE: ("endpoint_base", "credential", "project_id"),
    ActionKind.TRIGGER_PIPELINE: ("endpoint_base", "credential", "project_id", "ref"),
    ActionKind.ECHO_REPLY: (),
}


@dataclass(frozen=True)
class ActionConfig:
    """Settings for one action kind, resolved fresh for every dispatch."""

    kind: ActionKind
    enabled: bool = False
    endpoint_base: str = ""
    credential: str = field(default="", repr=False)
    project_id: str = ""
    ref: str = ""
    tls_verify: bool = False
    notify: bool = False
    assign_mentioned_bot: bool = False

    def missing_fields(self) -> list[str]:
        """Required fields that are empty for this action kind."""
        return [name for name in _REQUIRED_FIELDS[self.kind] if not str(getattr(self, name)).strip()]


@dataclass(frozen=True)
class OutboundRequest:
    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: dict[str, Any] | None = None
    params: dict[str, str] | None = None

    @property
    def content(self) -> bytes | None:
        """The body serialized to JSON. Equal bodies give equal bytes."""
        if self.body is None:
            return None
        return json.dumps(self.body, ensure_ascii=False, separators=(",", ":")).encode("utf-8")


@dataclass(frozen=True)
class ChatReply:
    """Internal action result: a message posted straight back into the room."""

    text: str


@dataclass(frozen=True)
class ActionSuccess:
    status_code: int
    body: Any = None
    text: str = ""


@dataclass(frozen=True)
class ActionFailure:
    status_code: int | None = None
    text: str | None = None
    error: str | None = None


ActionResult = ActionSuccess | ActionFailure


@dataclass
class ActionOutcome:
    """What happened to one action kind during a dispatch cycle."""

    kind: ActionKind
    status: str = "skipped"
    result: ActionResult | None = None
    artifact: str | None = None
    notify: bool = True
    relayed: bool = False


@dataclass
class DispatchReport:
    state: DispatchState
    mention: BotMention | None = None
    reason: str | None = None
    outcomes: list[ActionOutcome] = field(default_factory=list)

    @property
    def dispatched(self) -> bool:
        return self.state is not DispatchState.NO_ACTION
