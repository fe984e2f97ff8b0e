"""Follow-up chat messages reporting action results."""

from __future__ import annotations

import structlog

from mentionhook.channels.base import ChatHost, RoomHandle
from mentionhook.dispatch.models import UNKNOWN, ActionKind, ActionOutcome

logger = structlog.get_logger()


def relay_text(outcome: ActionOutcome) -> str | None:
    """Message to post for ``outcome``, or None if there is nothing to report."""
    artifact = (outcome.artifact or "").strip()
    if not artifact or artifact == UNKNOWN or not outcome.notify:
        return None
    if outcome.kind is ActionKind.CREATE_ISSUE:
        return f"🎫 GitLab issue created: {artifact}"
    if outcome.kind is ActionKind.TRIGGER_PIPELINE:
        return f"🚀 GitLab pipeline triggered: {artifact}"
    return artifact


class ResponseRelay:
    def __init__(self, host: ChatHost) -> None:
        self.host = host

    async def relay(self, outcome: ActionOutcome, room: RoomHandle | None) -> bool:
        """Post the outcome into ``room``. Send failures are logged, never raised."""
        text = relay_text(outcome)
        if text is None or room is None:
            return False

        try:
            await self.host.send_message(room, text)
        except Exception as e:
            logger.error(
                "relay.send_failed",
                kind=outcome.kind.value,
                room_id=room.id,
                error=str(e),
            )
            return False

        logger.info("relay.sent", kind=outcome.kind.value, room=room.name or room.id)
        return True
