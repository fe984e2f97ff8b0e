"""Rocket.Chat outgoing webhook ingress."""

from __future__ import annotations

import secrets

import structlog
from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, ConfigDict

from mentionhook.channels.rocketchat import message_from_outgoing_webhook

logger = structlog.get_logger()

router = APIRouter()


class RocketChatOutgoingWebhook(BaseModel):
    """Body Rocket.Chat posts for each message matching an outgoing webhook."""

    model_config = ConfigDict(extra="allow")

    token: str | None = None
    channel_id: str | None = None
    channel_name: str | None = None
    message_id: str | None = None
    timestamp: str | None = None
    user_id: str | None = None
    user_name: str | None = None
    text: str | None = None
    bot: bool | dict | None = None


@router.post("/v1/webhooks/rocketchat")
async def rocketchat_webhook(request: Request, body: RocketChatOutgoingWebhook) -> dict:
    config = request.app.state.config
    expected_token = config.rocketchat.webhook_token.strip()
    if expected_token and not secrets.compare_digest((body.token or "").strip(), expected_token):
        logger.warning("webhooks.rocketchat.invalid_token", channel_id=body.channel_id)
        raise HTTPException(status_code=401, detail="Invalid webhook token")

    host = request.app.state.host
    room = await host.fetch_room(body.channel_id) if body.channel_id else None
    message = message_from_outgoing_webhook(body.model_dump(), room=room)

    report = await request.app.state.dispatcher.handle_message(message)

    return {
        "status": "ok",
        "dispatched": report.dispatched,
        "reason": report.reason,
        "bot": report.mention.bot_id if report.mention else None,
        "actions": [
            {
                "kind": outcome.kind.value,
                "status": outcome.status,
                "artifact": outcome.artifact,
                "relayed": outcome.relayed,
            }
            for outcome in report.outcomes
        ],
    }
