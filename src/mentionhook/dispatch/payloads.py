"""Turns a mention plus action settings into an outbound request."""

from __future__ import annotations

from urllib.parse import quote

import structlog

from mentionhook.dispatch.models import (
    UNKNOWN,
    ActionConfig,
    ActionKind,
    BotMention,
    ChatReply,
    MessageContext,
    OutboundRequest,
)

logger = structlog.get_logger()

ISSUE_LABELS = ("rocketchat-bot", "auto-generated")


def gitlab_api_base(config: ActionConfig) -> str:
    return f"{config.endpoint_base.strip().rstrip('/')}/api/v4"


def project_path(config: ActionConfig) -> str:
    return quote(config.project_id.strip(), safe="")


def _label(prefix: str, value: str) -> str:
    # GitLab splits the labels field on commas
    return f"{prefix}::{value.replace(',', ' ').strip()}"


class ActionPayloadBuilder:
    """Builds the request (or chat reply) for one action kind.

    ``build`` is pure: the same inputs always give an equal result. It returns
    None when the action is disabled or its settings are incomplete.
    """

    def build(
        self,
        context: MessageContext,
        mention: BotMention,
        config: ActionConfig,
        assignee_id: int | None = None,
    ) -> OutboundRequest | ChatReply | None:
        if not config.enabled:
            logger.debug("dispatch.action.disabled", kind=config.kind.value)
            return None

        missing = config.missing_fields()
        if missing:
            logger.warning(
                "dispatch.action.config_incomplete",
                kind=config.kind.value,
                missing=missing,
            )
            return None

        if config.kind is ActionKind.CREATE_ISSUE:
            return self.create_issue(context, mention, config, assignee_id)
        if config.kind is ActionKind.TRIGGER_PIPELINE:
            return self.trigger_pipeline(context, mention, config)
        return self.echo_reply(context)

    def create_issue(
        self,
        context: MessageContext,
        mention: BotMention,
        config: ActionConfig,
        assignee_id: int | None = None,
    ) -> OutboundRequest:
        title = f"Bot Message from {context.channel_name}: {mention.bot_id}"
        labels = [*ISSUE_LABELS, _label("channel", context.channel_name)]
        if context.has_topic:
            title = f"[{context.channel_topic}] {title}"
            labels.append(_label("topic", context.channel_topic))

        body: dict = {
            "title": title,
            "description": context.text,
            "labels": labels,
        }
        if assignee_id is not None:
            body["assignee_ids"] = [assignee_id]

        return OutboundRequest(
            method="POST",
            url=f"{gitlab_api_base(config)}/projects/{project_path(config)}/issues",
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {config.credential}",
            },
            body=body,
        )

    def trigger_pipeline(
        self,
        context: MessageContext,
        mention: BotMention,
        config: ActionConfig,
    ) -> OutboundRequest:
        # Trust comes from the trigger token in the body, not a bearer header
        return OutboundRequest(
            method="POST",
            url=f"{gitlab_api_base(config)}/projects/{project_path(config)}/trigger/pipeline",
            headers={"Content-Type": "application/json"},
            body={
                "token": config.credential,
                "ref": config.ref,
                "variables": {
                    "ROCKETCHAT_MESSAGE": context.text,
                    "ROCKETCHAT_CHANNEL_NAME": context.channel_name,
                    "ROCKETCHAT_TOPIC": context.channel_topic,
                    "ROCKETCHAT_BOT_NAME": mention.bot_id,
                    "ROCKETCHAT_MESSAGE_ID": context.message_id,
                    "ROCKETCHAT_SENDER": context.sender_username,
                },
            },
        )

    def echo_reply(self, context: MessageContext) -> ChatReply:
        return ChatReply(
            text=(
                f'🤖 Bot mentioned! Received message: "{context.text}" '
                f"with ID: {context.message_id or UNKNOWN} "
                f"in #{context.channel_name} (topic: {context.channel_topic})"
            )
        )

    def user_lookup(self, username: str, config: ActionConfig) -> OutboundRequest:
        """Request for the exact-username user search."""
        return OutboundRequest(
            method="GET",
            url=f"{gitlab_api_base(config)}/users",
            headers={"Authorization": f"Bearer {config.credential}"},
            params={"username": username},
        )
