"""Mention-triggered action dispatcher."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

import structlog

from mentionhook.channels.base import ChatHost, InboundMessage
from mentionhook.dispatch.assignee import AssigneeResolver
from mentionhook.dispatch.client import ExternalActionClient, issue_url_from, pipeline_url_from
from mentionhook.dispatch.matcher import MentionMatcher
from mentionhook.dispatch.models import (
    ActionKind,
    ActionOutcome,
    ActionSuccess,
    BotMention,
    ChatReply,
    DispatchReport,
    DispatchState,
    MessageContext,
)
from mentionhook.dispatch.payloads import ActionPayloadBuilder
from mentionhook.dispatch.relay import ResponseRelay
from mentionhook.settings import ConfigProvider, resolve_action_config

logger = structlog.get_logger()


class Dispatcher:
    """Runs one dispatch cycle per inbound message.

    Idle -> Matching -> (NoAction | Dispatching) -> Relaying -> Idle. Nothing
    is kept between cycles, and no action or relay failure escapes
    :meth:`handle_message`.
    """

    def __init__(
        self,
        *,
        host: ChatHost,
        matcher: MentionMatcher,
        config_provider: ConfigProvider,
        actions: Sequence[ActionKind] = tuple(ActionKind),
        client: ExternalActionClient | None = None,
        builder: ActionPayloadBuilder | None = None,
        relay: ResponseRelay | None = None,
        assignee_resolver: AssigneeResolver | None = None,
    ) -> None:
        self.host = host
        self.matcher = matcher
        self.config_provider = config_provider
        self.actions = list(dict.fromkeys(actions))
        self.client = client or ExternalActionClient()
        self.builder = builder or ActionPayloadBuilder()
        self.relay = relay or ResponseRelay(host)
        self.assignee_resolver = assignee_resolver or AssigneeResolver(self.client, self.builder)

    async def handle_message(self, message: InboundMessage) -> DispatchReport:
        """Handle one inbound message end-to-end."""
        log = logger.bind(message_id=message.id, room_id=message.room_id)

        try:
            bot_identity = await self.host.get_bot_identity()
        except Exception as e:
            log.warning("dispatch.identity_lookup_failed", error=str(e))
            bot_identity = None
        if not bot_identity:
            log.warning("dispatch.no_action", reason="bot_identity_unknown")
            return DispatchReport(state=DispatchState.NO_ACTION, reason="bot_identity_unknown")
        if message.sender_id == bot_identity:
            log.debug("dispatch.no_action", reason="own_message")
            return DispatchReport(state=DispatchState.NO_ACTION, reason="own_message")

        mention = self.matcher.match(message.text)
        if mention is None:
            log.debug("dispatch.no_action", reason="no_mention")
            return DispatchReport(state=DispatchState.NO_ACTION, reason="no_mention")

        context = MessageContext.from_message(message)
        log = log.bind(bot=mention.bot_id, channel=context.channel_name)
        log.info("dispatch.mention", actions=[kind.value for kind in self.actions])

        outcomes = await asyncio.gather(
            *(self._run_action(kind, context, mention) for kind in self.actions)
        )

        for outcome in outcomes:
            if outcome.artifact:
                outcome.relayed = await self.relay.relay(outcome, context.room)
                if outcome.kind is ActionKind.ECHO_REPLY:
                    outcome.status = "replied" if outcome.relayed else "failed"

        log.info(
            "dispatch.completed",
            outcomes={outcome.kind.value: outcome.status for outcome in outcomes},
        )
        return DispatchReport(
            state=DispatchState.COMPLETED,
            mention=mention,
            outcomes=list(outcomes),
        )

    async def _run_action(
        self,
        kind: ActionKind,
        context: MessageContext,
        mention: BotMention,
    ) -> ActionOutcome:
        outcome = ActionOutcome(kind=kind)
        try:
            await self._perform(outcome, context, mention)
        except Exception as e:
            logger.exception("dispatch.action.crashed", kind=kind.value, error=str(e))
            outcome.status = "failed"
        return outcome

    async def _perform(
        self,
        outcome: ActionOutcome,
        context: MessageContext,
        mention: BotMention,
    ) -> None:
        config = resolve_action_config(self.config_provider, outcome.kind)
        outcome.notify = config.notify

        assignee_id = None
        if (
            outcome.kind is ActionKind.CREATE_ISSUE
            and config.enabled
            and config.assign_mentioned_bot
            and not config.missing_fields()
        ):
            assignee_id = await self.assignee_resolver.resolve(mention.bot_id, config)

        payload = self.builder.build(context, mention, config, assignee_id=assignee_id)
        if payload is None:
            return

        if isinstance(payload, ChatReply):
            # status is settled by the relay outcome
            outcome.artifact = payload.text
            return

        result = await self.client.send(payload, tls_verify=config.tls_verify)
        outcome.result = result
        if not isinstance(result, ActionSuccess):
            outcome.status = "failed"
            logger.error(
                "dispatch.action.failed",
                kind=outcome.kind.value,
                status_code=result.status_code,
                body=(result.text or "")[:300],
                error=result.error,
            )
            return

        outcome.status = "succeeded"
        if outcome.kind is ActionKind.CREATE_ISSUE:
            outcome.artifact = issue_url_from(result, config)
        else:
            outcome.artifact = pipeline_url_from(result)
        logger.info(
            "dispatch.action.succeeded",
            kind=outcome.kind.value,
            status_code=result.status_code,
            artifact=outcome.artifact,
        )
