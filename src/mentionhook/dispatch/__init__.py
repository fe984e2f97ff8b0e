"""Mention matching and GitLab action payloads.

The dispatch cycle itself lives in :mod:`mentionhook.dispatch.service`.
"""

from mentionhook.dispatch.client import ExternalActionClient
from mentionhook.dispatch.matcher import MentionMatcher
from mentionhook.dispatch.models import (
    ActionConfig,
    ActionFailure,
    ActionKind,
    ActionOutcome,
    ActionResult,
    ActionSuccess,
    BotMention,
    ChatReply,
    DispatchReport,
    DispatchState,
    MessageContext,
    OutboundRequest,
)
from mentionhook.dispatch.payloads import ActionPayloadBuilder
from mentionhook.dispatch.relay import ResponseRelay

__all__ = [
    "ActionConfig",
    "ActionFailure",
    "ActionKind",
    "ActionOutcome",
    "ActionPayloadBuilder",
    "ActionResult",
    "ActionSuccess",
    "BotMention",
    "ChatReply",
    "DispatchReport",
    "DispatchState",
    "ExternalActionClient",
    "MentionMatcher",
    "MessageContext",
    "OutboundRequest",
    "ResponseRelay",
]
