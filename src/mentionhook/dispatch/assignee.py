"""GitLab user lookup for issue assignees."""

from __future__ import annotations

import structlog

from mentionhook.dispatch.client import ExternalActionClient
from mentionhook.dispatch.models import ActionConfig, ActionSuccess
from mentionhook.dispatch.payloads import ActionPayloadBuilder

logger = structlog.get_logger()


class AssigneeResolver:
    """Resolves a username to a GitLab user id.

    Every failure returns None so the issue is still created, just unassigned.
    """

    def __init__(self, client: ExternalActionClient, builder: ActionPayloadBuilder | None = None) -> None:
        self.client = client
        self.builder = builder or ActionPayloadBuilder()

    async def resolve(self, username: str, config: ActionConfig) -> int | None:
        username = (username or "").strip()
        if not username or config.missing_fields():
            return None

        request = self.builder.user_lookup(username, config)
        result = await self.client.send(request, tls_verify=config.tls_verify)
        if not isinstance(result, ActionSuccess):
            logger.warning(
                "dispatch.assignee.lookup_failed",
                username=username,
                status_code=result.status_code,
                error=result.error,
            )
            return None

        users = result.body
        if not isinstance(users, list) or not users:
            logger.info("dispatch.assignee.not_found", username=username)
            return None

        first = users[0]
        user_id = first.get("id") if isinstance(first, dict) else None
        if isinstance(user_id, bool) or not isinstance(user_id, int):
            logger.warning("dispatch.assignee.unparsable_response", username=username)
            return None

        logger.info("dispatch.assignee.resolved", username=username, user_id=user_id)
        return user_id
