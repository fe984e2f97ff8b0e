"""Single-attempt HTTP client for external actions."""

from __future__ import annotations

import json

import httpx
import structlog

from mentionhook.dispatch.models import (
    UNKNOWN,
    ActionConfig,
    ActionFailure,
    ActionResult,
    ActionSuccess,
    OutboundRequest,
)

logger = structlog.get_logger()


class ExternalActionClient:
    """Sends one request per call and classifies the outcome.

    2xx responses are :class:`ActionSuccess`; any other status is an
    :class:`ActionFailure`. Transport errors and requests httpx refuses to
    build from the settings (bad port, non-ASCII token) are failures too.
    There is no retry.

    ``tls_verify=False`` disables certificate verification entirely. It exists
    for GitLab instances with self-signed certificates and should stay off
    elsewhere.
    """

    def __init__(
        self,
        *,
        timeout_s: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.timeout_s = timeout_s
        self._transport = transport

    async def send(self, request: OutboundRequest, tls_verify: bool) -> ActionResult:
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout_s),
                verify=tls_verify,
                transport=self._transport,
            ) as client:
                response = await client.request(
                    request.method,
                    request.url,
                    headers=request.headers,
                    params=request.params,
                    content=request.content,
                )
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            # ValueError covers header values that are not ASCII-encodable
            return ActionFailure(error=f"{type(e).__name__}: {e}")

        if 200 <= response.status_code <= 299:
            return ActionSuccess(
                status_code=response.status_code,
                body=_parse_json(response.text),
                text=response.text,
            )
        return ActionFailure(status_code=response.status_code, text=response.text)


def _parse_json(text: str):
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        return None


def issue_url_from(result: ActionResult, config: ActionConfig) -> str:
    """Canonical issue URL from a create-issue response, or ``"unknown"``."""
    if not isinstance(result, ActionSuccess):
        return UNKNOWN
    data = result.body
    if not isinstance(data, dict):
        logger.warning("dispatch.issue.unparsable_response", status_code=result.status_code)
        return UNKNOWN

    web_url = data.get("web_url")
    if isinstance(web_url, str) and web_url.strip():
        return web_url.strip()

    iid = data.get("iid")
    if iid is not None and str(iid).strip():
        base = config.endpoint_base.strip().rstrip("/")
        return f"{base}/{config.project_id.strip()}/issues/{iid}"

    logger.warning("dispatch.issue.url_missing", status_code=result.status_code)
    return UNKNOWN


def pipeline_url_from(result: ActionResult) -> str:
    """Pipeline web URL from a trigger response, or ``"unknown"``."""
    if not isinstance(result, ActionSuccess) or not isinstance(result.body, dict):
        return UNKNOWN
    web_url = result.body.get("web_url")
    if isinstance(web_url, str) and web_url.strip():
        return web_url.strip()
    return UNKNOWN
