"""mentionhook FastAPI application entrypoint."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI

from mentionhook import __version__
from mentionhook.channels.base import ChatHost
from mentionhook.channels.rocketchat import RocketChatHost
from mentionhook.config import MentionhookConfig, get_config
from mentionhook.dispatch.client import ExternalActionClient
from mentionhook.dispatch.matcher import MentionMatcher
from mentionhook.dispatch.service import Dispatcher
from mentionhook.logging import setup_logging
from mentionhook.settings import build_config_provider

logger = structlog.get_logger()


def build_dispatcher(config: MentionhookConfig, host: ChatHost) -> Dispatcher:
    """Wire a dispatcher for ``host`` from application config."""
    return Dispatcher(
        host=host,
        matcher=MentionMatcher(config.bot_names),
        config_provider=build_config_provider(config),
        actions=config.actions,
        client=ExternalActionClient(timeout_s=config.request_timeout_s),
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application startup/shutdown lifecycle."""
    config = get_config()
    setup_logging(level=config.log_level, fmt=config.log_format)

    logger.info("mentionhook.starting", version=__version__, bots=config.bot_names)
    if not config.rocketchat.configured:
        logger.warning(
            "mentionhook.rocketchat.not_configured",
            reason="url, user_id and auth_token are required; every message will be skipped",
        )

    host = RocketChatHost(config.rocketchat)
    dispatcher = build_dispatcher(config, host)

    app.state.config = config
    app.state.host = host
    app.state.dispatcher = dispatcher

    logger.info(
        "mentionhook.ready",
        actions=[kind.value for kind in dispatcher.actions],
        settings_backend=dispatcher.config_provider.name,
    )

    yield

    logger.info("mentionhook.stopped")


def create_app() -> FastAPI:
    """Create the FastAPI application."""
    app = FastAPI(
        title="mentionhook",
        version=__version__,
        description="Files GitLab issues and triggers pipelines when chat bots are mentioned.",
        lifespan=lifespan,
    )

    from mentionhook.api.routes.health import router as health_router
    from mentionhook.api.routes.webhooks import router as webhooks_router

    app.include_router(health_router, tags=["health"])
    app.include_router(webhooks_router, tags=["webhooks"])

    return app


app = create_app()


def main() -> None:
    """Run the server directly."""
    config = get_config()
    setup_logging(level=config.log_level, fmt=config.log_format)
    uvicorn.run(
        "mentionhook.main:app",
        host=config.host,
        port=config.port,
        log_level="warning",
    )


if __name__ == "__main__":
    main()
