"""Health check endpoint."""

from __future__ import annotations

import time

from fastapi import APIRouter, Request

from mentionhook import __version__

router = APIRouter()

_start_time = time.time()


@router.get("/health")
async def health(request: Request) -> dict:
    """Health check with uptime and dispatch setup."""
    config = request.app.state.config
    dispatcher = request.app.state.dispatcher

    return {
        "status": "ok",
        "version": __version__,
        "uptime_seconds": round(time.time() - _start_time, 1),
        "host": dispatcher.host.name,
        "bot_names": dispatcher.matcher.bot_names,
        "actions": [kind.value for kind in dispatcher.actions],
        "settings_backend": dispatcher.config_provider.name,
        "rocketchat_configured": config.rocketchat.configured,
    }
