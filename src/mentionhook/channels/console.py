"""Console host used by the CLI to run a dispatch cycle locally."""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel

from mentionhook.channels.base import ChatHost, RoomHandle

CONSOLE_BOT_ID = "mentionhook-console"


class ConsoleHost(ChatHost):
    """Prints outbound chat messages instead of posting them."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()
        self.sent: list[tuple[RoomHandle, str]] = []

    @property
    def name(self) -> str:
        return "console"

    async def get_bot_identity(self) -> str | None:
        return CONSOLE_BOT_ID

    async def send_message(self, room: RoomHandle, text: str) -> None:
        self.sent.append((room, text))
        self.console.print(Panel(text, title=f"#{room.name or room.id}", border_style="green"))
