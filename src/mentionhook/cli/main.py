"""mentionhook CLI: inspect settings and try mentions locally."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from mentionhook.channels.base import InboundMessage
from mentionhook.channels.console import ConsoleHost
from mentionhook.config import get_config
from mentionhook.dispatch.matcher import MentionMatcher
from mentionhook.logging import setup_logging
from mentionhook.settings import SETTINGS, SettingType, build_config_provider, read_setting

app = typer.Typer(
    name="mentionhook",
    help="mentionhook: GitLab actions for chat bot mentions",
    no_args_is_help=True,
    add_completion=False,
)

console = Console()


def _display_value(setting_type: SettingType, value) -> str:
    if setting_type is SettingType.SECRET:
        return "[dim]set (hidden)[/dim]" if value else "[dim]not set[/dim]"
    if isinstance(value, bool):
        return "[green]true[/green]" if value else "[red]false[/red]"
    return str(value) if value else "[dim]—[/dim]"


@app.command()
def serve(
    host: str = typer.Option("", "--host", help="Bind host (default from config)"),
    port: int = typer.Option(0, "--port", help="Bind port (default from config)"),
    reload: bool = typer.Option(False, "--reload"),
) -> None:
    """Start the webhook server."""
    import uvicorn

    config = get_config()
    console.print(Panel("Starting mentionhook server...", border_style="blue"))
    uvicorn.run(
        "mentionhook.main:app",
        host=host or config.host,
        port=port or config.port,
        reload=reload,
    )


@app.command()
def settings() -> None:
    """Show action settings as the configured backend currently resolves them."""
    config = get_config()
    provider = build_config_provider(config)

    table = Table(title=f"Action settings ({provider.name})", border_style="blue")
    table.add_column("Setting", style="cyan", no_wrap=True)
    table.add_column("Type")
    table.add_column("Value")
    table.add_column("Description", style="dim")

    for setting in SETTINGS:
        value = read_setting(provider, setting.id)
        table.add_row(
            setting.id.value,
            setting.type.value,
            _display_value(setting.type, value),
            setting.description,
        )

    console.print()
    console.print(table)
    console.print()


@app.command()
def match(text: str = typer.Argument(..., help="Message text to check")) -> None:
    """Show which configured bot, if any, a message mentions."""
    matcher = MentionMatcher(get_config().bot_names)
    mention = matcher.match(text)
    if mention is None:
        console.print("[yellow]no mention[/yellow]")
        raise typer.Exit(1)
    console.print(f"[green]✓[/green] @{mention.bot_id} (matched '{mention.raw_match}')")


@app.command()
def dispatch(
    text: str = typer.Argument(..., help="Message text"),
    room: str = typer.Option("general", "--room", "-r", help="Room display name"),
    topic: str = typer.Option("", "--topic", "-t", help="Room topic"),
    sender: str = typer.Option("cli-user", "--sender", "-s", help="Sender username"),
    message_id: str = typer.Option("", "--message-id", help="Message id"),
) -> None:
    """Run one dispatch cycle against live settings, printing chat replies here."""
    from mentionhook.main import build_dispatcher

    config = get_config()
    setup_logging(level=config.log_level, fmt="console")

    host = ConsoleHost(console)
    dispatcher = build_dispatcher(config, host)
    message = InboundMessage(
        text=text,
        id=message_id or None,
        sender_id=sender,
        sender_username=sender,
        room_id=room,
        room_name=room,
        room_topic=topic or None,
    )
    report = asyncio.run(dispatcher.handle_message(message))

    if not report.dispatched:
        console.print(f"[yellow]No action:[/yellow] {report.reason}")
        return

    table = Table(title=f"Dispatch for @{report.mention.bot_id}", border_style="blue")
    table.add_column("Action", style="cyan")
    table.add_column("Status")
    table.add_column("Result")
    table.add_column("Relayed", justify="center")
    for outcome in report.outcomes:
        table.add_row(
            outcome.kind.value,
            outcome.status,
            outcome.artifact or "",
            "✓" if outcome.relayed else "",
        )
    console.print()
    console.print(table)
    console.print()


@app.command()
def version() -> None:
    """Show mentionhook version."""
    from mentionhook import __version__

    console.print(f"mentionhook v{__version__}")


def main() -> None:
    """Entrypoint."""
    app()


if __name__ == "__main__":
    main()
