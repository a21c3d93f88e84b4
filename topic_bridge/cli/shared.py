"""Shared CLI helpers: console, logger, settings check."""

import typer
from rich.console import Console

from topic_bridge.config import missing_settings
from topic_bridge.utils.logger import get_logger

console = Console()
logger = get_logger("topic_bridge.cli")


def require_settings(command: str, names: tuple[str, ...] | None = None) -> None:
    """Exit 1 with a red message when any required setting is empty."""
    missing = missing_settings(names)
    if missing:
        console.print(f"[red]Missing environment variables: {', '.join(missing)}[/red]")
        logger.warning(f"{command}.missing_env", missing=missing)
        raise typer.Exit(1)
