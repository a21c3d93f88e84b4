"""CLI commands: one module per mode (run, check, threads)."""

from typer import Typer

from topic_bridge.cli import check_mode, run_mode, threads_mode
from topic_bridge.utils.tracing import init_tracing

init_tracing()

app = Typer(help="Email <-> Telegram forum topic bridge")


def register_commands() -> None:
    """Register all CLI commands on the global app."""
    app.command()(run_mode.run)
    app.command()(check_mode.check)
    app.command()(threads_mode.threads)


register_commands()
