"""List stored threads."""

from rich.table import Table

from topic_bridge.db import init_db
from topic_bridge.db.store import SqlThreadStore

from .shared import console, logger


def threads() -> None:
    """Print every stored thread as a table."""
    init_db()
    rows = SqlThreadStore().list_threads()
    logger.info("threads.list", count=len(rows))

    table = Table(title="Threads")
    table.add_column("Kind", style="cyan")
    table.add_column("Target", style="green")
    table.add_column("Topic", justify="right")
    table.add_column("Last subject")
    table.add_column("Created")
    for row in rows:
        table.add_row(
            row.kind,
            row.target,
            str(row.thread_handle),
            row.last_subject or "",
            row.created_at.isoformat(timespec="seconds") if row.created_at else "",
        )
    console.print(table)
    console.print(f"[green]{len(rows)} threads.[/green]")
