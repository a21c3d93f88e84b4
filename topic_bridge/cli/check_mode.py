"""Check mode: verify mailbox and bot credentials without bridging anything."""

import typer

from topic_bridge.chat.telegram import TelegramClient
from topic_bridge.errors import TransportError
from topic_bridge.mail.imap_mailbox import ImapMailbox

from .shared import console, logger, require_settings


def check() -> None:
    """Connect to IMAP and Telegram; print folders, message count and bot identity."""
    log = logger.bind(command="check")
    log.info("check.start")
    require_settings("check", ("IMAP_HOST", "MAIL_USERNAME", "MAIL_PASSWORD", "TELEGRAM_BOT_TOKEN"))

    mailbox = ImapMailbox()
    chat = TelegramClient()
    failed = False
    try:
        try:
            folders = mailbox.list_folders()
            count = mailbox.count()
        except TransportError as e:
            console.print(f"[red]IMAP: {e}[/red]")
            log.error("check.imap_failed", error=str(e))
            failed = True
        else:
            console.print("[bold]Available mailboxes:[/bold]")
            for name in folders:
                console.print(f"  - {name}")
            console.print(f"[green]IMAP ok: {count} messages in watched folder.[/green]")

        try:
            me = chat.get_me()
        except TransportError as e:
            console.print(f"[red]Telegram: {e}[/red]")
            log.error("check.telegram_failed", error=str(e))
            failed = True
        else:
            console.print(f"[green]Telegram ok: @{me.get('username', '?')}[/green]")
    finally:
        mailbox.close()
        chat.close()

    if failed:
        raise typer.Exit(1)
    log.info("check.ok")
