"""Run mode: poll the mailbox and the chat space until interrupted."""

import threading
from concurrent.futures import ThreadPoolExecutor

import typer

from topic_bridge.bridge import TopicBridge
from topic_bridge.chat.listener import ChatUpdateListener
from topic_bridge.chat.telegram import TelegramClient
from topic_bridge.config import DISPATCH_WORKER_COUNT, POLL_INTERVAL_SECONDS, TELEGRAM_CHAT_ID
from topic_bridge.db import init_db
from topic_bridge.db.store import SqlThreadStore
from topic_bridge.errors import TransportError
from topic_bridge.mail.imap_mailbox import ImapMailbox
from topic_bridge.mail.poller import MailboxPoller
from topic_bridge.mail.smtp_sender import SmtpSender
from topic_bridge.reconciler import ThreadReconciler

from .shared import console, logger, require_settings


def run(
    interval: float = typer.Option(POLL_INTERVAL_SECONDS, "--interval", "-i", help="Mailbox poll interval in seconds"),
    workers: int = typer.Option(DISPATCH_WORKER_COUNT, "--workers", "-w", help="Dispatch worker threads"),
) -> None:
    """Bridge the mailbox and the Telegram forum until Ctrl+C."""
    log = logger.bind(command="run", interval=interval, workers=workers)
    log.info("run.start")
    require_settings("run")
    init_db()

    mailbox = ImapMailbox()
    sender = SmtpSender()
    chat = TelegramClient()
    executor = ThreadPoolExecutor(max_workers=max(1, workers), thread_name_prefix="topic-bridge")

    reconciler = ThreadReconciler(SqlThreadStore(), chat, TELEGRAM_CHAT_ID)
    bridge = TopicBridge(reconciler, chat, sender, TELEGRAM_CHAT_ID)
    poller = MailboxPoller(mailbox, executor=executor)
    listener = ChatUpdateListener(chat, executor=executor)

    try:
        poller.start(interval, bridge.handle_inbound_mail)
    except TransportError as e:
        console.print(f"[red]Could not read the mailbox: {e}[/red]")
        log.error("run.mailbox_unavailable", error=str(e))
        executor.shutdown(wait=False)
        mailbox.close()
        chat.close()
        raise typer.Exit(1)
    listener.start(bridge.handle_chat_update)

    console.print(f"[green]Watching mailbox (baseline {poller.cursor} messages), polling every {interval:g}s.[/green]")
    console.print("[green]Press Ctrl+C to stop.[/green]")
    stop_event = threading.Event()
    try:
        while not stop_event.wait(1.0):
            pass
    except KeyboardInterrupt:
        console.print("\n[dim]Shutting down...[/dim]")
    finally:
        poller.stop(timeout=5.0)
        listener.stop(timeout=5.0)
        executor.shutdown(wait=True)
        mailbox.close()
        chat.close()
        log.info("run.stopped")
