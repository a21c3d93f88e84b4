"""Mailbox poller: detect new mail by message-count growth and dispatch each message once.

The cursor is the last observed message count. Each tick re-reads the count;
growth from N to M fetches sequence numbers N+1..M and dispatches one task per
message to a worker pool. The cursor only moves after the fetch returns, so a
failed fetch is retried on the next tick. It never moves down: if the mailbox
shrinks nothing happens, and mail deleted before it was counted is never seen.
"""

import threading
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Callable, Optional

from opentelemetry.trace import Status, StatusCode

from topic_bridge.config import DISPATCH_WORKER_COUNT, POLL_INTERVAL_SECONDS
from topic_bridge.errors import AlreadyRunningError, TransportError
from topic_bridge.mail.protocol import Mailbox
from topic_bridge.models.mail import InboundMail
from topic_bridge.utils.logger import bind_context, clear_context, get_logger
from topic_bridge.utils.tracing import get_tracer

logger = get_logger("topic_bridge.mail.poller")

MessageCallback = Callable[[InboundMail], object]


class MailboxPoller:
    """Periodic count-delta poller running on its own thread.

    When no executor is injected the poller creates (and shuts down) its own
    bounded ThreadPoolExecutor per start/stop cycle.

    Each dispatched task re-checks the stop event under the same lock stop()
    holds while setting it, so a task either decided to call back before
    stop() took the lock or it never calls back.
    """

    def __init__(
        self,
        mailbox: Mailbox,
        executor: Optional[Executor] = None,
        max_workers: int = DISPATCH_WORKER_COUNT,
    ):
        self._mailbox = mailbox
        self._executor = executor
        self._owns_executor = executor is None
        self._max_workers = max(1, max_workers)
        self._lock = threading.Lock()
        # one tick at a time; never held while dispatching
        self._tick_lock = threading.Lock()
        self._running = False
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._callback: Optional[MessageCallback] = None
        self._interval = POLL_INTERVAL_SECONDS
        self._cursor = 0

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def running(self) -> bool:
        return self._running

    def start(self, interval: float = POLL_INTERVAL_SECONDS, on_new_message: Optional[MessageCallback] = None) -> None:
        """Take the current mailbox count as the baseline and begin ticking every interval seconds.

        Raises AlreadyRunningError if running, TransportError if the baseline cannot be read.
        A stop() that lands while the baseline is being read cancels the start.
        """
        if on_new_message is None:
            raise ValueError("on_new_message callback is required")
        with self._lock:
            if self._running:
                raise AlreadyRunningError("mailbox poller is already running")
            self._running = True
            stop_event = self._stop_event = threading.Event()

        try:
            baseline = self._mailbox.count()
        except Exception:
            with self._lock:
                if self._stop_event is stop_event:
                    self._running = False
            raise

        with self._lock:
            if stop_event.is_set():
                logger.info("poller.start_cancelled", baseline=baseline)
                return
            self._cursor = baseline
            self._callback = on_new_message
            self._interval = interval
            if self._owns_executor:
                self._executor = ThreadPoolExecutor(
                    max_workers=self._max_workers, thread_name_prefix="mail-dispatch"
                )
            self._thread = threading.Thread(
                target=self._run,
                args=(stop_event,),
                name="mailbox-poller",
                daemon=True,
            )
            self._thread.start()
        logger.info("poller.started", cursor=baseline, interval=interval)

    def stop(self, timeout: Optional[float] = None) -> None:
        """Stop ticking. Idempotent; callable from any thread.

        Once this returns no new callback starts; callbacks already running finish.
        A tick stuck in a mailbox call is abandoned after timeout seconds.
        """
        with self._lock:
            if not self._running:
                return
            self._running = False
            self._stop_event.set()
            thread, self._thread = self._thread, None

        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
            if thread.is_alive():
                logger.warning("poller.stop.tick_abandoned", timeout=timeout)
        if self._owns_executor and self._executor is not None:
            self._executor.shutdown(wait=False)
            self._executor = None
        logger.info("poller.stopped", cursor=self._cursor)

    def _run(self, stop_event: threading.Event) -> None:
        while not stop_event.wait(self._interval):
            try:
                self.poll_once()
            except Exception as e:
                logger.exception("poller.tick.error", error=str(e))

    def poll_once(self) -> int:
        """Run one tick. Returns the number of messages dispatched (0 when not running)."""
        with self._tick_lock:
            messages = self._next_batch()
        for message in messages:
            self._dispatch(message)
        if messages:
            logger.info("poller.tick.dispatched", count=len(messages), cursor=self._cursor)
        return len(messages)

    def _next_batch(self) -> list[InboundMail]:
        """Read the count, fetch anything past the cursor and advance it. Caller holds the tick lock."""
        if not self._running:
            return []
        tracer = get_tracer()
        with tracer.start_as_current_span("poll_tick", attributes={"poller.cursor": self._cursor}) as span:
            try:
                current = self._mailbox.count()
            except TransportError as e:
                logger.warning("poller.tick.count_failed", cursor=self._cursor, error=str(e))
                span.set_status(Status(StatusCode.ERROR, str(e)))
                return []

            span.set_attribute("poller.current", current)
            if current <= self._cursor:
                if current < self._cursor:
                    logger.debug("poller.tick.mailbox_shrank", cursor=self._cursor, current=current)
                return []

            start, end = self._cursor + 1, current
            logger.info("poller.tick.new_mail", previous=self._cursor, current=current)
            try:
                messages = self._mailbox.fetch_range(start, end)
            except TransportError as e:
                logger.warning("poller.tick.fetch_failed", start=start, end=end, error=str(e))
                span.set_status(Status(StatusCode.ERROR, str(e)))
                return []

            self._cursor = current
            span.set_attribute("poller.fetched", len(messages))
            return messages

    def _dispatch(self, message: InboundMail) -> None:
        stop_event = self._stop_event
        callback = self._callback
        executor = self._executor
        if callback is None or executor is None or stop_event.is_set():
            return

        def _invoke() -> None:
            bind_context(seq=message.seq)
            try:
                with self._lock:
                    if stop_event.is_set():
                        logger.debug("poller.dispatch.skipped_after_stop", seq=message.seq)
                        return
                callback(message)
            except Exception as e:
                logger.exception("poller.dispatch.callback_error", seq=message.seq, error=str(e))
            finally:
                clear_context()

        try:
            executor.submit(_invoke)
        except RuntimeError as e:
            # executor shut down between the stop check and submit
            logger.debug("poller.dispatch.rejected", seq=message.seq, error=str(e))
