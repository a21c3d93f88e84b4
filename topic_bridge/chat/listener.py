"""Chat update listener: long-poll getUpdates and hand each update to a worker pool."""

import threading
from concurrent.futures import Executor
from typing import Callable, Optional

from topic_bridge.chat.protocol import ChatPlatform
from topic_bridge.errors import AlreadyRunningError, TransportError
from topic_bridge.models.chat import ChatUpdate
from topic_bridge.utils.logger import bind_context, clear_context, get_logger

logger = get_logger("topic_bridge.chat.listener")

UpdateCallback = Callable[[ChatUpdate], object]


class ChatUpdateListener:
    """Receive loop for chat updates on its own thread.

    The offset advances past every received update before it is dispatched,
    so an update is handed out at most once per process.
    """

    def __init__(
        self,
        chat: ChatPlatform,
        executor: Executor,
        poll_timeout: Optional[int] = None,
        retry_delay: float = 5.0,
    ):
        self._chat = chat
        self._executor = executor
        self._poll_timeout = poll_timeout
        self._retry_delay = retry_delay
        self._lock = threading.Lock()
        self._running = False
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._callback: Optional[UpdateCallback] = None
        self._offset: Optional[int] = None

    @property
    def offset(self) -> Optional[int]:
        return self._offset

    def start(self, on_update: UpdateCallback) -> None:
        with self._lock:
            if self._running:
                raise AlreadyRunningError("chat update listener is already running")
            self._running = True
            self._stop_event = threading.Event()
            self._callback = on_update
            self._thread = threading.Thread(
                target=self._run, args=(self._stop_event,), name="chat-listener", daemon=True
            )
            thread = self._thread
        thread.start()
        logger.info("listener.started")

    def stop(self, timeout: Optional[float] = None) -> None:
        """Stop receiving. Idempotent; an in-progress long poll is abandoned after timeout seconds."""
        with self._lock:
            if not self._running:
                return
            self._running = False
            self._stop_event.set()
            thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        logger.info("listener.stopped", offset=self._offset)

    def _run(self, stop_event: threading.Event) -> None:
        while not stop_event.is_set():
            try:
                self.poll_once()
            except TransportError as e:
                logger.warning("listener.poll_failed", error=str(e))
                stop_event.wait(self._retry_delay)
            except Exception as e:
                logger.exception("listener.poll_error", error=str(e))
                stop_event.wait(self._retry_delay)

    def poll_once(self) -> int:
        """Fetch one batch of updates and dispatch them. Returns the batch size."""
        updates = self._chat.get_updates(offset=self._offset, timeout=self._poll_timeout)
        for update in updates:
            self._offset = update.update_id + 1
            self._dispatch(update)
        return len(updates)

    def _dispatch(self, update: ChatUpdate) -> None:
        stop_event = self._stop_event
        callback = self._callback
        if callback is None or stop_event.is_set():
            return

        def _invoke() -> None:
            bind_context(update_id=update.update_id)
            try:
                # same lock stop() holds while setting the event
                with self._lock:
                    if stop_event.is_set():
                        return
                callback(update)
            except Exception as e:
                logger.exception("listener.dispatch.callback_error", update_id=update.update_id, error=str(e))
            finally:
                clear_context()

        try:
            self._executor.submit(_invoke)
        except RuntimeError as e:
            logger.debug("listener.dispatch.rejected", update_id=update.update_id, error=str(e))
