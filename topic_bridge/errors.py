"""Error taxonomy shared by the poller, reconciler and adapters.

Adapters translate library exceptions into these types so the core only ever
has to reason about a handful of outcomes:

- ``NotFoundError``: expected miss that drives create-on-miss; never a failure.
- ``TransportError``: mailbox, chat or SMTP network/protocol failure.
- ``NoReadableBodyError``: no plain or HTML part could be extracted.
- ``AlreadyRunningError``: a lifecycle method was called out of order.
"""


class BridgeError(Exception):
    """Base class for all topic-bridge errors."""


class NotFoundError(BridgeError):
    """Lookup found nothing."""


class ThreadNotFoundError(NotFoundError):
    """No managed thread exists for the given thread handle."""

    def __init__(self, thread_handle: int):
        super().__init__(f"No thread for handle: {thread_handle}")
        self.thread_handle = thread_handle


class TransportError(BridgeError):
    """Mailbox, chat platform or mail sender failed at the network/protocol level."""


class NoReadableBodyError(BridgeError):
    """The message has no text/plain or text/html part to show."""


class AlreadyRunningError(BridgeError):
    """start() was called while the component was already running."""
