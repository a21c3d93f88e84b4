"""Chat platform protocol (forum topics inside one space)."""

from typing import Protocol

from topic_bridge.models.chat import ChatUpdate


class ChatPlatform(Protocol):
    """Topic-capable chat. Every method raises TransportError on failure."""

    def create_thread(self, space_id: int, title: str) -> int:
        """Create a topic in the space and return its thread handle."""
        ...

    def post_message(self, space_id: int, thread_handle: int, text: str) -> None:
        ...

    def delete_thread(self, space_id: int, thread_handle: int) -> None:
        ...

    def get_updates(self, offset: int | None = None, timeout: int | None = None) -> list[ChatUpdate]:
        """Long-poll for updates with update_id >= offset."""
        ...
