"""Text transforms applied to mail bodies before they are posted into a topic.

Usage:
    from topic_bridge.utils.body_sanitizer import format_inbound_post

    text = format_inbound_post(subject, body)
"""

# Literal marker that starts the quoted part of a reply ("> previous text").
QUOTE_MARKER = "> "

# Telegram rejects sendMessage text longer than this.
MAX_POST_LENGTH = 4096


def trim_quoted_reply(body: str) -> str:
    """Keep only what precedes the first quote marker, stripped.

    A plain split on the marker, not a MIME-aware quote parser: a line that
    legitimately contains "> " also cuts the body there.
    """
    return body.split(QUOTE_MARKER, 1)[0].strip()


def truncate_post(text: str, max_chars: int = MAX_POST_LENGTH) -> str:
    """Cut text to max_chars, ending with an ellipsis when cut."""
    if len(text) <= max_chars:
        return text
    return text[: max_chars - 3].rstrip() + "..."


def format_inbound_post(subject: str, body: str) -> str:
    """Chat text for one inbound mail: subject, blank line, trimmed body."""
    return truncate_post(f"{subject}\n\n{trim_quoted_reply(body)}")
