"""Utility modules."""

from topic_bridge.utils.logger import bind_context, clear_context, get_logger
from topic_bridge.utils.tracing import get_tracer, init_tracing, shutdown_tracing
from topic_bridge.utils.body_sanitizer import (
    format_inbound_post,
    trim_quoted_reply,
    truncate_post,
)

__all__ = [
    "get_logger",
    "bind_context",
    "clear_context",
    "init_tracing",
    "get_tracer",
    "shutdown_tracing",
    "format_inbound_post",
    "trim_quoted_reply",
    "truncate_post",
]
