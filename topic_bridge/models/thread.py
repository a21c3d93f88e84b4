"""Thread kinds."""

from enum import Enum


class ThreadKind(str, Enum):
    """Origin of the external identity a thread is bound to. Only EMAIL is bridged today."""

    EMAIL = "email"
    ACCOUNT = "account"
    TELEGRAM = "telegram"
