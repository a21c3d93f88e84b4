"""Email <-> Telegram forum topic bridge: one topic per correspondent."""

__version__ = "0.1.0"
