"""ChatLens analytics service: dashboard aggregation over exported chats."""

__version__ = "0.1.0"
