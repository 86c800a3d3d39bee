"""Exceptions raised by the dialogue engine."""
from __future__ import annotations


class DialogueError(Exception):
    """Base exception for all engine operations."""

    def __init__(self, message: str, topic: str = ""):
        self.topic = topic
        super().__init__(message)


class OutOfSyncContextError(DialogueError):
    """A stack transition was requested from a context that is not on top."""

    def __init__(self, operation: str, topic: str = ""):
        self.operation = operation
        super().__init__(
            f"Cannot {operation} topic: only the active (topmost) context may change the stack",
            topic,
        )


class UnknownTopicError(DialogueError):
    def __init__(self, topic: str):
        super().__init__(f"Topic '{topic}' is not registered", topic)


class UnknownCallbackError(DialogueError):
    def __init__(self, callback: str, topic: str = ""):
        self.callback = callback
        super().__init__(f"Topic '{topic}' has no callback named '{callback}'", topic)
