from __future__ import annotations

"""Domain errors raised by handlers and rendered by the app."""


class NotFoundError(Exception):
    """An entity (picker, route, pickup...) does not exist.

    ``key`` is the JSON field the message is reported under: ``error`` for a
    missing route, ``message`` everywhere else.
    """

    def __init__(self, message: str, key: str = "message") -> None:
        super().__init__(message)
        self.message = message
        self.key = key


class RouteResetUnsupported(Exception):
    """The active location strategy has no route cursor to reset."""

    def __init__(self, strategy: str) -> None:
        super().__init__(f"Location strategy '{strategy}' does not follow a fixed route")
        self.strategy = strategy
