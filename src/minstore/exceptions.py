"""Custom exception hierarchy for minstore."""

from __future__ import annotations


class StoreError(Exception):
    """Base exception for all errors raised by minstore itself.

    Exceptions raised by caller-supplied callables (listeners, updaters,
    selectors, equality functions) are never wrapped in this hierarchy.
    """


class StoreConfigError(StoreError, ValueError):
    """Invalid store configuration."""


class StateMergeError(StoreError, TypeError):
    """The current state and an update cannot be shallow-merged."""

    def __init__(self, message: str, *, state_type: type, update_type: type) -> None:
        self.state_type = state_type
        self.update_type = update_type
        super().__init__(message)


class StoreRecursionError(StoreError, RecursionError):
    """Nested notification passes exceeded ``StoreConfig.max_notify_depth``.

    Raised only when a depth bound is configured; by default re-entrant
    ``set_state`` calls from listeners are unbounded.
    """

    def __init__(self, message: str, *, depth: int) -> None:
        self.depth = depth
        super().__init__(message)
