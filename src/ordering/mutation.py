"""Optimistic mutations with rollback, serialized per key.

Every bag and wishlist mutation follows the same cycle: change the visible
state, persist, and on failure put the visible state back before the error
reaches the caller.
"""

import threading
from collections.abc import Callable, Hashable
from contextlib import contextmanager
from typing import TypeVar

import structlog

logger = structlog.get_logger(__name__)

T = TypeVar("T")


def optimistic(
    apply: Callable[[], None],
    persist: Callable[[], T],
    revert: Callable[[], None],
    *,
    operation: str = "mutation",
    **log_context,
) -> T:
    """Run ``apply`` then ``persist``; undo with ``revert`` if persisting fails."""
    apply()
    try:
        return persist()
    except Exception as exc:
        revert()
        logger.warning("Rolled back optimistic update", operation=operation, error=str(exc), **log_context)
        raise


class KeyedLocks:
    """One re-entrant lock per key, held for a whole optimistic cycle.

    A key's lock is discarded once no holder or waiter references it.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[Hashable, threading.RLock] = {}
        self._users: dict[Hashable, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    @contextmanager
    def hold(self, key: Hashable):
        with self._guard:
            lock = self._locks.setdefault(key, threading.RLock())
            self._users[key] = self._users.get(key, 0) + 1
        try:
            with lock:
                yield
        finally:
            with self._guard:
                self._users[key] -= 1
                if not self._users[key]:
                    del self._users[key]
                    del self._locks[key]
