"""Identity resolver: tracks the current actor for one device session.

Sign-in announces ``AnonymousToAuthenticated`` to subscribers so guest
state can be migrated. The announcement is gated on a persisted ledger
rather than an in-memory flag, since the callback can fire again after a
reload or token refresh.
"""

from collections.abc import Callable
from typing import Protocol

import structlog

from identity.actor import Actor, Anonymous, Authenticated
from identity.events import AnonymousToAuthenticated

logger = structlog.get_logger(__name__)

Subscriber = Callable[[AnonymousToAuthenticated], None]


class MigrationLedger(Protocol):
    def is_complete(self, device_id: str, user_id: str) -> bool: ...


class IdentityResolver:
    def __init__(self, device_id: str, ledger: MigrationLedger) -> None:
        self.device_id = str(device_id)
        self._ledger = ledger
        self._current: Actor = Anonymous(self.device_id)
        self._subscribers: list[Subscriber] = []
        self._announced: set[tuple[str, str]] = set()

    @property
    def current(self) -> Actor:
        return self._current

    def subscribe(self, handler: Subscriber) -> Callable[[], None]:
        self._subscribers.append(handler)

        def unsubscribe() -> None:
            if handler in self._subscribers:
                self._subscribers.remove(handler)

        return unsubscribe

    def sign_in(self, user_id: str) -> Authenticated:
        """Authenticate this device's session.

        Emits the transition only when the session was anonymous, it has not
        been announced for this pair in this runtime session, and the ledger
        still shows migration pending.
        """
        user_id = str(user_id)
        key = (self.device_id, user_id)
        # A failed ledger read must leave the session anonymous
        announce = (
            isinstance(self._current, Anonymous)
            and key not in self._announced
            and not self._ledger.is_complete(*key)
        )
        self._current = Authenticated(user_id)
        logger.info("Shopper signed in", device_id=self.device_id, user_id=user_id)

        if announce:
            self._announced.add(key)
            self._emit(AnonymousToAuthenticated(device_id=self.device_id, user_id=user_id))
        return self._current

    def refresh(self) -> Actor:
        """Token refresh keeps the actor and never announces a transition."""
        return self._current

    def restore(self, user_id: str) -> Authenticated:
        """Resume an existing session after a reload.

        Re-announces while the ledger shows migration incomplete, which lets
        an interrupted migration run again.
        """
        user_id = str(user_id)
        pending = not self._ledger.is_complete(self.device_id, user_id)
        self._current = Authenticated(user_id)
        if pending:
            logger.info("Resuming pending guest migration", device_id=self.device_id, user_id=user_id)
            self._announced.add((self.device_id, user_id))
            self._emit(AnonymousToAuthenticated(device_id=self.device_id, user_id=user_id))
        return self._current

    def sign_out(self) -> Anonymous:
        if isinstance(self._current, Authenticated):
            logger.info("Shopper signed out", device_id=self.device_id, user_id=self._current.user_id)
        self._current = Anonymous(self.device_id)
        return self._current

    def _emit(self, event: AnonymousToAuthenticated) -> None:
        for handler in list(self._subscribers):
            handler(event)
