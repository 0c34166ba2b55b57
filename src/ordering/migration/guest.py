"""Guest migration: runs when a guest signs in.

Consumes ``AnonymousToAuthenticated`` from the identity resolver and folds
the device's bag and wishlist into the account. A failed run is logged and
kept for ``retry()``; the resolver also re-announces on ``restore()`` while
the ledger is incomplete, so an interrupted migration resumes after reload.
"""

from dataclasses import dataclass

import structlog

from identity.events import AnonymousToAuthenticated
from identity.resolver import IdentityResolver
from ordering.errors import PersistenceError, RemoteUnavailable
from ordering.reconciler.reconciler import DraftReconciler
from ordering.reconciler.results import MigrationResult
from ordering.wishlist.mirror import WishlistMigrationResult, WishlistMirror

logger = structlog.get_logger(__name__)


@dataclass
class GuestMigrationOutcome:
    bag: MigrationResult
    wishlist: WishlistMigrationResult


class GuestMigration:
    def __init__(self, resolver: IdentityResolver, reconciler: DraftReconciler, wishlist: WishlistMirror) -> None:
        self.reconciler = reconciler
        self.wishlist = wishlist
        self.last_outcome: GuestMigrationOutcome | None = None
        self.last_failure: Exception | None = None
        self._pending: AnonymousToAuthenticated | None = None
        self._unsubscribe = resolver.subscribe(self.handle)

    def handle(self, event: AnonymousToAuthenticated) -> None:
        self._pending = event
        try:
            self.run(event.device_id, event.user_id)
        except (RemoteUnavailable, PersistenceError) as exc:
            self.last_failure = exc
            logger.error(
                "Guest migration interrupted",
                device_id=event.device_id,
                user_id=event.user_id,
                error=str(exc),
            )

    def run(self, device_id: str, user_id: str) -> GuestMigrationOutcome:
        bag = self.reconciler.migrate_anonymous_to_user(device_id, user_id)
        wishlist = self.wishlist.migrate_anonymous_to_user(device_id, user_id)
        self.last_outcome = GuestMigrationOutcome(bag=bag, wishlist=wishlist)
        self.last_failure = None
        self._pending = None
        return self.last_outcome

    def retry(self) -> GuestMigrationOutcome | None:
        """Re-run the last interrupted migration, if there is one."""
        if self._pending is None:
            return None
        return self.run(self._pending.device_id, self._pending.user_id)

    def close(self) -> None:
        self._unsubscribe()
