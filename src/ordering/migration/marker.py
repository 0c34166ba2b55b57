"""Persisted idempotency markers for guest-to-account migration.

A marker per ``(kind, device_id, user_id)`` records that the bag or the
wishlist of a device has been folded into an account. Markers live in the
remote store so they survive reloads and are shared across tabs.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Identifier, String
from protean.utils.globals import current_domain

from identity.actor import OwnerScope
from ordering.domain import ordering
from ordering.stores.remote_adapter import remote_call


class MigrationKind(Enum):
    BAG = "bag"
    WISHLIST = "wishlist"


def marker_key(kind: MigrationKind, device_id: str, user_id: str) -> str:
    return f"{kind.value}:{device_id}:{user_id}"


@ordering.aggregate
class MigrationMarker:
    marker_key = Identifier(identifier=True, required=True)
    kind = String(choices=MigrationKind, required=True)
    device_id = String(max_length=255, required=True)
    user_id = String(max_length=255, required=True)
    completed_at = DateTime()


class MigrationLedger:
    """Reads and writes migration markers through the domain repository."""

    def is_marked(self, kind: MigrationKind, device_id: str, user_id: str) -> bool:
        with remote_call("read migration marker", OwnerScope.user(user_id)):
            try:
                current_domain.repository_for(MigrationMarker).get(marker_key(kind, device_id, user_id))
            except ObjectNotFoundError:
                return False
        return True

    def mark(self, kind: MigrationKind, device_id: str, user_id: str) -> None:
        if self.is_marked(kind, device_id, user_id):
            return
        with remote_call("write migration marker", OwnerScope.user(user_id)):
            current_domain.repository_for(MigrationMarker).add(
                MigrationMarker(
                    marker_key=marker_key(kind, device_id, user_id),
                    kind=kind.value,
                    device_id=str(device_id),
                    user_id=str(user_id),
                    completed_at=datetime.now(UTC),
                )
            )

    def is_complete(self, device_id: str, user_id: str) -> bool:
        """True once both the bag and the wishlist have been migrated."""
        return all(self.is_marked(kind, device_id, user_id) for kind in MigrationKind)
