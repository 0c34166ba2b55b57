"""WishlistEntry aggregate: a liked design, owned by one scope."""

from datetime import UTC, datetime

from protean.fields import DateTime, Identifier, String

from identity.actor import OwnerKind, OwnerScope
from ordering.domain import ordering


def entry_key(scope: OwnerScope, design_id: str) -> str:
    return f"{scope.kind.value}:{scope.owner_id}:{design_id}"


@ordering.aggregate
class WishlistEntry:
    entry_key = Identifier(identifier=True, required=True)
    owner_kind = String(choices=OwnerKind, required=True)
    owner_id = String(max_length=255, required=True)
    design_id = String(max_length=255, required=True)
    saved_at = DateTime()

    @classmethod
    def create(cls, scope: OwnerScope, design_id: str, saved_at: datetime | None = None):
        return cls(
            entry_key=entry_key(scope, design_id),
            owner_kind=scope.kind.value,
            owner_id=scope.owner_id,
            design_id=design_id,
            saved_at=saved_at or datetime.now(UTC),
        )
