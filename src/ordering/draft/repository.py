"""Repository for the Draft aggregate."""

from identity.actor import OwnerScope
from ordering.domain import ordering
from ordering.draft.draft import Draft


@ordering.repository(part_of=Draft)
class DraftRepository:
    def find_for_owner(self, scope: OwnerScope) -> list[Draft]:
        """All drafts owned by the given scope, submitted ones included.

        Unpaged: submitted drafts accumulate, and callers need every open one.
        """
        query = self._dao.query.filter(owner_kind=scope.kind.value, owner_id=scope.owner_id)
        return query.limit(None).all().items

    def find_owned(self, scope: OwnerScope, draft_id: str) -> Draft | None:
        matches = (
            self._dao.query.filter(id=str(draft_id), owner_kind=scope.kind.value, owner_id=scope.owner_id).all().items
        )
        return matches[0] if matches else None
