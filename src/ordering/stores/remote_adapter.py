"""Remote document store adapters for signed-in shoppers.

Records are Protean aggregates persisted through the domain's configured
provider. Every query is filtered by owner, so one user's records are never
visible to another. Provider failures surface as ``RemoteUnavailable``.
"""

from contextlib import contextmanager
from datetime import datetime

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from identity.actor import OwnerScope
from ordering.draft.draft import Draft
from ordering.errors import DraftIdTaken, DraftNotFound, RemoteUnavailable
from ordering.stores.port import DraftStore, WishlistStore
from ordering.wishlist.entry import WishlistEntry, entry_key

logger = structlog.get_logger(__name__)


@contextmanager
def remote_call(operation: str, scope: OwnerScope):
    try:
        yield
    except (ObjectNotFoundError, ValidationError, ValueError, DraftIdTaken):
        raise
    except Exception as exc:
        logger.error("Remote store call failed", operation=operation, scope=str(scope), error=str(exc))
        raise RemoteUnavailable(f"Remote store could not {operation}", cause=exc) from exc


def _require_user(scope: OwnerScope) -> None:
    if scope.is_anonymous:
        raise ValueError(f"The remote store only holds signed-in scopes, not {scope}")


class RemoteDraftStore(DraftStore):
    def list(self, scope: OwnerScope) -> list[Draft]:
        _require_user(scope)
        with remote_call("list drafts", scope):
            return current_domain.repository_for(Draft).find_for_owner(scope)

    def get(self, scope: OwnerScope, draft_id: str) -> Draft:
        _require_user(scope)
        with remote_call("load draft", scope):
            draft = current_domain.repository_for(Draft).find_owned(scope, draft_id)
        if draft is None:
            raise DraftNotFound(draft_id, scope)
        return draft

    def put(self, scope: OwnerScope, draft: Draft) -> None:
        _require_user(scope)
        if draft.scope != scope:
            raise ValueError(f"Draft {draft.id} belongs to {draft.scope}, not {scope}")
        with remote_call("save draft", scope):
            repo = current_domain.repository_for(Draft)
            try:
                existing = repo.get(draft.id)
            except ObjectNotFoundError:
                repo.add(draft.copy())
                return

            if existing.scope != scope:
                raise DraftIdTaken(draft.id)
            existing.replace_with(draft)
            repo.add(existing)

    def delete(self, scope: OwnerScope, draft_id: str) -> None:
        _require_user(scope)
        with remote_call("delete draft", scope):
            repo = current_domain.repository_for(Draft)
            draft = repo.find_owned(scope, draft_id)
            if draft is not None:
                repo._dao.delete(draft)


class RemoteWishlistStore(WishlistStore):
    def _find(self, scope: OwnerScope, design_id: str) -> WishlistEntry | None:
        try:
            return current_domain.repository_for(WishlistEntry).get(entry_key(scope, design_id))
        except ObjectNotFoundError:
            return None

    def list(self, scope: OwnerScope) -> list[WishlistEntry]:
        _require_user(scope)
        with remote_call("list wishlist", scope):
            repo = current_domain.repository_for(WishlistEntry)
            query = repo._dao.query.filter(owner_kind=scope.kind.value, owner_id=scope.owner_id)
            return query.limit(None).all().items

    def contains(self, scope: OwnerScope, design_id: str) -> bool:
        _require_user(scope)
        with remote_call("load wishlist entry", scope):
            return self._find(scope, design_id) is not None

    def add(self, scope: OwnerScope, design_id: str, saved_at: datetime | None = None) -> None:
        _require_user(scope)
        with remote_call("save wishlist entry", scope):
            if self._find(scope, design_id) is None:
                current_domain.repository_for(WishlistEntry).add(WishlistEntry.create(scope, design_id, saved_at))

    def remove(self, scope: OwnerScope, design_id: str) -> None:
        _require_user(scope)
        with remote_call("delete wishlist entry", scope):
            entry = self._find(scope, design_id)
            if entry is not None:
                current_domain.repository_for(WishlistEntry)._dao.delete(entry)
