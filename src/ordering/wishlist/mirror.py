"""Wishlist mirror: liked designs, stored like drafts but never priced."""

from dataclasses import dataclass, field

import structlog
from protean.exceptions import ValidationError

from catalogue.port import Catalog, CatalogEntryNotFound
from identity.actor import OwnerScope
from identity.resolver import IdentityResolver
from ordering.migration.marker import MigrationKind, MigrationLedger
from ordering.mutation import KeyedLocks, optimistic
from ordering.stores.port import WishlistStore
from ordering.wishlist.entry import WishlistEntry

logger = structlog.get_logger(__name__)


@dataclass
class WishlistMigrationResult:
    device_id: str
    user_id: str
    already_complete: bool = False
    added: list[str] = field(default_factory=list)
    duplicates: list[str] = field(default_factory=list)


class WishlistMirror:
    def __init__(
        self,
        resolver: IdentityResolver,
        local_store: WishlistStore,
        remote_store: WishlistStore,
        catalog: Catalog,
        ledger: MigrationLedger,
    ) -> None:
        self.resolver = resolver
        self.local_store = local_store
        self.remote_store = remote_store
        self.catalog = catalog
        self.ledger = ledger
        self._locks = KeyedLocks()
        self._visible: dict[str, WishlistEntry] = {}
        self._visible_scope: OwnerScope | None = None

    @property
    def scope(self) -> OwnerScope:
        return self.resolver.current.scope

    def store_for(self, scope: OwnerScope) -> WishlistStore:
        return self.local_store if scope.is_anonymous else self.remote_store

    def _view(self, scope: OwnerScope) -> dict[str, WishlistEntry]:
        if self._visible_scope != scope:
            self._reload(scope)
        return self._visible

    def _reload(self, scope: OwnerScope) -> list[WishlistEntry]:
        entries = self.store_for(scope).list(scope)
        self._visible = {entry.design_id: entry for entry in entries}
        self._visible_scope = scope
        return entries

    def toggle(self, design_id: str) -> bool:
        """Like or unlike a design; returns whether it is liked afterwards."""
        try:
            self.catalog.get_design(design_id)
        except CatalogEntryNotFound as exc:
            raise ValidationError({"design_id": [str(exc)]}) from exc

        scope = self.scope
        store = self.store_for(scope)

        with self._locks.hold(design_id):
            view = self._view(scope)
            previous = view.get(design_id)

            def revert() -> None:
                if previous is None:
                    view.pop(design_id, None)
                else:
                    view[design_id] = previous

            if store.contains(scope, design_id):
                optimistic(
                    apply=lambda: view.pop(design_id, None),
                    persist=lambda: store.remove(scope, design_id),
                    revert=revert,
                    operation="wishlist_remove",
                    design_id=design_id,
                )
                return False

            entry = WishlistEntry.create(scope, design_id)
            optimistic(
                apply=lambda: view.__setitem__(design_id, entry),
                persist=lambda: store.add(scope, design_id, entry.saved_at),
                revert=revert,
                operation="wishlist_add",
                design_id=design_id,
            )
            return True

    def list(self) -> list[str]:
        """Liked design ids, most recently saved first."""
        entries = self._reload(self.scope)
        return [entry.design_id for entry in sorted(entries, key=lambda e: e.saved_at, reverse=True)]

    def is_liked(self, design_id: str) -> bool:
        scope = self.scope
        return self.store_for(scope).contains(scope, design_id)

    def migrate_anonymous_to_user(self, device_id: str, user_id: str) -> WishlistMigrationResult:
        """Union the guest wishlist into the account; duplicates are dropped silently."""
        result = WishlistMigrationResult(device_id=str(device_id), user_id=str(user_id))
        if self.ledger.is_marked(MigrationKind.WISHLIST, device_id, user_id):
            result.already_complete = True
            return result

        anonymous = OwnerScope.anonymous(device_id)
        user = OwnerScope.user(user_id)
        try:
            for entry in self.local_store.list(anonymous):
                if self.remote_store.contains(user, entry.design_id):
                    result.duplicates.append(entry.design_id)
                else:
                    self.remote_store.add(user, entry.design_id, entry.saved_at)
                    result.added.append(entry.design_id)
                self.local_store.remove(anonymous, entry.design_id)

            self.ledger.mark(MigrationKind.WISHLIST, device_id, user_id)
        finally:
            self._visible_scope = None

        logger.info(
            "Guest wishlist migrated",
            device_id=device_id,
            user_id=user_id,
            added=len(result.added),
            duplicates=len(result.duplicates),
        )
        return result
