"""Draft reconciler: the bag as the shopper sees it.

Routes every read and write to the store that owns the current scope,
applies mutations optimistically with rollback, serializes mutations per
draft id, and folds a guest bag into an account exactly once.
"""

from decimal import Decimal

import structlog
from protean.exceptions import ValidationError

from catalogue.port import Catalog, CatalogEntryNotFound
from identity.actor import OwnerScope
from identity.resolver import IdentityResolver
from ordering.draft.draft import Draft, DraftStatus, validate_quantity
from ordering.draft.selections import Selections, ServiceType
from ordering.errors import DraftIdTaken, DraftNotFound, DraftSubmitted, MigrationConflict
from ordering.migration.marker import MigrationKind, MigrationLedger
from ordering.mutation import KeyedLocks, optimistic
from ordering.pricing.engine import price, price_draft
from ordering.reconciler.bag_count import BagCount
from ordering.reconciler.results import MigrationResult, PricedDraft
from ordering.stores.port import DraftStore

logger = structlog.get_logger(__name__)


def _coerce_service_type(service_type) -> ServiceType:
    try:
        return ServiceType(service_type)
    except ValueError:
        raise ValidationError({"service_type": [f"Unknown service type {service_type!r}"]}) from None


def _coerce_selections(selections) -> Selections:
    if isinstance(selections, Selections):
        return selections
    return Selections.from_dict(selections)


class DraftReconciler:
    def __init__(
        self,
        resolver: IdentityResolver,
        local_store: DraftStore,
        remote_store: DraftStore,
        catalog: Catalog,
        ledger: MigrationLedger,
        stitching_fee: Decimal | None = None,
    ) -> None:
        self.resolver = resolver
        self.local_store = local_store
        self.remote_store = remote_store
        self.catalog = catalog
        self.ledger = ledger
        self.stitching_fee = stitching_fee
        self.bag_count_observable = BagCount()
        self._locks = KeyedLocks()
        self._visible: dict[str, Draft] = {}
        self._visible_scope: OwnerScope | None = None

    # -------------------------------------------------------------------
    # Store routing
    # -------------------------------------------------------------------
    @property
    def scope(self) -> OwnerScope:
        return self.resolver.current.scope

    def store_for(self, scope: OwnerScope) -> DraftStore:
        return self.local_store if scope.is_anonymous else self.remote_store

    def _view(self, scope: OwnerScope) -> dict[str, Draft]:
        """In-memory bag for ``scope``, reloaded when the scope has changed."""
        if self._visible_scope != scope:
            self._reload(scope)
        return self._visible

    def _reload(self, scope: OwnerScope) -> list[Draft]:
        drafts = [d for d in self.store_for(scope).list(scope) if d.status == DraftStatus.DRAFT.value]
        self._visible = {str(d.id): d for d in drafts}
        self._visible_scope = scope
        return drafts

    def _price(self, service_type, design_id, selections):
        return price(service_type, design_id, selections, self.catalog, self.stitching_fee)

    def _validate(self, service_type: ServiceType, design_id: str, selections: Selections) -> None:
        try:
            self.catalog.get_design(design_id)
        except CatalogEntryNotFound as exc:
            raise ValidationError({"design_id": [str(exc)]}) from exc
        selections.validate(service_type, self.catalog)

    def _load_editable(self, scope: OwnerScope, draft_id: str) -> Draft:
        draft = self.store_for(scope).get(scope, draft_id)
        if draft.is_submitted:
            raise DraftSubmitted(draft_id)
        return draft

    def _restore(self, view: dict[str, Draft], draft_id: str, previous: Draft | None):
        def revert() -> None:
            if previous is None:
                view.pop(draft_id, None)
            else:
                view[draft_id] = previous

        return revert

    # -------------------------------------------------------------------
    # Bag count
    # -------------------------------------------------------------------
    @property
    def bag_count(self) -> int:
        return sum(draft.quantity for draft in self._view(self.scope).values())

    def subscribe(self, callback):
        """Observe the bag count; returns an unsubscribe callable."""
        return self.bag_count_observable.subscribe(callback)

    def _publish_count(self) -> None:
        self.bag_count_observable.publish(self.bag_count)

    # -------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------
    def add_draft(self, service_type, design_id: str, selections, quantity=1) -> Draft:
        """Validate, price and persist a new bag line in the current scope."""
        service_type = _coerce_service_type(service_type)
        selections = _coerce_selections(selections)
        validate_quantity(quantity)
        self._validate(service_type, design_id, selections)

        scope = self.scope
        breakdown = self._price(service_type, design_id, selections)
        draft = Draft.create(scope, service_type, design_id, selections, breakdown.total.paise, quantity)
        draft_id = str(draft.id)
        view = self._view(scope)

        with self._locks.hold(draft_id):
            try:
                optimistic(
                    apply=lambda: view.__setitem__(draft_id, draft),
                    persist=lambda: self.store_for(scope).put(scope, draft),
                    revert=self._restore(view, draft_id, None),
                    operation="add_draft",
                    draft_id=draft_id,
                )
            finally:
                self._publish_count()

        logger.info(
            "Draft added",
            draft_id=draft_id,
            scope=str(scope),
            service_type=service_type.value,
            estimated_price=draft.estimated_price,
        )
        return draft

    def update_quantity(self, draft_id: str, quantity) -> None:
        validate_quantity(quantity)
        draft_id = str(draft_id)
        scope = self.scope

        with self._locks.hold(draft_id):
            current = self._load_editable(scope, draft_id)
            if current.quantity == quantity:
                return

            updated = current.copy()
            updated.change_quantity(quantity)
            view = self._view(scope)
            try:
                optimistic(
                    apply=lambda: view.__setitem__(draft_id, updated),
                    persist=lambda: self.store_for(scope).put(scope, updated),
                    revert=self._restore(view, draft_id, view.get(draft_id)),
                    operation="update_quantity",
                    draft_id=draft_id,
                )
            finally:
                self._publish_count()

    def update_selections(self, draft_id: str, changes) -> Draft:
        """Edit selections and re-run pricing in full.

        ``changes`` is either a complete ``Selections`` or a mapping of the
        fields to replace.
        """
        draft_id = str(draft_id)
        scope = self.scope

        with self._locks.hold(draft_id):
            current = self._load_editable(scope, draft_id)
            if isinstance(changes, Selections):
                selections = changes
            else:
                selections = current.selections.merged_with(dict(changes))
            service_type = ServiceType(current.service_type)
            self._validate(service_type, current.design_id, selections)

            breakdown = self._price(service_type, current.design_id, selections)
            updated = current.copy()
            updated.apply_selections(selections, breakdown.total.paise)
            view = self._view(scope)
            try:
                optimistic(
                    apply=lambda: view.__setitem__(draft_id, updated),
                    persist=lambda: self.store_for(scope).put(scope, updated),
                    revert=self._restore(view, draft_id, view.get(draft_id)),
                    operation="update_selections",
                    draft_id=draft_id,
                )
            finally:
                self._publish_count()

        logger.info("Draft repriced", draft_id=draft_id, estimated_price=updated.estimated_price)
        return updated

    def remove_draft(self, draft_id: str) -> None:
        """Remove a bag line. Removing an absent id does nothing."""
        draft_id = str(draft_id)
        scope = self.scope

        with self._locks.hold(draft_id):
            view = self._view(scope)
            try:
                current = self._load_editable(scope, draft_id)
            except DraftNotFound:
                view.pop(draft_id, None)
                return

            previous = view.get(draft_id, current)
            try:
                optimistic(
                    apply=lambda: view.pop(draft_id, None),
                    persist=lambda: self.store_for(scope).delete(scope, draft_id),
                    revert=self._restore(view, draft_id, previous),
                    operation="remove_draft",
                    draft_id=draft_id,
                )
            finally:
                self._publish_count()

    def list_drafts(self) -> list[PricedDraft]:
        """Open drafts of the current scope, newest first, each freshly priced.

        Always re-reads the store; other tabs or devices may have changed it.
        """
        drafts = self._reload(self.scope)
        priced = [PricedDraft(draft, price_draft(draft, self.catalog, self.stitching_fee)) for draft in drafts]
        return sorted(priced, key=lambda p: p.draft.created_at, reverse=True)

    def mark_submitted(self, draft_ids, order_id: str) -> None:
        """Flip drafts to ``Submitted`` once their order has been placed.

        Every id is checked before anything is written. Drafts already
        submitted to the same order are left alone.
        """
        scope = self.scope
        store = self.store_for(scope)
        order_id = str(order_id)

        pending = []
        for draft_id in map(str, draft_ids):
            draft = store.get(scope, draft_id)
            if draft.is_submitted:
                if draft.order_id == order_id:
                    continue
                raise DraftSubmitted(draft_id)
            pending.append(draft)

        view = self._view(scope)
        try:
            for current in pending:
                draft_id = str(current.id)
                with self._locks.hold(draft_id):
                    submitted = current.copy()
                    submitted.submit(order_id)
                    optimistic(
                        apply=lambda draft_id=draft_id: view.pop(draft_id, None),
                        persist=lambda submitted=submitted: store.put(scope, submitted),
                        revert=self._restore(view, draft_id, view.get(draft_id, current)),
                        operation="mark_submitted",
                        draft_id=draft_id,
                    )
        finally:
            self._publish_count()

        logger.info("Drafts submitted", order_id=order_id, draft_count=len(pending))

    # -------------------------------------------------------------------
    # Migration
    # -------------------------------------------------------------------
    def migrate_anonymous_to_user(self, device_id: str, user_id: str) -> MigrationResult:
        """Fold the guest bag of ``device_id`` into the account of ``user_id``.

        Safe to re-run after an interruption: the account is re-read before
        each run, and a draft whose id or content is already there is not
        copied again. The anonymous original is deleted only after its copy
        (or skip) has succeeded; the ledger is marked last.
        """
        result = MigrationResult(device_id=str(device_id), user_id=str(user_id))
        if self.ledger.is_marked(MigrationKind.BAG, device_id, user_id):
            result.already_complete = True
            return result

        anonymous = OwnerScope.anonymous(device_id)
        user = OwnerScope.user(user_id)
        guest_drafts = sorted(self.local_store.list(anonymous), key=lambda d: d.created_at)
        account_drafts = self.remote_store.list(user)
        by_id = {str(d.id): d for d in account_drafts}
        by_content = {d.content_key(): d for d in account_drafts if not d.is_submitted}

        logger.info(
            "Migrating guest bag",
            device_id=device_id,
            user_id=user_id,
            guest_drafts=len(guest_drafts),
            account_drafts=len(account_drafts),
        )

        try:
            for draft in guest_drafts:
                draft_id = str(draft.id)
                with self._locks.hold(draft_id):
                    conflict = self._migration_conflict(draft, by_id, by_content)
                    if conflict is not None:
                        result.conflicts.append(conflict)
                        logger.info("Skipped guest draft", draft_id=draft_id, reason=conflict.reason)
                    else:
                        copy = draft.copy()
                        copy.reassign_to(user, self._migrated_price(draft))
                        copy = self._put_migrated(user, copy)
                        by_id[draft_id] = copy
                        by_content[copy.content_key()] = copy
                        result.migrated.append(draft_id)

                    self.local_store.delete(anonymous, draft_id)
                    result.removed.append(draft_id)

            self.ledger.mark(MigrationKind.BAG, device_id, user_id)
        finally:
            self._visible_scope = None
        self._publish_count()

        logger.info(
            "Guest bag migrated",
            device_id=device_id,
            user_id=user_id,
            migrated=len(result.migrated),
            skipped=len(result.conflicts),
        )
        return result

    def _put_migrated(self, user: OwnerScope, copy: Draft) -> Draft:
        """Store a migrated copy, moving it to a fresh id if another account holds its id."""
        try:
            self.remote_store.put(user, copy)
        except DraftIdTaken:
            relocated = copy.copy(fresh_identity=True)
            self.remote_store.put(user, relocated)
            logger.info("Migrated draft under a fresh id", draft_id=str(copy.id), new_id=str(relocated.id))
            return relocated
        return copy

    @staticmethod
    def _migration_conflict(draft: Draft, by_id: dict, by_content: dict) -> MigrationConflict | None:
        existing = by_id.get(str(draft.id))
        if existing is not None:
            return MigrationConflict(draft.id, existing.id, "already in account")
        existing = by_content.get(draft.content_key())
        if existing is not None:
            return MigrationConflict(draft.id, existing.id, "identical customization in account")
        return None

    def _migrated_price(self, draft: Draft) -> int:
        try:
            return price_draft(draft, self.catalog, self.stitching_fee).total.paise
        except CatalogEntryNotFound as exc:
            logger.warning("Keeping cached price for migrated draft", draft_id=str(draft.id), error=str(exc))
            return draft.estimated_price
