"""Device-storage adapters for anonymous drafts and wishlist entries.

Each device holds one JSON document per collection. Unreadable documents and
quota failures surface as ``PersistenceError``; nothing is silently dropped.
"""

import json
from datetime import datetime

from protean.exceptions import ValidationError

from identity.actor import OwnerScope
from ordering.draft.draft import DRAFT_FIELDS, Draft
from ordering.errors import DraftNotFound, PersistenceError
from ordering.stores.device_storage import DeviceStorage
from ordering.stores.port import DraftStore, WishlistStore
from ordering.wishlist.entry import WishlistEntry

BAG_KEY = "guest_bag"
WISHLIST_KEY = "guest_wishlist"

_DATETIME_FIELDS = ("created_at", "updated_at")


def _encode_draft(draft: Draft) -> dict:
    record = draft.to_record()
    record["id"] = str(record["id"])
    for name in _DATETIME_FIELDS:
        if record[name] is not None:
            record[name] = record[name].isoformat()
    return record


def _decode_draft(record: dict) -> Draft:
    record = {name: record.get(name) for name in DRAFT_FIELDS}
    for name in _DATETIME_FIELDS:
        if record[name] is not None:
            record[name] = datetime.fromisoformat(record[name])
    return Draft.from_record(record)


class _DeviceCollection:
    """A JSON object stored under one device-storage key."""

    def __init__(self, storage: DeviceStorage, key: str):
        self.storage = storage
        self.key = key

    def check_scope(self, scope: OwnerScope) -> None:
        if not scope.is_anonymous or scope.owner_id != self.storage.device_id:
            raise ValueError(f"Device storage for {self.storage.device_id} cannot hold records for {scope}")

    def read(self) -> dict:
        raw = self.storage.get_item(self.key)
        if raw is None:
            return {}
        try:
            data = json.loads(raw)
        except ValueError as exc:
            raise PersistenceError(f"Stored {self.key!r} is not valid JSON", cause=exc) from exc
        if not isinstance(data, dict):
            raise PersistenceError(f"Stored {self.key!r} is not a JSON object")
        return data

    def write(self, data: dict) -> None:
        if not data:
            self.storage.remove_item(self.key)
            return
        try:
            raw = json.dumps(data, sort_keys=True)
        except (TypeError, ValueError) as exc:
            raise PersistenceError(f"Could not serialize {self.key!r}", cause=exc) from exc
        self.storage.set_item(self.key, raw)


class LocalDraftStore(DraftStore):
    def __init__(self, storage: DeviceStorage):
        self._collection = _DeviceCollection(storage, BAG_KEY)

    def _decode(self, record) -> Draft:
        try:
            return _decode_draft(record)
        except (AttributeError, KeyError, TypeError, ValueError, ValidationError) as exc:
            raise PersistenceError("Stored draft record is corrupt", cause=exc) from exc

    def list(self, scope: OwnerScope) -> list[Draft]:
        self._collection.check_scope(scope)
        return [self._decode(record) for record in self._collection.read().values()]

    def get(self, scope: OwnerScope, draft_id: str) -> Draft:
        self._collection.check_scope(scope)
        record = self._collection.read().get(str(draft_id))
        if record is None:
            raise DraftNotFound(draft_id, scope)
        return self._decode(record)

    def put(self, scope: OwnerScope, draft: Draft) -> None:
        self._collection.check_scope(scope)
        if draft.scope != scope:
            raise ValueError(f"Draft {draft.id} belongs to {draft.scope}, not {scope}")
        data = self._collection.read()
        data[str(draft.id)] = _encode_draft(draft)
        self._collection.write(data)

    def delete(self, scope: OwnerScope, draft_id: str) -> None:
        self._collection.check_scope(scope)
        data = self._collection.read()
        if data.pop(str(draft_id), None) is not None:
            self._collection.write(data)

    def clear(self, scope: OwnerScope) -> None:
        self._collection.check_scope(scope)
        self._collection.write({})


class LocalWishlistStore(WishlistStore):
    """Liked designs keyed by design id, valued by the ISO time they were saved."""

    def __init__(self, storage: DeviceStorage):
        self._collection = _DeviceCollection(storage, WISHLIST_KEY)

    def list(self, scope: OwnerScope) -> list[WishlistEntry]:
        self._collection.check_scope(scope)
        try:
            return [
                WishlistEntry.create(scope, design_id, datetime.fromisoformat(saved_at))
                for design_id, saved_at in self._collection.read().items()
            ]
        except (TypeError, ValueError, ValidationError) as exc:
            raise PersistenceError("Stored wishlist is corrupt", cause=exc) from exc

    def contains(self, scope: OwnerScope, design_id: str) -> bool:
        self._collection.check_scope(scope)
        return design_id in self._collection.read()

    def add(self, scope: OwnerScope, design_id: str, saved_at: datetime | None = None) -> None:
        self._collection.check_scope(scope)
        data = self._collection.read()
        if design_id in data:
            return
        data[design_id] = WishlistEntry.create(scope, design_id, saved_at).saved_at.isoformat()
        self._collection.write(data)

    def remove(self, scope: OwnerScope, design_id: str) -> None:
        self._collection.check_scope(scope)
        data = self._collection.read()
        if data.pop(design_id, None) is not None:
            self._collection.write(data)

    def clear(self, scope: OwnerScope) -> None:
        self._collection.check_scope(scope)
        self._collection.write({})
