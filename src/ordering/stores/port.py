"""Store ports (abstract interfaces).

Drafts and wishlist entries are held in one of two places depending on who
is shopping: device storage for anonymous scopes, the remote document store
for user scopes. Both adapters honour the same contract so the reconciler
never branches on the backend.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from identity.actor import OwnerScope
from ordering.draft.draft import Draft
from ordering.wishlist.entry import WishlistEntry


class DraftStore(ABC):
    """Keyed draft records for one kind of owner scope."""

    @abstractmethod
    def list(self, scope: OwnerScope) -> list[Draft]:
        """Every draft in the scope, in no particular order."""
        ...

    @abstractmethod
    def get(self, scope: OwnerScope, draft_id: str) -> Draft:
        """Return the draft or raise ``DraftNotFound``."""
        ...

    @abstractmethod
    def put(self, scope: OwnerScope, draft: Draft) -> None:
        """Create or replace the draft with the same id."""
        ...

    @abstractmethod
    def delete(self, scope: OwnerScope, draft_id: str) -> None:
        """Remove the draft; absent ids are ignored."""
        ...


class WishlistStore(ABC):
    """Liked design ids for one kind of owner scope."""

    @abstractmethod
    def list(self, scope: OwnerScope) -> list[WishlistEntry]: ...

    @abstractmethod
    def contains(self, scope: OwnerScope, design_id: str) -> bool: ...

    @abstractmethod
    def add(self, scope: OwnerScope, design_id: str, saved_at: datetime | None = None) -> None:
        """Add the design; adding an existing one keeps the original entry."""
        ...

    @abstractmethod
    def remove(self, scope: OwnerScope, design_id: str) -> None: ...
