"""Per-device composition root.

A ``ShopperSession`` wires the identity resolver, stores, reconciler,
wishlist, guest migration and checkout for one device. The registry keeps
one session per device id so state survives between API requests.
"""

import threading

import structlog

from catalogue import get_catalog
from catalogue.port import Catalog
from identity.resolver import IdentityResolver
from ordering.checkout.checkout import Checkout
from ordering.checkout.gateway.port import PaymentGateway
from ordering.migration.guest import GuestMigration
from ordering.migration.marker import MigrationLedger
from ordering.reconciler.reconciler import DraftReconciler
from ordering.settings import Settings, get_settings
from ordering.stores.device_storage import DeviceStorage
from ordering.stores.local_adapter import LocalDraftStore, LocalWishlistStore
from ordering.stores.port import DraftStore, WishlistStore
from ordering.stores.remote_adapter import RemoteDraftStore, RemoteWishlistStore
from ordering.wishlist.mirror import WishlistMirror

logger = structlog.get_logger(__name__)


def catalog_for(settings: Settings) -> Catalog:
    if settings.catalog_adapter != "fake":
        raise ValueError(f"Unknown catalog adapter {settings.catalog_adapter!r}")
    return get_catalog()


class ShopperSession:
    def __init__(
        self,
        device_id: str,
        settings: Settings | None = None,
        catalog: Catalog | None = None,
        storage: DeviceStorage | None = None,
        remote_drafts: DraftStore | None = None,
        remote_wishlist: WishlistStore | None = None,
        gateway: PaymentGateway | None = None,
    ) -> None:
        settings = settings or get_settings()
        self.device_id = str(device_id)
        self.catalog = catalog or catalog_for(settings)
        self.storage = storage or DeviceStorage(
            self.device_id,
            directory=settings.device_storage_dir,
            quota_bytes=settings.device_storage_quota_bytes,
        )
        self.ledger = MigrationLedger()
        self.resolver = IdentityResolver(self.device_id, self.ledger)
        self.reconciler = DraftReconciler(
            self.resolver,
            LocalDraftStore(self.storage),
            remote_drafts or RemoteDraftStore(),
            self.catalog,
            self.ledger,
            stitching_fee=settings.stitching_flat_fee,
        )
        self.wishlist = WishlistMirror(
            self.resolver,
            LocalWishlistStore(self.storage),
            remote_wishlist or RemoteWishlistStore(),
            self.catalog,
            self.ledger,
        )
        self.migration = GuestMigration(self.resolver, self.reconciler, self.wishlist)
        self.checkout = Checkout(self.resolver, self.reconciler, gateway, settings.currency)

    @property
    def actor(self):
        return self.resolver.current

    def sign_in(self, user_id: str):
        return self.resolver.sign_in(user_id)

    def restore(self, user_id: str):
        return self.resolver.restore(user_id)

    def sign_out(self):
        return self.resolver.sign_out()


class SessionRegistry:
    def __init__(self, factory=ShopperSession) -> None:
        self._factory = factory
        self._sessions: dict[str, ShopperSession] = {}
        self._lock = threading.Lock()

    def get(self, device_id: str) -> ShopperSession:
        with self._lock:
            session = self._sessions.get(device_id)
            if session is None:
                session = self._factory(device_id)
                self._sessions[device_id] = session
                logger.debug("Opened shopper session", device_id=device_id)
            return session

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()


_registry: SessionRegistry | None = None


def get_registry() -> SessionRegistry:
    global _registry
    if _registry is None:
        _registry = SessionRegistry()
    return _registry


def set_registry(registry: SessionRegistry) -> None:
    global _registry
    _registry = registry


def reset_registry() -> None:
    global _registry
    _registry = None
