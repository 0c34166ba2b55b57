from decimal import Decimal

import pytest
from catalogue import reset_catalog, set_catalog
from catalogue.fake_adapter import InMemoryCatalog
from identity.actor import OwnerScope
from ordering.checkout.gateway import reset_gateway
from ordering.checkout.gateway.fake_adapter import FakeGateway
from ordering.session import ShopperSession, reset_registry
from ordering.settings import Settings, reset_settings, set_settings
from ordering.stores.device_storage import DeviceStorage
from ordering.stores.fake_adapter import FlakyRemoteDraftStore, FlakyRemoteWishlistStore
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def ordering_bed():
    from ordering.domain import ordering

    bed = DomainFixture(ordering)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(ordering_bed):
    with ordering_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()


@pytest.fixture(autouse=True)
def _adapters():
    set_settings(Settings())
    yield
    reset_settings()
    reset_catalog()
    reset_gateway()
    reset_registry()


@pytest.fixture()
def catalog():
    """Small catalog with the prices used by the pricing scenarios."""
    catalog = InMemoryCatalog()
    catalog.add_design("rose-vine", "Rose Vine", base_price=1200, category="Floral")
    catalog.add_design("peacock", "Peacock", base_price=9000, complexity="Medium", category="Bridal")
    catalog.add_design("buttas", "Buttas", base_price=3000, complexity="Heavy", category="Minimal")
    catalog.set_complexity_price("Medium", 2500)
    catalog.add_fabric("silk", "Silk", 450)
    catalog.add_fabric("cotton", "Cotton", 500)
    catalog.add_color("ivory", "Ivory", "#FFFFF0")
    catalog.add_color("red", "Red", "#8B0000")
    catalog.add_garment("kurta", "Kurta", base_stitching_price=800, default_fabric_consumption="3")
    catalog.add_size("M", "M", 0)
    catalog.add_size("XL", "XL", 50)
    set_catalog(catalog)
    return catalog


@pytest.fixture()
def cloth_selections():
    return {"fabric_id": "silk", "color_id": "ivory", "length_m": Decimal("2.5")}


@pytest.fixture()
def stitched_selections():
    return {"fabric_id": "cotton", "color_id": "red", "garment_id": "kurta", "standard_size_id": "M"}


@pytest.fixture()
def make_session(catalog):
    def _make(device_id="device-1", storage=None):
        return ShopperSession(
            device_id,
            settings=Settings(),
            catalog=catalog,
            storage=storage or DeviceStorage(device_id),
            remote_drafts=FlakyRemoteDraftStore(),
            remote_wishlist=FlakyRemoteWishlistStore(),
            gateway=FakeGateway(),
        )

    return _make


@pytest.fixture()
def session(make_session):
    return make_session()


@pytest.fixture()
def guest_scope():
    return OwnerScope.anonymous("device-1")


@pytest.fixture()
def user_scope():
    return OwnerScope.user("user-1")
