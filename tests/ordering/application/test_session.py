from decimal import Decimal

import pytest
from ordering.session import SessionRegistry, ShopperSession, catalog_for, get_registry, reset_registry
from ordering.settings import Settings, get_settings, reset_settings


class TestSettings:
    def test_defaults(self):
        settings = Settings()

        assert settings.stitching_flat_fee == Decimal("1500")
        assert settings.currency == "INR"

    def test_environment_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("STITCHING_FLAT_FEE", "1750")
        monkeypatch.setenv("DEVICE_STORAGE_DIR", str(tmp_path))
        monkeypatch.setenv("DEVICE_STORAGE_QUOTA_BYTES", "1024")
        reset_settings()

        settings = get_settings()

        assert settings.stitching_flat_fee == Decimal("1750")
        assert settings.device_storage_dir == str(tmp_path)
        assert settings.device_storage_quota_bytes == 1024

    def test_unknown_catalog_adapter(self):
        with pytest.raises(ValueError):
            catalog_for(Settings(catalog_adapter="warehouse"))


class TestShopperSession:
    def test_stitching_fee_follows_settings(self, catalog, stitched_selections):
        session = ShopperSession("device-1", settings=Settings(stitching_flat_fee=Decimal("2000")), catalog=catalog)

        session.reconciler.add_draft("EmbroideryStitching", "rose-vine", stitched_selections)

        [priced] = session.reconciler.list_drafts()
        assert priced.unit_price.rupees == Decimal("5500")

    def test_guest_bag_survives_a_new_session_with_file_storage(self, catalog, cloth_selections, tmp_path):
        settings = Settings(device_storage_dir=str(tmp_path))
        ShopperSession("device-1", settings=settings, catalog=catalog).reconciler.add_draft(
            "ClothOnly", "rose-vine", cloth_selections
        )

        reopened = ShopperSession("device-1", settings=settings, catalog=catalog)

        assert reopened.reconciler.bag_count == 1


class TestSessionRegistry:
    def test_one_session_per_device(self, catalog):
        registry = SessionRegistry()

        assert registry.get("device-1") is registry.get("device-1")
        assert registry.get("device-1") is not registry.get("device-2")

    def test_clear(self, catalog):
        registry = SessionRegistry()
        first = registry.get("device-1")
        registry.clear()

        assert registry.get("device-1") is not first

    def test_module_registry_is_reset(self):
        registry = get_registry()
        reset_registry()

        assert get_registry() is not registry
