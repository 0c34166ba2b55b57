"""Runtime settings for the ordering context, read from the environment."""

import os
from dataclasses import dataclass
from decimal import Decimal

DEFAULT_QUOTA_BYTES = 5 * 1024 * 1024  # browsers grant roughly 5 MiB of localStorage


@dataclass(frozen=True)
class Settings:
    stitching_flat_fee: Decimal = Decimal("1500")
    device_storage_dir: str | None = None
    device_storage_quota_bytes: int = DEFAULT_QUOTA_BYTES
    catalog_adapter: str = "fake"
    payment_gateway: str = "fake"
    currency: str = "INR"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            stitching_flat_fee=Decimal(os.environ.get("STITCHING_FLAT_FEE", "1500")),
            device_storage_dir=os.environ.get("DEVICE_STORAGE_DIR") or None,
            device_storage_quota_bytes=int(os.environ.get("DEVICE_STORAGE_QUOTA_BYTES", DEFAULT_QUOTA_BYTES)),
            catalog_adapter=os.environ.get("CATALOG_ADAPTER", "fake"),
            payment_gateway=os.environ.get("PAYMENT_GATEWAY", "fake"),
        )


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the process-wide settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def set_settings(settings: Settings) -> None:
    """Override the active settings (useful for tests)."""
    global _settings
    _settings = settings


def reset_settings() -> None:
    global _settings
    _settings = None
