"""Catalog factory.

Provides get_catalog() / set_catalog() to swap implementations. The
in-memory adapter, loaded with the storefront seed, is the default.
"""

from catalogue.fake_adapter import InMemoryCatalog
from catalogue.port import Catalog, CatalogEntryNotFound

_current_catalog: Catalog | None = None


def get_catalog() -> Catalog:
    """Return the current catalog. Defaults to a seeded InMemoryCatalog."""
    global _current_catalog
    if _current_catalog is None:
        _current_catalog = InMemoryCatalog.seeded()
    return _current_catalog


def set_catalog(catalog: Catalog) -> None:
    """Override the active catalog (useful for tests)."""
    global _current_catalog
    _current_catalog = catalog


def reset_catalog() -> None:
    global _current_catalog
    _current_catalog = None


__all__ = ["Catalog", "CatalogEntryNotFound", "InMemoryCatalog", "get_catalog", "reset_catalog", "set_catalog"]
