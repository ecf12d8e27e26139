"""Catalogue access.

Provides get_catalog() / set_catalog() to swap the active index:
- the JSON catalogue configured for the domain, loaded on first use
- any CatalogIndex installed by tests or an admin reload
"""

from storefront.catalogue.index import CatalogIndex

_current_catalog: CatalogIndex | None = None


def get_catalog() -> CatalogIndex:
    """Return the active catalogue, loading the configured JSON file on first use."""
    global _current_catalog
    if _current_catalog is None:
        from storefront.settings import catalogue_path

        _current_catalog = CatalogIndex.from_json_file(catalogue_path())
    return _current_catalog


def set_catalog(catalog: CatalogIndex) -> None:
    """Replace the active catalogue (useful for tests and reloads)."""
    global _current_catalog
    _current_catalog = catalog


def reset_catalog() -> None:
    """Drop the active catalogue so the next access reloads the JSON file."""
    global _current_catalog
    _current_catalog = None
