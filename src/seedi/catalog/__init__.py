"""
SEEDi Catalog Layer

Catalog sources, the read-only catalog store, context filtering,
ranking and the knowledge base query surface.
"""

from seedi.catalog.filters import filter_by_context, matches_region, role_rationale
from seedi.catalog.ranking import rank
from seedi.catalog.source import (
    BundledCatalogSource,
    CatalogSource,
    JsonFileCatalogSource,
    RemoteCatalogSource,
    source_from_settings,
)
from seedi.catalog.store import CatalogStore

__all__ = [
    "CatalogStore",
    "CatalogSource",
    "BundledCatalogSource",
    "JsonFileCatalogSource",
    "RemoteCatalogSource",
    "source_from_settings",
    "filter_by_context",
    "matches_region",
    "role_rationale",
    "rank",
]
