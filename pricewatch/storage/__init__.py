"""
Storage Module
"""
from .cache import CatalogCache
from .catalog_store import CatalogStore, atomic_write_json, parse_catalog
from .manual_store import ManualStore

__all__ = [
    "CatalogCache",
    "CatalogStore",
    "atomic_write_json",
    "parse_catalog",
    "ManualStore",
]
