"""Catalog access: repository interface, SQLite implementation and lookup caches."""

from .base import BaseDatabase
from .cache import LookupCache, LookupCaches, normalize_key
from .catalog import CatalogDatabase, configure_connection, create_schema
from .manager import DatabaseManager, create_catalog, initialize_catalog
from .query import QueryBuilder
from .repository import EntityRepository

__all__ = [
    "BaseDatabase",
    "CatalogDatabase",
    "DatabaseManager",
    "EntityRepository",
    "LookupCache",
    "LookupCaches",
    "QueryBuilder",
    "configure_connection",
    "create_catalog",
    "create_schema",
    "initialize_catalog",
    "normalize_key",
]
