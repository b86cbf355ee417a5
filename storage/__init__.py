"""Storage module for the furniture search engine.

This module provides the catalog and synonym store interfaces and their
SQLite implementations.
"""

from .backend import CatalogStore, SynonymStore
from .models import (
    SynonymEntry,
    CategoryRecord,
    TagRecord,
    CatalogItem,
    PageRequest
)
from .connection_pool import ConnectionPool, query_deadline
from .migrations import SchemaMigrator
from .sqlite_backend import SqliteCatalogStore
from .synonym_store import SqliteSynonymStore
from .seed_synonyms import DEFAULT_SYNONYMS, seed_synonyms

__all__ = [
    # Store interfaces
    'CatalogStore',
    'SynonymStore',

    # Data models
    'SynonymEntry',
    'CategoryRecord',
    'TagRecord',
    'CatalogItem',
    'PageRequest',

    # Implementations
    'SqliteCatalogStore',
    'SqliteSynonymStore',

    # Utilities
    'ConnectionPool',
    'query_deadline',
    'SchemaMigrator',
    'DEFAULT_SYNONYMS',
    'seed_synonyms'
]
