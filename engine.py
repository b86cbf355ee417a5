"""Wires the search engine components from an EngineConfig."""

from dataclasses import dataclass
from typing import Optional
import logging
import os

from analytics.auto_discovery import SynonymAutoDiscovery
from analytics.search_analytics import SearchAnalytics
from config.engine_config import EngineConfig
from search.cache import LRUCache, TTLCache
from search.category_booster import CategoryRelevanceBooster
from search.fuzzy_matcher import FuzzyMatcher
from search.search_service import SearchService
from search.synonym_admin import SynonymAdmin
from search.synonym_index import SynonymIndex
from storage.sqlite_backend import SqliteCatalogStore
from storage.synonym_store import SqliteSynonymStore

logger = logging.getLogger(__name__)


@dataclass
class SearchEngine:
    """The assembled components sharing one SQLite database."""
    config: EngineConfig
    catalog_store: SqliteCatalogStore
    synonym_store: SqliteSynonymStore
    synonym_index: SynonymIndex
    fuzzy_matcher: FuzzyMatcher
    booster: CategoryRelevanceBooster
    analytics: SearchAnalytics
    search_service: SearchService
    synonym_admin: SynonymAdmin

    def discovery(self) -> SynonymAutoDiscovery:
        return SynonymAutoDiscovery(
            self.analytics.analytics_storage,
            self.synonym_store,
            fuzzy_matcher=self.fuzzy_matcher,
            synonym_index=self.synonym_index
        )

    def close(self) -> None:
        self.analytics.shutdown()
        self.catalog_store.close()


def build_engine(config: Optional[EngineConfig] = None,
                 background_analytics: bool = False) -> SearchEngine:
    """
    Build a SearchEngine.

    Args:
        config: Engine configuration, defaults if omitted
        background_analytics: Deliver analytics through a background collector
            thread instead of writing inline

    Returns:
        SearchEngine ready to serve searches
    """
    config = config or EngineConfig()
    db_dir = os.path.dirname(os.path.abspath(config.db_path))
    os.makedirs(db_dir, exist_ok=True)

    catalog_store = SqliteCatalogStore(config.db_path)
    synonym_store = SqliteSynonymStore(catalog_store.connection_pool)
    synonym_index = SynonymIndex(synonym_store, cache=TTLCache(config.synonym_cache_ttl_seconds))
    fuzzy_matcher = FuzzyMatcher(cache=LRUCache(config.fuzzy_cache_size))
    booster = CategoryRelevanceBooster(catalog_store, cache=TTLCache(config.category_cache_ttl_seconds))
    analytics = SearchAnalytics.create(
        config.db_path,
        enabled=config.search_logging_enabled,
        background=background_analytics,
        batch_size=config.analytics_batch_size,
        flush_interval=config.analytics_flush_interval
    )

    search_service = SearchService(
        catalog_store,
        synonym_index,
        booster=booster,
        fuzzy_matcher=fuzzy_matcher,
        analytics=analytics,
        config=config.search_config(),
        locale=config.locale
    )

    logger.debug(f"Search engine built on {config.db_path} (locale={config.locale})")
    return SearchEngine(
        config=config,
        catalog_store=catalog_store,
        synonym_store=synonym_store,
        synonym_index=synonym_index,
        fuzzy_matcher=fuzzy_matcher,
        booster=booster,
        analytics=analytics,
        search_service=search_service,
        synonym_admin=SynonymAdmin(synonym_store, synonym_index, fuzzy_matcher)
    )
