"""Catalog search with synonym expansion, translation and zero-result hints."""

from abc import ABC, abstractmethod
from typing import List, Dict, Any, Optional
from dataclasses import dataclass
import logging
import time

from storage.models import CatalogItem, PageRequest
from .category_booster import CategoryRelevanceBooster
from .fuzzy_matcher import FuzzyMatcher, MIN_FUZZY_LENGTH
from .language import LANG_EN
from .models import ExpandedQuery, Pagination, SearchEvent, SearchResponse
from .query_expander import QueryExpander
from .query_utils import normalize_whitespace, strip_punctuation
from .synonym_index import SynonymIndex

logger = logging.getLogger(__name__)

SEARCH_TYPE_FULLTEXT = 'fulltext'
SEARCH_TYPE_LIKE = 'like'
MAX_REPORTED_SYNONYMS = 5


@dataclass
class SearchConfig:
    """Configuration for search behavior."""
    expand_synonyms: bool = True
    use_translation: bool = True
    log_search: bool = True
    enable_suggestions: bool = True
    min_query_length: int = 2
    max_terms: int = 20
    default_per_page: int = 50
    max_per_page: int = 100
    query_timeout_ms: int = 5000


class SearchServiceInterface(ABC):
    """Interface for search services."""

    @abstractmethod
    def search(
        self,
        query: str,
        page: int = 1,
        per_page: Optional[int] = None,
        favorites_user_id: Optional[int] = None,
        category_filter: Optional[str] = None,
        **kwargs
    ) -> SearchResponse:
        """
        Execute a catalog search.

        Args:
            query: The search query
            page: 1-based page number
            per_page: Page size, clamped to the configured maximum
            favorites_user_id: Restrict results to this user's favorites
            category_filter: Slug of the category being browsed

        Returns:
            SearchResponse with items, pagination and optional search_meta
        """
        pass


class SearchService(SearchServiceInterface):
    """Plans and executes catalog searches.

    Retrieval uses the store's full-text index when it has one and falls
    back to substring matching otherwise; the response shape is identical.
    Store execution failures propagate as SearchUnavailableError. Analytics,
    usage counters, hydration and suggestions are best-effort.
    """

    def __init__(
        self,
        catalog_store,
        synonym_index: SynonymIndex,
        query_expander: Optional[QueryExpander] = None,
        booster: Optional[CategoryRelevanceBooster] = None,
        fuzzy_matcher: Optional[FuzzyMatcher] = None,
        analytics=None,
        config: Optional[SearchConfig] = None,
        locale: str = LANG_EN
    ):
        """
        Initialize search service.

        Args:
            catalog_store: CatalogStore used for retrieval and hydration
            synonym_index: SynonymIndex for expansion and "did you mean" vocabulary
            query_expander: Optional expander, built from the index if omitted
            booster: Optional category booster, built on the catalog store if omitted
            fuzzy_matcher: Optional fuzzy matcher instance
            analytics: Optional recorder with ``record_event(SearchEvent)``
            config: Optional default configuration
            locale: Default UI locale
        """
        self.catalog_store = catalog_store
        self.synonym_index = synonym_index
        self.fuzzy_matcher = fuzzy_matcher or FuzzyMatcher()
        self.query_expander = query_expander or QueryExpander(
            synonym_index, fuzzy_matcher=self.fuzzy_matcher
        )
        self.booster = booster or CategoryRelevanceBooster(catalog_store)
        self.analytics = analytics
        self.default_config = config or SearchConfig()
        self.locale = locale

    def search(
        self,
        query: str,
        page: int = 1,
        per_page: Optional[int] = None,
        favorites_user_id: Optional[int] = None,
        category_filter: Optional[str] = None,
        locale: Optional[str] = None,
        user_id: Optional[int] = None,
        session_id: Optional[str] = None,
        ip_address: Optional[str] = None,
        config: Optional[SearchConfig] = None
    ) -> SearchResponse:
        config = config or self.default_config
        locale = locale or self.locale
        started = time.perf_counter()

        page_request = self._page_request(page, per_page, config)
        original_query = normalize_whitespace(query.strip())

        if len(original_query) < config.min_query_length:
            return SearchResponse(
                items=[],
                pagination=Pagination(page_request.page, page_request.per_page, 0)
            )

        expanded = self._expand(original_query, config, locale, category_filter)
        terms = expanded.terms

        use_fulltext = self.catalog_store.has_fulltext_index()
        search_type = SEARCH_TYPE_FULLTEXT if use_fulltext else SEARCH_TYPE_LIKE
        logger.debug(f"Searching '{expanded.original}' with {len(terms)} terms via {search_type}")

        if use_fulltext:
            items, total = self.catalog_store.find_by_fulltext(
                terms, expanded.original, page_request,
                favorites_user_id=favorites_user_id,
                timeout_ms=config.query_timeout_ms
            )
        else:
            items, total = self.catalog_store.find_by_substring(
                terms, expanded.original, page_request,
                favorites_user_id=favorites_user_id,
                timeout_ms=config.query_timeout_ms
            )

        self._hydrate(items)

        if category_filter and items:
            items = self.booster.enhance_results(items, category_filter)

        execution_time_ms = int((time.perf_counter() - started) * 1000)

        search_meta = self._build_meta(original_query, expanded, search_type, execution_time_ms)
        if total == 0 and config.enable_suggestions:
            self._add_suggestions(search_meta, expanded, category_filter, locale)

        used_synonyms = self._used_synonyms(expanded, locale) if config.expand_synonyms else []
        event = SearchEvent(
            query=original_query,
            query_normalized=expanded.original,
            results_count=total,
            expanded_terms=terms,
            execution_time_ms=execution_time_ms,
            synonyms_used=used_synonyms,
            user_id=user_id,
            session_id=session_id,
            ip_address=ip_address
        )
        self._deliver(event, config)

        return SearchResponse(
            items=items,
            pagination=Pagination(page_request.page, page_request.per_page, total),
            search_meta=search_meta or None,
            event=event
        )

    @staticmethod
    def _page_request(page: int, per_page: Optional[int], config: SearchConfig) -> PageRequest:
        if per_page is None:
            per_page = config.default_per_page
        per_page = min(max(1, per_page), config.max_per_page)
        return PageRequest(page=max(1, page), per_page=per_page)

    def _expand(self, query: str, config: SearchConfig, locale: str,
                category_filter: Optional[str]) -> ExpandedQuery:
        if not config.expand_synonyms:
            normalized = query.lower()
            return ExpandedQuery(original=normalized, original_terms=normalized.split(),
                                 weighted_terms={normalized: 1.0}, capped_at=config.max_terms)

        return self.query_expander.expand(
            query,
            max_terms=config.max_terms,
            use_fuzzy=False,
            use_translation=config.use_translation,
            locale=locale,
            category_filter=category_filter
        )

    def _hydrate(self, items: List[CatalogItem]) -> None:
        if not items:
            return
        for hook in (self.catalog_store.attach_categories, self.catalog_store.attach_tags):
            try:
                hook(items)
            except Exception as e:
                logger.warning(f"Result hydration skipped: {e}")

    @staticmethod
    def _build_meta(original_query: str, expanded: ExpandedQuery, search_type: str,
                    execution_time_ms: int) -> Dict[str, Any]:
        meta: Dict[str, Any] = {}
        terms = expanded.terms
        query_key = original_query.lower()
        # Words the user typed are never reported as synonyms
        words = query_key.split() + [w.lower() for w in expanded.original_terms]
        typed = {query_key, *words, *map(strip_punctuation, words)}

        if expanded.is_translated:
            excluded = typed | {expanded.translated_query.lower()}
            meta['language'] = expanded.language
            meta['original_query'] = original_query
            meta['translated_query'] = expanded.translated_query
            synonyms = [t for t in terms if t.lower() not in excluded][:MAX_REPORTED_SYNONYMS]
            if synonyms:
                meta['synonyms_used'] = synonyms
            meta['search_type'] = search_type
            meta['execution_time_ms'] = execution_time_ms
        else:
            synonyms = [t for t in terms if t.lower() not in typed][:MAX_REPORTED_SYNONYMS]
            if synonyms:
                meta['original_query'] = original_query
                meta['synonyms_used'] = synonyms
                meta['search_type'] = search_type
                meta['execution_time_ms'] = execution_time_ms

        return meta

    def _add_suggestions(self, meta: Dict[str, Any], expanded: ExpandedQuery,
                         category_filter: Optional[str], locale: str) -> None:
        words = expanded.original_terms
        if len(words) == 1 and len(words[0]) >= MIN_FUZZY_LENGTH:
            try:
                vocabulary = self.synonym_index.vocabulary(locale)
                suggestion = self.fuzzy_matcher.get_suggestion(words[0], vocabulary) if vocabulary else None
                if suggestion and suggestion != words[0]:
                    meta['did_you_mean'] = {words[0]: suggestion}
            except Exception as e:
                logger.warning(f"Fuzzy suggestion failed for '{words[0]}': {e}")

        if category_filter is None:
            try:
                suggested = self.booster.suggest_category(expanded.original)
                if suggested:
                    meta['suggested_category'] = suggested
            except Exception as e:
                logger.warning(f"Category suggestion failed for '{expanded.original}': {e}")

    def _used_synonyms(self, expanded: ExpandedQuery, locale: str) -> List[str]:
        reverse = self.synonym_index.snapshot(locale).reverse
        return [term for term in expanded.terms if term in reverse]

    def _deliver(self, event: SearchEvent, config: SearchConfig) -> None:
        for synonym in event.synonyms_used:
            self.synonym_index.record_usage(synonym)

        if self.analytics is None or not config.log_search:
            return
        try:
            self.analytics.record_event(event)
        except Exception as e:
            logger.error(f"Failed to deliver search event for '{event.query}': {e}")
