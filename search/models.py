"""Models for the search service."""

from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional
import math

from storage.models import CatalogItem


@dataclass
class ExpandedQuery:
    """A query after tokenization, synonym expansion and translation.

    ``weighted_terms`` preserves insertion order: the user's own words and
    phrase come first, expansions after. Its length never exceeds
    ``capped_at``.
    """
    original: str
    original_terms: List[str]
    weighted_terms: Dict[str, float]
    language: str = 'en'
    translated_query: Optional[str] = None
    capped_at: int = 20
    fuzzy_alternatives: List[str] = field(default_factory=list)

    @property
    def terms(self) -> List[str]:
        return list(self.weighted_terms)

    @property
    def is_translated(self) -> bool:
        return self.translated_query is not None

    def weight(self, term: str) -> float:
        return self.weighted_terms.get(term, 0.0)

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'original': self.original,
            'terms': self.terms,
            'weights': dict(self.weighted_terms),
        }
        if self.translated_query is not None:
            result['language'] = self.language
            result['translated'] = self.translated_query
        return result


@dataclass
class Pagination:
    """Pagination block of a search response."""
    page: int
    per_page: int
    total: int

    @property
    def total_pages(self) -> int:
        return max(1, math.ceil(self.total / self.per_page)) if self.per_page else 1

    def to_dict(self) -> Dict[str, int]:
        return {
            'page': self.page,
            'per_page': self.per_page,
            'total': self.total,
            'total_pages': self.total_pages
        }


@dataclass
class SearchEvent:
    """Outcome of one search, emitted for analytics delivery."""
    query: str
    query_normalized: str
    results_count: int
    expanded_terms: List[str]
    execution_time_ms: int
    synonyms_used: List[str] = field(default_factory=list)
    user_id: Optional[int] = None
    session_id: Optional[str] = None
    ip_address: Optional[str] = None


@dataclass
class SearchResponse:
    """Result of SearchService.search.

    ``search_meta`` is None when no expansion, translation or suggestion
    happened.
    """
    items: List[CatalogItem]
    pagination: Pagination
    search_meta: Optional[Dict[str, Any]] = None
    event: Optional[SearchEvent] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the response shape consumed by API callers."""
        result: Dict[str, Any] = {
            'items': [item.to_dict() for item in self.items],
            'pagination': self.pagination.to_dict()
        }
        if self.search_meta:
            result['search_meta'] = dict(self.search_meta)
        return result
