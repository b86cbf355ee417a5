"""Abstract store interfaces consumed by the search engine."""

from abc import ABC, abstractmethod
from typing import List, Dict, Any, Optional, Sequence, Tuple
from .models import CatalogItem, CategoryRecord, PageRequest, SynonymEntry, TagRecord


class CatalogStore(ABC):
    """Read-side interface to the furniture catalog.

    Retrieval methods raise ``SearchUnavailableError`` on execution failure.
    Probe methods never raise.
    """

    @abstractmethod
    def has_fulltext_index(self) -> bool:
        """Whether relevance-ranked full-text matching is available."""
        pass

    @abstractmethod
    def find_by_fulltext(self, terms: Sequence[str], original: str, page: PageRequest,
                         favorites_user_id: Optional[int] = None,
                         timeout_ms: Optional[int] = None) -> Tuple[List[CatalogItem], int]:
        """Full-text retrieval with per-term OR combination.

        Args:
            terms: Expanded search terms
            original: The normalized user query, used for exact-name ranking
            page: Pagination window
            favorites_user_id: Restrict to this user's favorites
            timeout_ms: Deadline for the store query

        Returns:
            Tuple of (items for the page, total match count)
        """
        pass

    @abstractmethod
    def find_by_substring(self, terms: Sequence[str], original: str, page: PageRequest,
                          favorites_user_id: Optional[int] = None,
                          timeout_ms: Optional[int] = None) -> Tuple[List[CatalogItem], int]:
        """Substring retrieval across item name, category and tag names."""
        pass

    def attach_categories(self, items: List[CatalogItem]) -> None:
        """Hydrate ``item.categories``. Stores without categories skip it."""
        return None

    def attach_tags(self, items: List[CatalogItem]) -> None:
        """Hydrate ``item.tags``. Stores without tags skip it."""
        return None

    @abstractmethod
    def list_categories(self) -> List[CategoryRecord]:
        """All categories in display order."""
        pass

    @abstractmethod
    def list_category_tags(self, category_id: int) -> List[TagRecord]:
        """Tags reachable from a category through its tag groups."""
        pass


class SynonymStore(ABC):
    """Persistence for synonym entries."""

    @abstractmethod
    def list_active_synonyms(self, locale: str = 'en') -> List[SynonymEntry]:
        """Active entries visible under a locale, strongest weight first."""
        pass

    @abstractmethod
    def increment_usage(self, synonym: str) -> None:
        """Bump usage counters for an active synonym term."""
        pass

    @abstractmethod
    def upsert_synonym(self, entry: SynonymEntry) -> int:
        """Insert an entry, or update the existing canonical/synonym pair. Returns its id."""
        pass

    @abstractmethod
    def insert_if_absent(self, entry: SynonymEntry) -> Optional[int]:
        """Insert an entry unless the pair or synonym already exists. Returns the new id or None."""
        pass

    @abstractmethod
    def update_synonym(self, synonym_id: int, fields: Dict[str, Any]) -> bool:
        """Update selected fields. Returns False if no such entry."""
        pass

    @abstractmethod
    def delete_synonym(self, synonym_id: int) -> bool:
        """Hard-delete an entry. Returns False if no such entry."""
        pass

    @abstractmethod
    def get_synonym(self, synonym_id: int) -> Optional[SynonymEntry]:
        pass

    @abstractmethod
    def list_synonyms(self, page: PageRequest,
                      search: Optional[str] = None) -> Tuple[List[SynonymEntry], int]:
        """Paginated listing for administration, optionally filtered by substring."""
        pass
