"""Search module for synonym-aware query expansion and catalog search services."""

from .stemmer import stem, IRREGULAR_PLURALS
from .cache import TTLCache, LRUCache
from .exceptions import (
    SearchError,
    SearchUnavailableError,
    QueryTimeoutError,
    SynonymValidationError,
    DuplicateSynonymError
)
from .fuzzy_matcher import FuzzyMatcher, FuzzyMatch, levenshtein_distance, soundex
from .language import LanguageSupport, Translation, remove_accents, LANG_EN, LANG_FR
from .query_utils import (
    escape_special_chars,
    escape_like,
    like_pattern,
    normalize_whitespace,
    strip_fulltext_operators
)
from .query_builder import FTS5QueryBuilder
from .models import ExpandedQuery, Pagination, SearchEvent, SearchResponse
from .synonym_index import SynonymIndex, SynonymSnapshot, Expansion
from .query_expander import QueryExpander
from .category_booster import CategoryRelevanceBooster
from .search_service import (
    SearchService,
    SearchServiceInterface,
    SearchConfig
)
from .synonym_admin import SynonymAdmin

__all__ = [
    # Stemming
    'stem',
    'IRREGULAR_PLURALS',

    # Caches
    'TTLCache',
    'LRUCache',

    # Exceptions
    'SearchError',
    'SearchUnavailableError',
    'QueryTimeoutError',
    'SynonymValidationError',
    'DuplicateSynonymError',

    # Fuzzy matching
    'FuzzyMatcher',
    'FuzzyMatch',
    'levenshtein_distance',
    'soundex',

    # Language
    'LanguageSupport',
    'Translation',
    'remove_accents',
    'LANG_EN',
    'LANG_FR',

    # Query Utils
    'escape_special_chars',
    'escape_like',
    'like_pattern',
    'normalize_whitespace',
    'strip_fulltext_operators',

    # Query Builder
    'FTS5QueryBuilder',

    # Models
    'ExpandedQuery',
    'Pagination',
    'SearchEvent',
    'SearchResponse',

    # Expansion
    'SynonymIndex',
    'SynonymSnapshot',
    'Expansion',
    'QueryExpander',
    'CategoryRelevanceBooster',

    # Search Service
    'SearchService',
    'SearchServiceInterface',
    'SearchConfig',

    # Administration
    'SynonymAdmin'
]
