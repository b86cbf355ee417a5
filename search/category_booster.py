"""Category-aware re-ranking and category suggestions."""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence
import logging
import re

from storage.models import CatalogItem
from .cache import TTLCache
from .stemmer import stem

logger = logging.getLogger(__name__)

ACTIVE_CATEGORY_BOOST = 1.5
RELATED_CATEGORY_BOOST = 1.2
SUGGESTION_THRESHOLD = 3.0

RELATED_CATEGORIES: Dict[str, tuple] = {
    'seating': ('living room', 'office', 'outdoor'),
    'tables': ('dining', 'office', 'living room'),
    'beds': ('bedroom', 'guest room'),
    'storage': ('bedroom', 'office', 'garage'),
    'lighting': ('living room', 'bedroom', 'office'),
    'kitchen': ('appliances', 'dining'),
    'bathroom': ('fixtures', 'storage'),
    'office': ('storage', 'seating', 'electronics'),
    'outdoor': ('garden', 'patio'),
}

# Keyword weight tiers
NAME_WORD_WEIGHT = 6.0
SLUG_WORD_WEIGHT = 5.0
DERIVED_SINGULAR_WEIGHT = 4.5
TAG_NAME_WEIGHT = 4.5
TAG_WORD_WEIGHT = 4.0
TAG_SLUG_WORD_WEIGHT = 3.0

NAME_STOP_WORDS = frozenset({'and', 'the', 'a', 'an', 'of', 'for', 'with', '&'})
TAG_STOP_WORDS = frozenset({
    'type', 'style', 'purpose', 'the', 'a', 'an', 'and', 'or', 'with',
    'for', 'of', 'in', 'on', 'at', 'to', 'from',
})
TAG_SLUG_PREFIXES = (
    'elec', 'comm', 'ent', 'ind', 'med', 'gov', 'illegal', 'veh', 'pet', 'food',
    'beverage', 'serving', 'toy', 'childrens', 'furniture', 'effect', 'prop',
    'accessory', 'clothing', 'bag', 'seating', 'table', 'bed', 'storage', 'light',
    'decor', 'textile', 'element', 'outdoor',
)

_SLUG_SPLIT = re.compile(r'[\s\-&]+')
_TAG_NAME_SPLIT = re.compile(r'[\s\-&()]+')
_TAG_SLUG_SPLIT = re.compile(r'[\s\-]+')
_PARENTHETICAL = re.compile(r'\s*\([^)]*\)\s*')


@dataclass
class Keyword:
    weight: float
    stem: str


KeywordTable = Dict[str, Dict[str, Keyword]]


def _normalize_category(value: str) -> str:
    return value.strip().lower().replace('-', ' ')


class CategoryRelevanceBooster:
    """Boosts results in (or near) the active category and suggests categories.

    The keyword table is derived from category names, slugs and the tags
    attached to each category through tag groups. It is cached and must be
    invalidated when categories or tags change.
    """

    def __init__(self, catalog_store=None, cache: Optional[TTLCache] = None):
        self.catalog_store = catalog_store
        self.cache = cache if cache is not None else TTLCache(ttl_seconds=300)

    def enhance_results(self, items: List[CatalogItem],
                        active_category: Optional[str]) -> List[CatalogItem]:
        """
        Re-sort items by category affinity.

        An item in the active category gets 1.5, an item only in a related
        category gets 1.2, anything else 1.0. Multipliers are never combined.
        Ties are broken by case-insensitive name.

        Args:
            items: Retrieved items, each carrying its categories
            active_category: Slug of the category the user is browsing

        Returns:
            New list, re-sorted, with boosts reset
        """
        if not active_category or not items:
            return items

        active = _normalize_category(active_category)
        related = RELATED_CATEGORIES.get(active, ())

        for item in items:
            item.relevance_boost = 1.0
            for slug in item.category_slugs():
                slug = _normalize_category(slug)
                if slug == active:
                    item.relevance_boost = ACTIVE_CATEGORY_BOOST
                    break
                if slug in related:
                    item.relevance_boost = max(item.relevance_boost, RELATED_CATEGORY_BOOST)

        ranked = sorted(items, key=lambda i: (-i.relevance_boost, (i.name or '').lower()))
        for item in ranked:
            item.relevance_boost = 1.0
        return ranked

    def keyword_table(self) -> KeywordTable:
        """Cached category keyword table; empty if the catalog is unavailable."""
        if self.catalog_store is None:
            return {}
        try:
            return self.cache.get('category_keywords', self._build_keyword_table)
        except Exception as e:
            logger.warning(f"Failed to build category keywords: {e}")
            return {}

    def invalidate(self) -> None:
        self.cache.invalidate()

    def _build_keyword_table(self) -> KeywordTable:
        table: KeywordTable = {}
        categories = self.catalog_store.list_categories()

        for category in categories:
            slug = category.slug.strip().lower()
            keywords = build_category_keywords(category.name, slug)

            try:
                tags = self.catalog_store.list_category_tags(category.id)
            except Exception as e:
                logger.warning(f"Could not load tags for category {slug}: {e}")
                tags = []

            for tag in tags:
                add_tag_keywords(keywords, tag.name, tag.slug)

            if keywords:
                table[slug] = keywords

        logger.debug(f"Built category keyword table for {len(table)} categories")
        return table

    def suggest_category(self, query: str) -> Optional[str]:
        """Best matching category slug for a query, if it scores at least 3.0."""
        table = self.keyword_table()
        if not table:
            return None
        return score_categories(query, table)


def build_category_keywords(name: str, slug: str) -> Dict[str, Keyword]:
    """Keywords contributed by a category's own slug and name."""
    keywords: Dict[str, Keyword] = {}
    slug = slug.strip().lower()
    slug_words = [w for w in _SLUG_SPLIT.split(slug) if w]

    for word in slug_words:
        if len(word) >= 2:
            keywords[word] = Keyword(SLUG_WORD_WEIGHT, stem(word))

    for word in _SLUG_SPLIT.split(name.strip().lower()):
        if len(word) >= 2 and word not in NAME_STOP_WORDS:
            keywords[word] = Keyword(NAME_WORD_WEIGHT, stem(word))

    # "tables-desks" also matches "table" and "desk"
    if '-' in slug or '&' in slug:
        for word in slug_words:
            if len(word) > 3:
                singular = stem(word)
                if singular != word and singular not in keywords:
                    keywords[singular] = Keyword(DERIVED_SINGULAR_WEIGHT, singular)

    return keywords


def add_tag_keywords(keywords: Dict[str, Keyword], tag_name: str, tag_slug: str) -> None:
    """Merge one tag's name and slug words into a category's keywords."""
    tag_name = tag_name.strip().lower()
    tag_slug = (tag_slug or '').strip().lower()

    clean_name = _PARENTHETICAL.sub('', tag_name)
    if len(clean_name) >= 2:
        keywords[clean_name] = Keyword(TAG_NAME_WEIGHT, stem(clean_name))

    for word in _TAG_NAME_SPLIT.split(tag_name):
        if len(word) >= 2 and word not in TAG_STOP_WORDS:
            if word not in keywords or keywords[word].weight < TAG_WORD_WEIGHT:
                keywords[word] = Keyword(TAG_WORD_WEIGHT, stem(word))

    for prefix in TAG_SLUG_PREFIXES:
        if tag_slug.startswith(prefix + '-'):
            tag_slug = tag_slug[len(prefix) + 1:]
            break

    for word in _TAG_SLUG_SPLIT.split(tag_slug):
        if len(word) >= 2 and word not in TAG_STOP_WORDS and word not in TAG_SLUG_PREFIXES:
            if word not in keywords or keywords[word].weight < TAG_SLUG_WORD_WEIGHT:
                keywords[word] = Keyword(TAG_SLUG_WORD_WEIGHT, stem(word))


def score_categories(query: str, table: KeywordTable) -> Optional[str]:
    """Score every category against a query and return the winner above threshold."""
    query = query.strip().lower()
    words = query.split()
    word_stems = [(w, stem(w)) for w in words]

    best_slug = None
    best_score = 0.0

    for slug, keywords in table.items():
        score = 0.0

        for keyword, data in keywords.items():
            if query == keyword:
                score += data.weight * 10
            elif len(query) >= 3 and len(keyword) >= 3 and (keyword in query or query in keyword):
                score += data.weight * 6

        for word, word_stem in word_stems:
            for keyword, data in keywords.items():
                if word == keyword:
                    score += data.weight * 5
                elif word_stem == data.stem:
                    score += data.weight * 3
                elif len(word) >= 3 and len(keyword) >= 3 and (keyword in word or word in keyword):
                    score += data.weight * 1.5

        # Strictly greater keeps the earlier category (sort order) on ties
        if score > best_score:
            best_slug, best_score = slug, score

    if best_slug is not None and best_score >= SUGGESTION_THRESHOLD:
        return best_slug
    return None
