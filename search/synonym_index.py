"""Bidirectional synonym index with weighted query-time expansion."""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple
import logging

from storage.models import SynonymEntry
from .cache import TTLCache
from .language import LANG_EN, LANG_FR
from .stemmer import stem

logger = logging.getLogger(__name__)

DEFAULT_FORWARD_WEIGHT = 0.9
DEFAULT_SIBLING_WEIGHT = 0.8
CANONICAL_WEIGHT = 0.95
STEM_WEIGHT = 0.85
STEM_SYNONYM_DECAY = 0.9
CATEGORY_BOOST = 1.15
MIN_EXPANSION_LENGTH = 2


def visible_languages(locale: str) -> Tuple[str, ...]:
    """Synonym languages visible under a UI locale."""
    return (LANG_EN, LANG_FR) if locale == LANG_FR else (LANG_EN,)


@dataclass
class SynonymSnapshot:
    """Immutable-by-convention view of the active synonym set.

    Invariant: ``reverse[s] == c`` implies ``s in forward[c]``.
    """
    forward: Dict[str, List[str]] = field(default_factory=dict)
    reverse: Dict[str, str] = field(default_factory=dict)
    weights: Dict[str, float] = field(default_factory=dict)
    languages: Dict[str, str] = field(default_factory=dict)
    category_hints: Dict[str, str] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.forward

    def vocabulary(self) -> List[str]:
        """Every canonical and synonym term, canonicals first."""
        words = list(self.forward)
        words.extend(s for s in self.reverse if s not in self.forward)
        return words


@dataclass
class Expansion:
    """Terms produced by expanding a single term."""
    terms: List[str]
    weights: Dict[str, float]


class _WeightedTerms:
    """Insertion-ordered term set where a collision keeps the higher weight."""

    def __init__(self):
        self.terms: List[str] = []
        self.weights: Dict[str, float] = {}

    def add(self, term: str, weight: float) -> None:
        if term in self.weights:
            if weight > self.weights[term]:
                self.weights[term] = weight
            return
        self.terms.append(term)
        self.weights[term] = weight

    def __contains__(self, term: str) -> bool:
        return term in self.weights


class SynonymIndex:
    """Synonym lookups backed by a SynonymStore.

    Snapshots are built per locale and cached in a TTLCache. Writers must
    call ``invalidate()`` after changing synonyms; readers tolerate the
    stale snapshot until then.
    """

    def __init__(self, store=None, cache: Optional[TTLCache] = None):
        """
        Initialize the index.

        Args:
            store: SynonymStore providing ``list_active_synonyms(locale)``
            cache: Optional cache shared with other index instances
        """
        self.store = store
        self.cache = cache if cache is not None else TTLCache(ttl_seconds=300)

    @staticmethod
    def load(entries: Iterable[SynonymEntry], locale: str = LANG_EN) -> SynonymSnapshot:
        """Build a snapshot from synonym entries.

        Only active entries in a language visible under ``locale`` are
        indexed. Entries should arrive strongest first; a synonym claimed
        twice keeps its first canonical.
        """
        languages = visible_languages(locale)
        snapshot = SynonymSnapshot()

        for entry in entries:
            if not entry.active or entry.language not in languages:
                continue

            canonical = entry.canonical.strip().lower()
            synonym = entry.synonym.strip().lower()
            if not canonical or not synonym or canonical == synonym:
                continue
            if synonym in snapshot.reverse:
                continue

            snapshot.forward.setdefault(canonical, []).append(synonym)
            snapshot.reverse[synonym] = canonical
            # Unset or full weights fall back to the forward/sibling defaults
            if entry.weight and entry.weight < 1.0:
                snapshot.weights[synonym] = entry.weight
            snapshot.languages[synonym] = entry.language
            if entry.category_hint:
                snapshot.category_hints[synonym] = entry.category_hint

        return snapshot

    def snapshot(self, locale: str = LANG_EN) -> SynonymSnapshot:
        """Current snapshot for a locale; empty if the store is unreachable."""
        if self.store is None:
            return SynonymSnapshot()

        try:
            return self.cache.get(('synonyms', locale), lambda: self._build(locale))
        except Exception as e:
            logger.warning(f"Synonym store unavailable, searching without expansion: {e}")
            return SynonymSnapshot()

    def _build(self, locale: str) -> SynonymSnapshot:
        entries = self.store.list_active_synonyms(locale)
        snapshot = self.load(entries, locale)
        logger.debug(f"Built synonym snapshot for locale {locale}: "
                     f"{len(snapshot.forward)} canonicals, {len(snapshot.reverse)} synonyms")
        return snapshot

    def invalidate(self) -> None:
        self.cache.invalidate()
        logger.info("Synonym index cache invalidated")

    def expand(self, term: str, locale: str = LANG_EN,
               category_filter: Optional[str] = None) -> Expansion:
        """Expand one term into weighted related terms.

        Order of discovery: the term itself, its forward synonyms, its
        canonical and siblings (when the term is a synonym), then its stem
        and the stem's synonyms.

        Args:
            term: Term to expand
            locale: UI locale gating which synonym languages are visible
            category_filter: Active category; synonyms hinted for it get a boost

        Returns:
            Expansion with ordered terms and their weights
        """
        term = term.strip().lower()
        if len(term) < MIN_EXPANSION_LENGTH:
            return Expansion(terms=[term], weights={term: 1.0})

        snapshot = self.snapshot(locale)
        result = _WeightedTerms()
        result.add(term, 1.0)

        for synonym in snapshot.forward.get(term, []):
            weight = snapshot.weights.get(synonym, DEFAULT_FORWARD_WEIGHT)
            result.add(synonym, self._boost(snapshot, synonym, weight, category_filter))

        canonical = snapshot.reverse.get(term)
        if canonical is not None:
            result.add(canonical, CANONICAL_WEIGHT)
            for sibling in snapshot.forward.get(canonical, []):
                if sibling == term:
                    continue
                weight = snapshot.weights.get(sibling, DEFAULT_SIBLING_WEIGHT)
                result.add(sibling, self._boost(snapshot, sibling, weight, category_filter))

        stemmed = stem(term)
        if stemmed != term:
            result.add(stemmed, STEM_WEIGHT)
            for synonym in snapshot.forward.get(stemmed, []):
                weight = snapshot.weights.get(synonym, DEFAULT_SIBLING_WEIGHT)
                result.add(synonym, weight * STEM_SYNONYM_DECAY)

        return Expansion(terms=result.terms, weights=result.weights)

    @staticmethod
    def _boost(snapshot: SynonymSnapshot, synonym: str, weight: float,
               category_filter: Optional[str]) -> float:
        if not category_filter:
            return weight
        hint = snapshot.category_hints.get(synonym)
        if hint and category_filter.lower() in hint.lower():
            return min(1.0, weight * CATEGORY_BOOST)
        return weight

    def vocabulary(self, locale: str = LANG_EN) -> List[str]:
        return self.snapshot(locale).vocabulary()

    def synonyms_by_language(self, language: str, locale: str = LANG_FR) -> Dict[str, str]:
        """Synonym -> canonical for synonyms recorded in one language."""
        snapshot = self.snapshot(locale)
        return {
            synonym: snapshot.reverse[synonym]
            for synonym, lang in snapshot.languages.items()
            if lang == language
        }

    def synonyms_by_category(self, category: str, locale: str = LANG_EN) -> Dict[str, str]:
        """Synonym -> canonical for synonyms whose category hint mentions a category."""
        snapshot = self.snapshot(locale)
        needle = category.lower()
        return {
            synonym: snapshot.reverse[synonym]
            for synonym, hint in snapshot.category_hints.items()
            if needle in hint.lower()
        }

    def record_usage(self, synonym: str) -> None:
        """Best-effort usage counter bump for a synonym that was used."""
        if self.store is None:
            return
        try:
            self.store.increment_usage(synonym)
        except Exception as e:
            logger.warning(f"Failed to record usage for synonym '{synonym}': {e}")
