"""Turns a raw query into a bounded, weighted term set."""

from typing import Dict, List, Optional
import logging

from .fuzzy_matcher import FuzzyMatcher
from .language import LanguageSupport, LANG_EN, LANG_FR
from .models import ExpandedQuery
from .query_utils import normalize_whitespace, strip_punctuation
from .synonym_index import SynonymIndex

logger = logging.getLogger(__name__)

DEFAULT_MAX_TERMS = 20
MIN_QUERY_LENGTH = 2
MIN_PHRASE_LENGTH = 3
MULTI_WORD_DECAY = 0.9
DEFAULT_EXPANSION_WEIGHT = 0.8
TRANSLATED_PHRASE_WEIGHT = 0.95
FRENCH_TERM_WEIGHT = 0.9


class _OrderedWeights:
    def __init__(self):
        self.terms: List[str] = []
        self.weights: Dict[str, float] = {}

    def add(self, term: str, weight: float) -> None:
        if term not in self.weights:
            self.terms.append(term)
            self.weights[term] = weight

    def prepend(self, term: str, weight: float) -> None:
        if term not in self.weights:
            self.terms.insert(0, term)
            self.weights[term] = weight

    def __contains__(self, term: str) -> bool:
        return term in self.weights

    def capped(self, max_terms: int) -> Dict[str, float]:
        return {t: self.weights[t] for t in self.terms[:max_terms]}


class QueryExpander:
    """Tokenizes, translates and synonym-expands queries.

    Fuzzy matches are never injected into the term set. With
    ``use_fuzzy`` they are reported separately on the ExpandedQuery so the
    caller can use them for zero-result hints.
    """

    def __init__(self, synonym_index: SynonymIndex,
                 language_support: Optional[LanguageSupport] = None,
                 fuzzy_matcher: Optional[FuzzyMatcher] = None):
        self.synonym_index = synonym_index
        self.language_support = language_support or LanguageSupport()
        self.fuzzy_matcher = fuzzy_matcher or FuzzyMatcher()

    def expand(self, query: str, max_terms: int = DEFAULT_MAX_TERMS,
               use_fuzzy: bool = False, use_translation: bool = True,
               locale: str = LANG_EN, category_filter: Optional[str] = None) -> ExpandedQuery:
        """
        Expand a query into weighted search terms.

        Args:
            query: Raw user query
            max_terms: Upper bound on the number of terms returned
            use_fuzzy: Report vocabulary near-misses in ``fuzzy_alternatives``
            use_translation: Translate French queries when the locale is French
            locale: Caller's UI locale
            category_filter: Active category used to boost hinted synonyms

        Returns:
            ExpandedQuery with the original query weighted 1.0
        """
        query = normalize_whitespace(query.strip().lower())
        original_terms = query.split()

        if len(query) < MIN_QUERY_LENGTH:
            return ExpandedQuery(original=query, original_terms=original_terms,
                                 weighted_terms={query: 1.0}, capped_at=max_terms)

        result = _OrderedWeights()
        language = LANG_EN
        translated_query = None

        if use_translation:
            translation = self.language_support.translate_query(query, locale=locale)
            if translation.original_lang == LANG_FR:
                language = LANG_FR
                translated_query = translation.translated
                result.add(query, 1.0)
                if translated_query != query:
                    result.add(translated_query, TRANSLATED_PHRASE_WEIGHT)
                for term in translation.terms:
                    result.add(term, FRENCH_TERM_WEIGHT)

        search_query = translated_query if translated_query is not None else query
        # Edge punctuation never blocks a synonym lookup ("sofa," -> "sofa")
        words = [w for w in map(strip_punctuation, search_query.split()) if w] or search_query.split()

        if len(words) == 1:
            expansion = self.synonym_index.expand(words[0], locale=locale,
                                                  category_filter=category_filter)
            for term in expansion.terms:
                result.add(term, expansion.weights.get(term, DEFAULT_EXPANSION_WEIGHT))
        else:
            phrase_terms = _OrderedWeights()
            for word in words:
                if len(word) < MIN_QUERY_LENGTH:
                    continue
                phrase_terms.add(word, 1.0)
                expansion = self.synonym_index.expand(word, locale=locale,
                                                      category_filter=category_filter)
                for term in expansion.terms:
                    weight = expansion.weights.get(term, DEFAULT_EXPANSION_WEIGHT)
                    phrase_terms.add(term, weight * MULTI_WORD_DECAY)

            if len(query) >= MIN_PHRASE_LENGTH:
                phrase_terms.prepend(query, 1.0)
            if search_query != query:
                phrase_terms.add(search_query, TRANSLATED_PHRASE_WEIGHT)

            for term in phrase_terms.terms:
                result.add(term, phrase_terms.weights[term])

        expanded = ExpandedQuery(
            original=query,
            original_terms=original_terms,
            weighted_terms=result.capped(max_terms),
            language=language,
            translated_query=translated_query,
            capped_at=max_terms
        )

        if use_fuzzy:
            expanded.fuzzy_alternatives = self._fuzzy_alternatives(words, locale)

        logger.debug(f"Expanded '{query}' into {len(expanded.weighted_terms)} terms")
        return expanded

    def _fuzzy_alternatives(self, words: List[str], locale: str) -> List[str]:
        vocabulary = self.synonym_index.vocabulary(locale)
        if not vocabulary:
            return []
        alternatives: List[str] = []
        for word in words:
            if word in vocabulary:
                continue
            for match in self.fuzzy_matcher.find_matches(word, vocabulary, max_results=2):
                if match.term not in alternatives:
                    alternatives.append(match.term)
        return alternatives
