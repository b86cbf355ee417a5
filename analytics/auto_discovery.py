"""Mines search analytics for new synonym candidates.

Runs offline (see ``tasks.run_synonym_discovery``), never inside a search
request.
"""

from typing import Dict, List, Optional
import logging

from search.fuzzy_matcher import FuzzyMatcher
from storage.models import SynonymEntry
from .analytics_models import SuggestionType, SynonymSuggestion
from .analytics_storage import AnalyticsStorage

logger = logging.getLogger(__name__)

MIN_SESSION_CONFIDENCE = 0.5
DEFAULT_MIN_CONFIDENCE = 0.7


class SynonymAutoDiscovery:
    """Proposes and optionally commits synonyms from search behaviour.

    Three patterns are mined:

    1. zero-result queries (3+ searches, 80%+ empty) with a "did you mean"
       against the synonym vocabulary
    2. query pairs issued by one session within two minutes
    3. fuzzy matches of zero-result queries against queries that usually
       succeed
    """

    def __init__(self, analytics_storage: AnalyticsStorage, synonym_store,
                 fuzzy_matcher: Optional[FuzzyMatcher] = None, synonym_index=None):
        """
        Args:
            analytics_storage: Source of search logs and aggregates
            synonym_store: SynonymStore receiving created synonyms
            fuzzy_matcher: Optional matcher instance
            synonym_index: SynonymIndex to invalidate after creating synonyms
        """
        self.analytics_storage = analytics_storage
        self.synonym_store = synonym_store
        self.fuzzy_matcher = fuzzy_matcher or FuzzyMatcher()
        self.synonym_index = synonym_index

    def analyze(self, lookback_days: int = 30) -> List[SynonymSuggestion]:
        """Collect suggestions from all patterns over the lookback window."""
        suggestions: List[SynonymSuggestion] = []

        zero_results = self.analytics_storage.get_zero_result_patterns(days=lookback_days)
        vocabulary = self._synonym_vocabulary()
        for pattern in zero_results:
            suggestions.append(SynonymSuggestion(
                type=SuggestionType.ZERO_RESULT,
                term=pattern.term,
                searches=pattern.search_count,
                suggestion=self.fuzzy_matcher.get_suggestion(pattern.term, vocabulary) if vocabulary else None
            ))

        for pattern in self.analytics_storage.get_session_patterns(days=lookback_days):
            if pattern.confidence >= MIN_SESSION_CONFIDENCE:
                suggestions.append(SynonymSuggestion(
                    type=SuggestionType.SESSION_PATTERN,
                    term=pattern.first_query,
                    related_term=pattern.second_query,
                    confidence=pattern.confidence,
                    occurrences=pattern.occurrences
                ))

        successful = self.analytics_storage.get_successful_vocabulary()
        for pattern in zero_results:
            matches = self.fuzzy_matcher.find_matches(pattern.term, successful, max_results=2)
            if matches:
                suggestions.append(SynonymSuggestion(
                    type=SuggestionType.FUZZY_MATCH,
                    term=pattern.term,
                    searches=pattern.search_count,
                    matches=matches
                ))

        logger.info(f"Synonym discovery found {len(suggestions)} suggestions "
                    f"over {lookback_days} days")
        return suggestions

    def _synonym_vocabulary(self) -> List[str]:
        try:
            return self.synonym_store.vocabulary()
        except Exception as e:
            logger.warning(f"Could not load synonym vocabulary: {e}")
            return []

    def auto_create(self, suggestions: List[SynonymSuggestion],
                    min_confidence: float = DEFAULT_MIN_CONFIDENCE) -> Dict[str, int]:
        """Commit suggestions at or above ``min_confidence``.

        Existing pairs, or synonyms already mapped to another term, are
        skipped. Zero-result suggestions are advisory and never committed.

        Returns:
            Dict with 'created' and 'skipped' counts
        """
        created = 0
        skipped = 0

        for suggestion in suggestions:
            entry = self._entry_for(suggestion, min_confidence)
            if entry is None:
                if suggestion.type == SuggestionType.FUZZY_MATCH and suggestion.matches:
                    skipped += 1
                continue

            try:
                if self.synonym_store.insert_if_absent(entry) is None:
                    skipped += 1
                else:
                    created += 1
                    logger.info(f"Created synonym '{entry.synonym}' -> '{entry.canonical}' "
                                f"from {suggestion.type.value}")
            except Exception as e:
                logger.warning(f"Failed to create synonym for '{suggestion.term}': {e}")
                skipped += 1

        if created and self.synonym_index is not None:
            self.synonym_index.invalidate()

        return {'created': created, 'skipped': skipped}

    @staticmethod
    def _entry_for(suggestion: SynonymSuggestion, min_confidence: float) -> Optional[SynonymEntry]:
        if suggestion.type == SuggestionType.FUZZY_MATCH and suggestion.matches:
            best = suggestion.matches[0]
            if best.score < min_confidence:
                return None
            return SynonymEntry(canonical=best.term, synonym=suggestion.term,
                                weight=round(best.score, 2), source='analytics')

        if suggestion.type == SuggestionType.SESSION_PATTERN:
            if (suggestion.confidence or 0.0) < min_confidence:
                return None
            return SynonymEntry(canonical=suggestion.related_term, synonym=suggestion.term,
                                weight=round(suggestion.confidence, 2), source='analytics')

        return None
