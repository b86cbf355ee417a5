"""Analytics data models and DTOs."""

from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any
from datetime import date, datetime
from enum import Enum


class SuggestionType(Enum):
    """Kinds of synonym suggestion mined from search behaviour."""
    ZERO_RESULT = "zero_result"
    SESSION_PATTERN = "session_pattern"
    FUZZY_MATCH = "fuzzy_match"


@dataclass
class SearchAnalyticsRecord:
    """One logged search. Append-only."""
    query: str
    query_normalized: str
    results_count: int
    expanded_terms: List[str]
    execution_time_ms: int
    timestamp: datetime
    user_id: Optional[int] = None
    session_id: Optional[str] = None
    ip_hash: Optional[str] = None


@dataclass
class SearchAnalyticsAggregate:
    """Daily rollup for one normalized query."""
    date: date
    query_normalized: str
    search_count: int
    total_results: int
    avg_results: float
    zero_result_count: int


@dataclass
class SearchTerm:
    """Search term with usage stats over a window."""
    term: str
    search_count: int
    avg_results: float
    zero_result_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'term': self.term,
            'search_count': self.search_count,
            'avg_results': round(self.avg_results, 2),
            'zero_result_count': self.zero_result_count
        }


@dataclass
class SessionPattern:
    """Two distinct queries issued by one session within two minutes."""
    first_query: str
    second_query: str
    occurrences: int
    first_zero_rate: float

    @property
    def confidence(self) -> float:
        return min(1.0, (self.occurrences / 10) * (0.5 + 0.5 * self.first_zero_rate))


@dataclass
class SynonymSuggestion:
    """A proposed synonym mined from analytics."""
    type: SuggestionType
    term: str
    searches: int = 0
    suggestion: Optional[str] = None
    related_term: Optional[str] = None
    confidence: Optional[float] = None
    occurrences: Optional[int] = None
    matches: List[Any] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {'type': self.type.value, 'term': self.term}
        if self.type == SuggestionType.ZERO_RESULT:
            result['searches'] = self.searches
            result['suggestion'] = self.suggestion
        elif self.type == SuggestionType.SESSION_PATTERN:
            result['related_term'] = self.related_term
            result['confidence'] = round(self.confidence or 0.0, 3)
            result['occurrences'] = self.occurrences
        else:
            result['searches'] = self.searches
            result['matches'] = [m.to_dict() for m in self.matches]
        return result
