"""Builds store-level match expressions from expanded term sets."""

from typing import List, Sequence

from .query_utils import escape_special_chars, like_pattern, strip_fulltext_operators, unique_terms

MIN_TERM_LENGTH = 2


class FTS5QueryBuilder:
    """Builds FTS5 MATCH expressions and LIKE patterns for catalog search."""

    def __init__(self, prefix_match: bool = True):
        """
        Initialize query builder.

        Args:
            prefix_match: Suffix each term with ``*`` so "chair" matches "chairs"
        """
        self.prefix_match = prefix_match

    def fulltext_terms(self, terms: Sequence[str]) -> List[str]:
        """Terms usable in a full-text match: operators stripped, too-short dropped."""
        cleaned = (strip_fulltext_operators(term) for term in terms)
        return [t for t in unique_terms(cleaned) if len(t) >= MIN_TERM_LENGTH]

    def build_match_query(self, terms: Sequence[str]) -> str:
        """
        Build an OR-combined FTS5 query from expanded terms.

        Each term is quoted (multi-word terms become phrases) and optionally
        prefix-matched.

        Args:
            terms: Expanded search terms

        Returns:
            FTS5-formatted query string, or '' when no term survives cleaning
        """
        suffix = '*' if self.prefix_match else ''
        parts = [f'"{escape_special_chars(term)}"{suffix}' for term in self.fulltext_terms(terms)]
        return ' OR '.join(parts)

    def build_like_patterns(self, terms: Sequence[str]) -> List[str]:
        """Substring patterns for the LIKE fallback, one per distinct term."""
        return [like_pattern(term) for term in unique_terms(t.strip() for t in terms)]
