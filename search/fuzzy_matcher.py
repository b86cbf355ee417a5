"""Typo-tolerant matching against the synonym vocabulary.

Edit distance thresholds are bucketed by term length:

- 3-4 chars: max 1 edit
- 5-7 chars: max 2 edits
- 8+ chars: max 3 edits
- 1-2 chars: never fuzzy matched

``find_matches`` is deliberately loose and is used as a ranking aid and by
offline synonym discovery. ``get_suggestion`` backs the user-facing "did you
mean" hint and is much stricter.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
import hashlib
import logging

from .cache import LRUCache

logger = logging.getLogger(__name__)

MIN_FUZZY_LENGTH = 3
SUGGESTION_MIN_SCORE = 0.85

_SOUNDEX_CODES = {
    **dict.fromkeys('bfpv', '1'),
    **dict.fromkeys('cgjkqsxz', '2'),
    **dict.fromkeys('dt', '3'),
    'l': '4',
    **dict.fromkeys('mn', '5'),
    'r': '6',
}


@dataclass(frozen=True)
class FuzzyMatch:
    """A vocabulary term within edit distance of the input."""
    term: str
    distance: int
    score: float

    def to_dict(self) -> Dict[str, object]:
        return {'term': self.term, 'distance': self.distance, 'score': self.score}


def levenshtein_distance(s1: str, s2: str, max_distance: Optional[int] = None) -> int:
    """Calculate the Levenshtein (edit) distance between two strings.

    With ``max_distance`` set, returns ``max_distance + 1`` as soon as the
    distance is guaranteed to exceed it.
    """
    if not s1:
        return len(s2)
    if not s2:
        return len(s1)

    if len(s1) > len(s2):
        s1, s2 = s2, s1

    m, n = len(s1), len(s2)

    if max_distance is not None and n - m > max_distance:
        return max_distance + 1

    prev_row = list(range(m + 1))
    curr_row = [0] * (m + 1)

    for j in range(1, n + 1):
        curr_row[0] = j
        row_min = j
        for i in range(1, m + 1):
            cost = 0 if s1[i - 1] == s2[j - 1] else 1
            curr_row[i] = min(
                prev_row[i] + 1,
                curr_row[i - 1] + 1,
                prev_row[i - 1] + cost,
            )
            row_min = min(row_min, curr_row[i])

        if max_distance is not None and row_min > max_distance:
            return max_distance + 1

        prev_row, curr_row = curr_row, prev_row

    return prev_row[m]


def max_edit_distance(length: int) -> int:
    """Maximum edit distance allowed for a term of the given length."""
    if length <= 4:
        return 1
    if length <= 7:
        return 2
    return 3


def soundex(word: str) -> str:
    """American Soundex code for a word, or '' if it has no letters."""
    letters = [ch for ch in word.lower() if 'a' <= ch <= 'z']
    if not letters:
        return ''

    first = letters[0]
    code = first.upper()
    last = _SOUNDEX_CODES.get(first, '')

    for ch in letters[1:]:
        digit = _SOUNDEX_CODES.get(ch)
        if digit is None:
            # Vowels separate repeated codes, h and w do not
            if ch not in 'hw':
                last = ''
            continue
        if digit != last:
            code += digit
            if len(code) == 4:
                break
        last = digit

    return code.ljust(4, '0')


def _vocabulary_fingerprint(vocabulary: Sequence[str]) -> str:
    digest = hashlib.sha1()
    for word in sorted(vocabulary):
        digest.update(word.encode('utf-8'))
        digest.update(b'\x00')
    return digest.hexdigest()


class FuzzyMatcher:
    """Levenshtein nearest-neighbour search over a vocabulary."""

    def __init__(self, cache: Optional[LRUCache] = None):
        self.cache = cache if cache is not None else LRUCache(max_size=100)

    def find_matches(self, term: str, vocabulary: Iterable[str],
                     max_results: Optional[int] = 3) -> List[FuzzyMatch]:
        """Find vocabulary terms within the length-bucketed edit distance.

        Exact matches are excluded. Results are sorted by score descending,
        then distance ascending.

        Args:
            term: The (possibly misspelled) search term
            vocabulary: Valid terms to match against
            max_results: Maximum number of matches, None for all

        Returns:
            List of FuzzyMatch
        """
        term = term.strip().lower()
        if len(term) < MIN_FUZZY_LENGTH:
            return []

        words = [w.strip().lower() for w in vocabulary]
        key = (term, _vocabulary_fingerprint(words))
        matches = self.cache.get(key, lambda: self._compute_matches(term, words))

        return list(matches) if max_results is None else list(matches[:max_results])

    def _compute_matches(self, term: str, words: Sequence[str]) -> Tuple[FuzzyMatch, ...]:
        term_len = len(term)
        max_distance = max_edit_distance(term_len)
        matches: List[FuzzyMatch] = []
        seen = set()

        for word in words:
            if word in seen or word == term:
                continue
            seen.add(word)

            word_len = len(word)
            if abs(term_len - word_len) > max_distance:
                continue

            distance = levenshtein_distance(term, word, max_distance)
            if distance <= max_distance:
                score = round(1 - distance / max(term_len, word_len), 3)
                matches.append(FuzzyMatch(term=word, distance=distance, score=score))

        matches.sort(key=lambda m: (-m.score, m.distance))
        return tuple(matches)

    def is_fuzzy_match(self, term1: str, term2: str) -> bool:
        """True when two distinct terms are within fuzzy distance of each other."""
        term1 = term1.strip().lower()
        term2 = term2.strip().lower()
        if term1 == term2:
            return False

        allowed = max_edit_distance(max(len(term1), len(term2)))
        return levenshtein_distance(term1, term2, allowed) <= allowed

    def get_suggestion(self, term: str, vocabulary: Iterable[str]) -> Optional[str]:
        """Return a "did you mean" correction, or None.

        A correction is only offered for a term absent from the vocabulary
        whose best match is a single-character slip:

        - length difference to the match is at most 1
        - same-length matches differ by exactly one substitution
        - terms of 5 chars or fewer allow distance 1 only
        - longer terms must also score at least 0.85
        """
        term = term.strip().lower()
        words = [w.strip().lower() for w in vocabulary]
        if term in words:
            return None

        matches = self.find_matches(term, words, max_results=1)
        if not matches:
            return None

        best = matches[0]
        term_len = len(term)
        length_diff = abs(term_len - len(best.term))

        if term_len <= 5:
            if best.distance > 1:
                return None
        elif best.score < SUGGESTION_MIN_SCORE:
            return None

        if length_diff > 1:
            return None

        if length_diff == 0 and best.distance > 1:
            return None

        logger.debug(f"Suggesting '{best.term}' for '{term}' (score={best.score})")
        return best.term

    def find_phonetic_matches(self, term: str, vocabulary: Iterable[str]) -> List[str]:
        """Vocabulary terms that share the term's Soundex code."""
        term = term.strip().lower()
        code = soundex(term)
        if not code:
            return []

        matches = []
        for word in vocabulary:
            word = word.strip().lower()
            if word != term and word not in matches and soundex(word) == code:
                matches.append(word)
        return matches

    def clear_cache(self) -> None:
        self.cache.invalidate()
