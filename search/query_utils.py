"""Utilities for query processing and manipulation."""

import re
from typing import Iterable, List

FULLTEXT_OPERATORS = re.compile(r'[+\-><()~*"@]')
EDGE_PUNCTUATION = re.compile(r'^[^\w]+|[^\w]+$')

def escape_special_chars(query: str) -> str:
    """Escape special characters for FTS5."""
    # FTS5 special characters that need escaping
    special_chars = '"'

    for char in special_chars:
        query = query.replace(char, f'{char}{char}')

    return query

def escape_like(value: str) -> str:
    """Escape LIKE wildcards so user input matches literally (ESCAPE '\\')."""
    return value.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')

def like_pattern(value: str) -> str:
    """Substring LIKE pattern for a term."""
    return f"%{escape_like(value)}%"

def strip_punctuation(word: str) -> str:
    """Trim leading and trailing punctuation, keeping accented letters."""
    return EDGE_PUNCTUATION.sub('', word)

def strip_fulltext_operators(term: str) -> str:
    """Remove boolean full-text operators from a term."""
    return normalize_whitespace(FULLTEXT_OPERATORS.sub(' ', term))

def normalize_whitespace(query: str) -> str:
    """Normalize whitespace in query."""
    return ' '.join(query.split())

def unique_terms(terms: Iterable[str]) -> List[str]:
    """Drop empty and repeated terms, keeping first occurrence order."""
    seen = []
    for term in terms:
        if term and term not in seen:
            seen.append(term)
    return seen
