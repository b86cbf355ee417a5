"""Exceptions raised by the search engine."""


class SearchError(Exception):
    """Base class for search engine errors."""


class SearchUnavailableError(SearchError):
    """The catalog store failed while executing the primary retrieval."""


class QueryTimeoutError(SearchUnavailableError, TimeoutError):
    """A store query exceeded its deadline and was interrupted."""

    def __init__(self, timeout_ms: int):
        super().__init__(f"Query exceeded timeout of {timeout_ms}ms")
        self.timeout_ms = timeout_ms


class SynonymValidationError(SearchError, ValueError):
    """Rejected synonym input at the admin boundary."""


class DuplicateSynonymError(SynonymValidationError):
    """The synonym term is already mapped by another active entry."""
