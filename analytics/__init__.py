"""Search analytics and synonym discovery module."""

from .search_analytics import SearchAnalytics, hash_ip, normalize_query
from .analytics_models import (
    SearchAnalyticsRecord,
    SearchAnalyticsAggregate,
    SearchTerm,
    SessionPattern,
    SuggestionType,
    SynonymSuggestion
)
from .metrics_collector import MetricsCollector
from .analytics_storage import AnalyticsStorage
from .auto_discovery import SynonymAutoDiscovery

__all__ = [
    'SearchAnalytics',
    'hash_ip',
    'normalize_query',
    'SearchAnalyticsRecord',
    'SearchAnalyticsAggregate',
    'SearchTerm',
    'SessionPattern',
    'SuggestionType',
    'SynonymSuggestion',
    'MetricsCollector',
    'AnalyticsStorage',
    'SynonymAutoDiscovery'
]
