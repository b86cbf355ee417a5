"""Search analytics recorder."""

from typing import List, Optional
from datetime import datetime, date
import hashlib
import logging

from .analytics_models import SearchAnalyticsRecord, SearchTerm
from .analytics_storage import AnalyticsStorage
from .metrics_collector import MetricsCollector

logger = logging.getLogger(__name__)


def hash_ip(ip_address: Optional[str], day: Optional[date] = None) -> Optional[str]:
    """sha256 of the address salted with the day; the raw address is never stored."""
    if not ip_address:
        return None
    day = day or date.today()
    return hashlib.sha256(f"{ip_address}{day.isoformat()}".encode('utf-8')).hexdigest()


def normalize_query(query: str) -> str:
    return ' '.join(query.strip().lower().split())


class SearchAnalytics:
    """Fire-and-forget search logging.

    ``log`` never raises and never blocks on the database when a running
    collector is attached. Without a collector, records are written inline
    and failures are logged and swallowed.
    """

    def __init__(self, storage: AnalyticsStorage,
                 collector: Optional[MetricsCollector] = None,
                 enabled: bool = True):
        self.analytics_storage = storage
        self.metrics_collector = collector
        self.enabled = enabled
        self._available: Optional[bool] = None

    @classmethod
    def create(cls, db_path: str, enabled: bool = True, background: bool = True,
               batch_size: int = 100, flush_interval: float = 5.0) -> 'SearchAnalytics':
        """Build a recorder, optionally with a started background collector."""
        storage = AnalyticsStorage(db_path)
        collector = None
        if background:
            collector = MetricsCollector(storage, batch_size=batch_size, flush_interval=flush_interval)
            collector.start()
        return cls(storage, collector=collector, enabled=enabled)

    def is_available(self) -> bool:
        """Checked once per recorder; a missing log table disables logging."""
        if self._available is None:
            self._available = self.analytics_storage.tables_available()
            if not self._available:
                logger.warning("Search log tables missing, analytics disabled")
        return self._available

    def log(self, query: str, results_count: int, expanded_terms: List[str],
            execution_time_ms: int, user_id: Optional[int] = None,
            session_id: Optional[str] = None, ip_address: Optional[str] = None,
            query_normalized: Optional[str] = None) -> None:
        """Record one search."""
        if not self.enabled:
            return

        try:
            if not self.is_available():
                return

            now = datetime.now()
            record = SearchAnalyticsRecord(
                query=query,
                query_normalized=query_normalized or normalize_query(query),
                results_count=results_count,
                expanded_terms=list(expanded_terms),
                execution_time_ms=int(execution_time_ms),
                timestamp=now,
                user_id=user_id,
                session_id=session_id,
                ip_hash=hash_ip(ip_address, now.date())
            )

            if self.metrics_collector is not None:
                self.metrics_collector.collect(record)
            else:
                self.analytics_storage.record_search(record)
        except Exception as e:
            logger.error(f"Failed to log search '{query}': {e}")

    def record_event(self, event) -> None:
        """Deliver a SearchEvent emitted by the search service."""
        self.log(
            query=event.query,
            results_count=event.results_count,
            expanded_terms=event.expanded_terms,
            execution_time_ms=event.execution_time_ms,
            user_id=event.user_id,
            session_id=event.session_id,
            ip_address=event.ip_address,
            query_normalized=event.query_normalized
        )

    def get_popular_searches(self, days: int = 7, limit: int = 20) -> List[SearchTerm]:
        return self.analytics_storage.get_popular_searches(days=days, limit=limit)

    def get_zero_result_searches(self, days: int = 7, limit: int = 20) -> List[SearchTerm]:
        return self.analytics_storage.get_zero_result_searches(days=days, limit=limit)

    def cleanup_old_data(self, retention_days: int = 90) -> int:
        return self.analytics_storage.cleanup_old_data(retention_days)

    def flush(self) -> None:
        if self.metrics_collector is not None:
            self.metrics_collector.flush()

    def shutdown(self) -> None:
        if self.metrics_collector is not None:
            self.metrics_collector.stop()
