"""Storage backend for analytics data."""

from typing import List, Optional
from datetime import date, datetime, timedelta
import json
import logging
import sqlite3

from .analytics_models import SearchAnalyticsRecord, SearchAnalyticsAggregate, SearchTerm, SessionPattern

logger = logging.getLogger(__name__)

MAX_QUERY_LENGTH = 255
MAX_LOGGED_TERMS = 20


class AnalyticsStorage:
    """Search log and daily aggregates in SQLite.

    The aggregate is maintained with a single ``INSERT ... ON CONFLICT DO
    UPDATE`` statement so concurrent searches never lose increments.
    """

    def __init__(self, db_path: str, busy_timeout: float = 30.0):
        self.db_path = db_path
        self.busy_timeout = busy_timeout
        self._init_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=self.busy_timeout)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self):
        """Initialize analytics tables."""
        with self._connect() as conn:
            conn.execute("PRAGMA journal_mode = WAL")
            conn.executescript("""
                -- Append-only search log
                CREATE TABLE IF NOT EXISTS search_log (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    query TEXT NOT NULL,
                    query_normalized TEXT NOT NULL,
                    results_count INTEGER NOT NULL,
                    expanded_terms TEXT,
                    execution_time_ms INTEGER NOT NULL,
                    user_id INTEGER,
                    session_id TEXT,
                    ip_hash TEXT,
                    created_at TIMESTAMP NOT NULL
                );

                CREATE INDEX IF NOT EXISTS idx_search_log_created
                    ON search_log(created_at);
                CREATE INDEX IF NOT EXISTS idx_search_log_session
                    ON search_log(session_id, created_at);

                -- Daily rollup per normalized query
                CREATE TABLE IF NOT EXISTS search_analytics (
                    date TEXT NOT NULL,
                    query_normalized TEXT NOT NULL,
                    search_count INTEGER NOT NULL DEFAULT 0,
                    total_results INTEGER NOT NULL DEFAULT 0,
                    avg_results REAL NOT NULL DEFAULT 0,
                    zero_result_count INTEGER NOT NULL DEFAULT 0,
                    PRIMARY KEY (date, query_normalized)
                );
            """)

    def tables_available(self) -> bool:
        try:
            with self._connect() as conn:
                rows = conn.execute("""
                    SELECT name FROM sqlite_master
                    WHERE type = 'table' AND name IN ('search_log', 'search_analytics')
                """).fetchall()
            return len(rows) == 2
        except sqlite3.Error as e:
            logger.warning(f"Analytics tables unavailable: {e}")
            return False

    @staticmethod
    def _log_params(record: SearchAnalyticsRecord) -> tuple:
        return (
            record.query[:MAX_QUERY_LENGTH],
            record.query_normalized[:MAX_QUERY_LENGTH],
            record.results_count,
            json.dumps(record.expanded_terms[:MAX_LOGGED_TERMS]),
            record.execution_time_ms,
            record.user_id,
            record.session_id,
            record.ip_hash,
            record.timestamp.isoformat(sep=' ', timespec='milliseconds')
        )

    _INSERT_LOG = """
        INSERT INTO search_log (
            query, query_normalized, results_count, expanded_terms,
            execution_time_ms, user_id, session_id, ip_hash, created_at
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
    """

    _UPSERT_AGGREGATE = """
        INSERT INTO search_analytics (
            date, query_normalized, search_count, total_results, avg_results, zero_result_count
        ) VALUES (?, ?, 1, ?, ?, ?)
        ON CONFLICT(date, query_normalized) DO UPDATE SET
            search_count = search_count + 1,
            total_results = total_results + excluded.total_results,
            avg_results = CAST(total_results + excluded.total_results AS REAL) / (search_count + 1),
            zero_result_count = zero_result_count + excluded.zero_result_count
    """

    @staticmethod
    def _aggregate_params(record: SearchAnalyticsRecord) -> tuple:
        return (
            record.timestamp.date().isoformat(),
            record.query_normalized[:MAX_QUERY_LENGTH],
            record.results_count,
            float(record.results_count),
            1 if record.results_count == 0 else 0
        )

    def record_search(self, record: SearchAnalyticsRecord):
        """Append a log row and increment the daily aggregate."""
        with self._connect() as conn:
            conn.execute(self._INSERT_LOG, self._log_params(record))
            conn.execute(self._UPSERT_AGGREGATE, self._aggregate_params(record))

    def record_searches_batch(self, records: List[SearchAnalyticsRecord]):
        """Batch variant of record_search, one transaction."""
        with self._connect() as conn:
            conn.executemany(self._INSERT_LOG, [self._log_params(r) for r in records])
            conn.executemany(self._UPSERT_AGGREGATE, [self._aggregate_params(r) for r in records])

    def upsert_aggregate(self, query_normalized: str, results_count: int,
                         day: Optional[date] = None):
        """Increment one day's aggregate for a query."""
        day = day or date.today()
        with self._connect() as conn:
            conn.execute(self._UPSERT_AGGREGATE, (
                day.isoformat(),
                query_normalized[:MAX_QUERY_LENGTH],
                results_count,
                float(results_count),
                1 if results_count == 0 else 0
            ))

    def get_aggregate(self, query_normalized: str, day: Optional[date] = None) -> Optional[SearchAnalyticsAggregate]:
        day = day or date.today()
        with self._connect() as conn:
            row = conn.execute("""
                SELECT * FROM search_analytics WHERE date = ? AND query_normalized = ?
            """, (day.isoformat(), query_normalized)).fetchone()
        if row is None:
            return None
        return SearchAnalyticsAggregate(
            date=date.fromisoformat(row['date']),
            query_normalized=row['query_normalized'],
            search_count=row['search_count'],
            total_results=row['total_results'],
            avg_results=row['avg_results'],
            zero_result_count=row['zero_result_count']
        )

    @staticmethod
    def _since(days: int) -> str:
        return (date.today() - timedelta(days=days)).isoformat()

    def get_popular_searches(self, days: int = 7, limit: int = 20) -> List[SearchTerm]:
        """Most searched normalized queries over the window."""
        with self._connect() as conn:
            cursor = conn.execute("""
                SELECT
                    query_normalized,
                    SUM(search_count) AS total_searches,
                    SUM(total_results) AS total_results,
                    SUM(zero_result_count) AS zero_count
                FROM search_analytics
                WHERE date >= ?
                GROUP BY query_normalized
                ORDER BY total_searches DESC, query_normalized ASC
                LIMIT ?
            """, (self._since(days), limit))
            return [self._row_to_term(row) for row in cursor]

    def get_zero_result_searches(self, days: int = 7, limit: int = 20) -> List[SearchTerm]:
        """Queries that returned nothing at least three times over the window."""
        with self._connect() as conn:
            cursor = conn.execute("""
                SELECT
                    query_normalized,
                    SUM(search_count) AS total_searches,
                    SUM(total_results) AS total_results,
                    SUM(zero_result_count) AS zero_count
                FROM search_analytics
                WHERE date >= ?
                GROUP BY query_normalized
                HAVING zero_count >= 3
                ORDER BY zero_count DESC, query_normalized ASC
                LIMIT ?
            """, (self._since(days), limit))
            return [self._row_to_term(row) for row in cursor]

    @staticmethod
    def _row_to_term(row: sqlite3.Row) -> SearchTerm:
        searches = row['total_searches'] or 0
        return SearchTerm(
            term=row['query_normalized'],
            search_count=searches,
            avg_results=(row['total_results'] or 0) / searches if searches else 0.0,
            zero_result_count=row['zero_count'] or 0
        )

    def get_zero_result_patterns(self, days: int = 30, min_searches: int = 3,
                                 min_zero_rate: float = 0.8, limit: int = 50) -> List[SearchTerm]:
        """Queries searched at least ``min_searches`` times whose zero-result
        rate over the whole window is at least ``min_zero_rate``."""
        with self._connect() as conn:
            cursor = conn.execute("""
                SELECT
                    query_normalized,
                    SUM(search_count) AS total_searches,
                    SUM(total_results) AS total_results,
                    SUM(zero_result_count) AS zero_count
                FROM search_analytics
                WHERE date >= ?
                GROUP BY query_normalized
                HAVING total_searches >= ?
                   AND zero_count > 0
                   AND zero_count * 1.0 / total_searches >= ?
                ORDER BY total_searches DESC, query_normalized ASC
                LIMIT ?
            """, (self._since(days), min_searches, min_zero_rate, limit))
            return [self._row_to_term(row) for row in cursor]

    def get_session_patterns(self, days: int = 30, window_seconds: int = 120,
                             min_occurrences: int = 3, limit: int = 30) -> List[SessionPattern]:
        """Query pairs issued in sequence by the same session."""
        since = (datetime.now() - timedelta(days=days)).isoformat(sep=' ', timespec='milliseconds')
        with self._connect() as conn:
            cursor = conn.execute("""
                SELECT
                    s1.query_normalized AS first_query,
                    s2.query_normalized AS second_query,
                    COUNT(*) AS occurrences,
                    AVG(CASE WHEN s1.results_count = 0 THEN 1.0 ELSE 0.0 END) AS first_zero_rate
                FROM search_log s1
                JOIN search_log s2
                    ON s1.session_id = s2.session_id
                    AND s2.created_at > s1.created_at
                    AND julianday(s2.created_at) <= julianday(s1.created_at) + (? / 86400.0)
                    AND s1.query_normalized != s2.query_normalized
                WHERE s1.created_at >= ?
                  AND s1.session_id IS NOT NULL
                  AND LENGTH(s1.query_normalized) >= 2
                  AND LENGTH(s2.query_normalized) >= 2
                GROUP BY s1.query_normalized, s2.query_normalized
                HAVING occurrences >= ?
                ORDER BY occurrences DESC, first_query ASC
                LIMIT ?
            """, (window_seconds, since, min_occurrences, limit))
            return [
                SessionPattern(
                    first_query=row['first_query'],
                    second_query=row['second_query'],
                    occurrences=row['occurrences'],
                    first_zero_rate=row['first_zero_rate'] or 0.0
                )
                for row in cursor
            ]

    def get_successful_vocabulary(self, limit: int = 1000) -> List[str]:
        """Normalized queries that usually return results."""
        with self._connect() as conn:
            cursor = conn.execute("""
                SELECT DISTINCT query_normalized
                FROM search_analytics
                WHERE avg_results > 0 AND search_count >= 2
                LIMIT ?
            """, (limit,))
            return [row['query_normalized'] for row in cursor]

    def cleanup_old_data(self, retention_days: int = 90) -> int:
        """Delete log rows and aggregates older than the retention window."""
        cutoff = datetime.now() - timedelta(days=retention_days)
        with self._connect() as conn:
            deleted = conn.execute(
                "DELETE FROM search_log WHERE created_at < ?", (cutoff.isoformat(sep=' ', timespec='milliseconds'),)
            ).rowcount
            deleted += conn.execute(
                "DELETE FROM search_analytics WHERE date < ?", (cutoff.date().isoformat(),)
            ).rowcount
        logger.info(f"Removed {deleted} analytics rows older than {retention_days} days")
        return deleted
