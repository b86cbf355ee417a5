"""Pooled SQLite connections and query deadlines for the catalog store."""

import os
import sqlite3
import threading
from queue import Queue, Empty
from contextlib import contextmanager
import logging
from typing import Optional, Generator

from search.exceptions import QueryTimeoutError

logger = logging.getLogger(__name__)


class ConnectionPool:
    """Thread-safe SQLite connection pool.

    Search requests are read-heavy and short, so connections are reused
    across requests instead of being opened per query. WAL mode lets the
    analytics writer and admin writers proceed alongside readers.
    """

    def __init__(self, db_path: str, max_connections: int = 5, timeout: int = 10,
                 busy_timeout_ms: int = 5000):
        """Initialize connection pool.

        Args:
            db_path: Path to the SQLite database file
            max_connections: Maximum number of connections to maintain
            timeout: Seconds to wait for a free connection
            busy_timeout_ms: SQLite busy timeout applied to every connection
        """
        self.db_path = db_path
        self.max_connections = max_connections
        self.timeout = timeout
        self.busy_timeout_ms = busy_timeout_ms
        self._idle: Queue = Queue(maxsize=max_connections)
        self._lock = threading.Lock()
        self._created = 0
        self._closed = False

        db_dir = os.path.dirname(db_path)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        conn.execute("PRAGMA journal_mode = WAL")
        conn.execute(f"PRAGMA busy_timeout = {int(self.busy_timeout_ms)}")
        return conn

    def _acquire(self) -> sqlite3.Connection:
        try:
            return self._idle.get_nowait()
        except Empty:
            pass

        with self._lock:
            if self._created < self.max_connections:
                self._created += 1
                logger.debug(f"Opening connection {self._created}/{self.max_connections}")
                try:
                    return self._connect()
                except sqlite3.Error:
                    self._created -= 1
                    raise

        logger.debug(f"Connection pool exhausted, waiting up to {self.timeout}s")
        try:
            return self._idle.get(timeout=self.timeout)
        except Empty:
            raise TimeoutError(
                f"No connection available after {self.timeout}s "
                f"(max_connections={self.max_connections})"
            )

    def _discard(self, conn: sqlite3.Connection) -> None:
        try:
            conn.close()
        except sqlite3.Error as e:
            logger.debug(f"Error closing discarded connection: {e}")
        with self._lock:
            self._created -= 1

    @contextmanager
    def get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Borrow a connection, returning it to the pool afterwards.

        A connection that saw an error is closed instead of being reused.

        Raises:
            RuntimeError: If pool is closed
            TimeoutError: If no connection becomes free in time
        """
        if self._closed:
            raise RuntimeError("Connection pool is closed")

        conn = self._acquire()
        try:
            yield conn
        except BaseException:
            self._discard(conn)
            raise
        else:
            if self._closed:
                self._discard(conn)
            else:
                self._idle.put(conn)

    @contextmanager
    def transaction(self) -> Generator[sqlite3.Connection, None, None]:
        """Borrow a connection inside BEGIN/COMMIT, rolling back on error."""
        with self.get_connection() as conn:
            conn.execute("BEGIN")
            try:
                yield conn
            except BaseException:
                conn.rollback()
                raise
            conn.commit()

    def close(self):
        """Close all idle connections and refuse new borrows."""
        self._closed = True
        while True:
            try:
                conn = self._idle.get_nowait()
            except Empty:
                break
            try:
                conn.close()
            except sqlite3.Error as e:
                logger.error(f"Error closing connection: {e}")
        logger.info(f"Connection pool closed ({self._created} connections opened)")

    def get_pool_stats(self) -> dict:
        return {
            'max_connections': self.max_connections,
            'created_connections': self._created,
            'available_connections': self._idle.qsize(),
            'is_closed': self._closed
        }

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


@contextmanager
def query_deadline(conn: sqlite3.Connection, timeout_ms: Optional[int] = None):
    """Interrupt the statement running on ``conn`` once ``timeout_ms`` elapses.

    Raises:
        QueryTimeoutError: If the deadline fired while the block was running
    """
    if not timeout_ms or timeout_ms <= 0:
        yield conn
        return

    interrupted = threading.Event()
    finished = threading.Event()
    state_lock = threading.Lock()

    def interrupt_query():
        with state_lock:
            # The block already returned; the connection may be back in the pool
            if finished.is_set():
                return
            interrupted.set()
            _interrupt(conn, timeout_ms)

    timer = threading.Timer(timeout_ms / 1000.0, interrupt_query)
    timer.daemon = True
    timer.start()
    try:
        yield conn
    except sqlite3.OperationalError:
        if interrupted.is_set():
            raise QueryTimeoutError(timeout_ms)
        raise
    finally:
        with state_lock:
            finished.set()
        timer.cancel()

    if interrupted.is_set():
        raise QueryTimeoutError(timeout_ms)


def _interrupt(conn: sqlite3.Connection, timeout_ms: int) -> None:
    logger.warning(f"Query timeout after {timeout_ms}ms, interrupting...")
    try:
        conn.interrupt()
    except sqlite3.Error as e:
        logger.error(f"Failed to interrupt query: {e}")
