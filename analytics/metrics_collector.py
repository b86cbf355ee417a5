"""Background delivery of search analytics records."""

from typing import Optional, List
from queue import Queue, Full, Empty
from threading import Thread, Event
import time
import logging
from .analytics_models import SearchAnalyticsRecord
from .analytics_storage import AnalyticsStorage

logger = logging.getLogger(__name__)

# Upper bound on a single queue wait so stop() is noticed promptly
MAX_QUEUE_WAIT = 0.5


class MetricsCollector:
    """Queues analytics records and writes them in batches off the request path."""

    def __init__(self, storage: AnalyticsStorage,
                 batch_size: int = 100,
                 flush_interval: float = 5.0,
                 max_queue_size: int = 10000):
        self.storage = storage
        self.batch_size = batch_size
        self.flush_interval = flush_interval
        self.queue: Queue = Queue(maxsize=max_queue_size)
        self.shutdown_event = Event()
        self.worker_thread: Optional[Thread] = None
        self.enabled = True

    def start(self):
        """Start the background writer thread."""
        if self.worker_thread is None or not self.worker_thread.is_alive():
            self.shutdown_event.clear()
            self.worker_thread = Thread(target=self._worker, name='search-analytics', daemon=True)
            self.worker_thread.start()
            logger.info("Metrics collector started")

    def stop(self, timeout: float = 10.0):
        """Stop the writer thread after draining the queue."""
        self.shutdown_event.set()
        if self.worker_thread:
            self.worker_thread.join(timeout=timeout)
        logger.info("Metrics collector stopped")

    def collect(self, record: SearchAnalyticsRecord) -> bool:
        """Enqueue a record without blocking. Returns False if it was dropped."""
        if not self.enabled:
            return False
        try:
            self.queue.put_nowait(record)
            return True
        except Full:
            # Dropping analytics is preferable to slowing searches down
            logger.warning("Metrics queue full, dropping search log entry")
            return False

    def _drain(self, batch: List[SearchAnalyticsRecord]) -> None:
        while True:
            try:
                batch.append(self.queue.get_nowait())
            except Empty:
                return

    def _worker(self):
        """Background worker to process the queue."""
        batch: List[SearchAnalyticsRecord] = []
        last_flush = time.time()

        while not self.shutdown_event.is_set():
            timeout = min(MAX_QUEUE_WAIT, max(0.1, self.flush_interval - (time.time() - last_flush)))
            try:
                batch.append(self.queue.get(timeout=timeout))
            except Empty:
                pass

            should_flush = (
                len(batch) >= self.batch_size or
                time.time() - last_flush >= self.flush_interval
            )
            if should_flush and batch:
                self._flush_batch(batch)
                batch = []
                last_flush = time.time()

        self._drain(batch)
        if batch:
            self._flush_batch(batch)

    def flush(self) -> int:
        """Synchronously write everything currently queued. Returns the count written."""
        batch: List[SearchAnalyticsRecord] = []
        self._drain(batch)
        if batch:
            self._flush_batch(batch)
        return len(batch)

    def _flush_batch(self, batch: List[SearchAnalyticsRecord]):
        try:
            self.storage.record_searches_batch(batch)
            logger.debug(f"Flushed {len(batch)} search log entries")
        except Exception as e:
            logger.error(f"Failed to flush search log batch: {e}")
