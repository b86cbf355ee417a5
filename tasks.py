from huey import SqliteHuey, crontab
from filelock import FileLock, Timeout
import os
import logging
from typing import Dict, Any, Optional
from functools import lru_cache

from config.config_storage import ConfigStorage
from engine import SearchEngine, build_engine

# Job queue database, separate from the catalog database
HUEY_DB_PATH = os.environ.get('FURNITURE_SEARCH_HUEY_DB', '.furniture_search/huey_jobs.db')
os.makedirs(os.path.dirname(os.path.abspath(HUEY_DB_PATH)), exist_ok=True)

huey = SqliteHuey(
    name='furniture-search-worker',
    filename=HUEY_DB_PATH,
    immediate=False
)

logger = logging.getLogger('furniture-search.tasks')
logger.setLevel(logging.INFO)

# Seconds to wait for another discovery run to release the synonym lock
DISCOVERY_LOCK_TIMEOUT = 5


def setup_logging(log_file_path: str):
    """Set up logging to the specified file."""
    handler = logging.FileHandler(log_file_path)
    handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    ))
    logger.addHandler(handler)


@lru_cache(maxsize=8)
def get_engine(project_root: str) -> SearchEngine:
    """Creates and caches a SearchEngine per project root."""
    config = ConfigStorage(project_root).load_effective_config()
    if not os.path.isabs(config.db_path):
        config.db_path = os.path.join(project_root, config.db_path)
    logger.info(f"Creating or reusing search engine for project: {project_root}")
    return build_engine(config)


def synonym_lock_path(db_path: str) -> str:
    return db_path + '.synonyms.lock'


def run_discovery(engine: SearchEngine, lookback_days: Optional[int] = None,
                  min_confidence: Optional[float] = None,
                  apply: bool = True) -> Dict[str, Any]:
    """
    Analyze search behaviour and optionally create synonyms.

    Holds a file lock on the synonym table so only one discovery run
    mutates synonyms at a time.

    Returns:
        Dict with the suggestion count and created/skipped counts
    """
    config = engine.config
    lookback_days = lookback_days or config.auto_discovery_lookback_days
    min_confidence = min_confidence if min_confidence is not None else config.auto_discovery_min_confidence

    discovery = engine.discovery()
    with FileLock(synonym_lock_path(config.db_path), timeout=DISCOVERY_LOCK_TIMEOUT):
        suggestions = discovery.analyze(lookback_days=lookback_days)
        result = {'created': 0, 'skipped': 0}
        if apply:
            result = discovery.auto_create(suggestions, min_confidence=min_confidence)

    logger.info(f"Discovery: {len(suggestions)} suggestions, "
                f"{result['created']} created, {result['skipped']} skipped")
    return {"success": True, "suggestions": len(suggestions), **result}


@huey.task(retries=2, retry_delay=60)
def run_synonym_discovery(project_root: str, lookback_days: Optional[int] = None,
                          min_confidence: Optional[float] = None) -> Dict[str, Any]:
    """
    Huey task wrapper for synonym auto-discovery.

    Args:
        project_root: Directory holding .furniture_search/engine_config.json
        lookback_days: Analytics window, config default if omitted
        min_confidence: Auto-creation threshold, config default if omitted

    Returns:
        Dict with success status and counts
    """
    logger.info(f"Running synonym discovery for {project_root}...")
    engine = get_engine(project_root)

    try:
        return run_discovery(engine, lookback_days, min_confidence)
    except Timeout:
        # Another run holds the lock; not retriable
        logger.warning(f"Synonym discovery already running for {project_root}, skipping")
        return {"success": False, "error": "discovery already running"}
    except Exception as e:
        logger.error(f"Synonym discovery failed for {project_root}: {e}")
        raise


@huey.task()
def cleanup_analytics(project_root: str, retention_days: Optional[int] = None) -> Dict[str, Any]:
    """Delete analytics rows older than the retention window."""
    engine = get_engine(project_root)
    retention_days = retention_days or engine.config.analytics_retention_days
    deleted = engine.analytics.cleanup_old_data(retention_days)
    return {"success": True, "deleted": deleted, "retention_days": retention_days}


@huey.periodic_task(crontab(minute='15', hour='3'))
def nightly_maintenance():
    """Daily discovery and retention run for the configured project root."""
    project_root = os.environ.get('FURNITURE_SEARCH_PROJECT_ROOT', os.getcwd())
    run_synonym_discovery(project_root)
    cleanup_analytics(project_root)


@huey.task()
def health_check() -> Dict[str, Any]:
    """Simple task to verify worker is running."""
    logger.info("Health check executed")
    return {"status": "ok", "timestamp": os.environ.get('HUEY_WORKER_START_TIME', 'unknown')}
