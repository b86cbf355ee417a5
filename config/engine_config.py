"""Engine configuration model and environment overrides."""

from dataclasses import dataclass, asdict, fields
from typing import Any, Dict, Mapping, Optional
import os

ENV_PREFIX = 'FURNITURE_SEARCH_'
CONFIG_VERSION = "1.0"


@dataclass
class EngineConfig:
    """Settings shared by the search service, analytics and offline jobs."""
    db_path: str = "furniture_search.db"
    locale: str = "en"
    min_query_length: int = 2
    max_terms: int = 20
    default_per_page: int = 50
    max_per_page: int = 100
    query_timeout_ms: int = 5000
    synonym_cache_ttl_seconds: int = 300
    category_cache_ttl_seconds: int = 300
    fuzzy_cache_size: int = 100
    search_logging_enabled: bool = True
    analytics_retention_days: int = 90
    analytics_batch_size: int = 100
    analytics_flush_interval: float = 5.0
    auto_discovery_min_confidence: float = 0.7
    auto_discovery_lookback_days: int = 30

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        data = asdict(self)
        data['version'] = CONFIG_VERSION
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'EngineConfig':
        """Create from dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    def search_config(self):
        """Per-call search defaults derived from this configuration."""
        from search.search_service import SearchConfig
        return SearchConfig(
            log_search=self.search_logging_enabled,
            min_query_length=self.min_query_length,
            max_terms=self.max_terms,
            default_per_page=self.default_per_page,
            max_per_page=self.max_per_page,
            query_timeout_ms=self.query_timeout_ms
        )


def _coerce(raw: str, target_type: type, name: str) -> Any:
    if target_type is bool:
        lowered = raw.strip().lower()
        if lowered in ('1', 'true', 'yes', 'on'):
            return True
        if lowered in ('0', 'false', 'no', 'off'):
            return False
        raise ValueError(f"Invalid value for {name}: '{raw}'. Expected a boolean")
    try:
        return target_type(raw)
    except ValueError as e:
        raise ValueError(f"Invalid value for {name}: '{raw}'. {e}") from e


def apply_env_overrides(config: EngineConfig,
                        environ: Optional[Mapping[str, str]] = None) -> EngineConfig:
    """
    Apply ``FURNITURE_SEARCH_<FIELD>`` environment variables to a config.

    Examples: FURNITURE_SEARCH_LOCALE=fr, FURNITURE_SEARCH_DB_PATH=/data/catalog.db

    Args:
        config: Configuration to update in place
        environ: Environment mapping, ``os.environ`` by default

    Returns:
        The updated configuration

    Raises:
        ValueError: If an environment variable value cannot be converted
    """
    environ = os.environ if environ is None else environ
    defaults = EngineConfig()

    for f in fields(EngineConfig):
        name = f"{ENV_PREFIX}{f.name.upper()}"
        raw = environ.get(name)
        if raw is None or raw == '':
            continue
        target_type = type(getattr(defaults, f.name))
        setattr(config, f.name, _coerce(raw, target_type, name))

    return config
