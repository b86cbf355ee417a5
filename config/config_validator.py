"""Configuration validation."""

from typing import Tuple, List

from .engine_config import EngineConfig

SUPPORTED_LOCALES = ("en", "fr")


class ConfigValidator:
    """Validates engine configurations."""

    def validate_config(self, config: EngineConfig) -> Tuple[bool, List[str]]:
        """
        Validate an engine configuration.

        Args:
            config: Configuration to validate

        Returns:
            Tuple of (is_valid, list_of_errors)
        """
        errors = []

        if not config.db_path or not str(config.db_path).strip():
            errors.append("Database path cannot be empty")

        if config.locale not in SUPPORTED_LOCALES:
            errors.append(f"Invalid locale: {config.locale}")

        if config.min_query_length < 1:
            errors.append("Minimum query length must be at least 1")

        if config.max_terms < 1:
            errors.append("Max terms must be positive")
        elif config.max_terms > 100:
            errors.append("Max terms too large (max 100)")

        if config.max_per_page < 1:
            errors.append("Max per page must be positive")
        if not 1 <= config.default_per_page <= max(1, config.max_per_page):
            errors.append("Default per page must be between 1 and max per page")

        if config.query_timeout_ms <= 0:
            errors.append("Query timeout must be positive")

        for name in ('synonym_cache_ttl_seconds', 'category_cache_ttl_seconds'):
            if getattr(config, name) < 0:
                errors.append(f"{name} cannot be negative")

        if config.fuzzy_cache_size < 1:
            errors.append("Fuzzy cache size must be positive")

        if config.analytics_retention_days < 0:
            errors.append("Analytics retention days cannot be negative")
        elif config.analytics_retention_days > 365:
            errors.append("Analytics retention too long (max 365 days)")

        if config.analytics_batch_size < 1:
            errors.append("Analytics batch size must be positive")
        if config.analytics_flush_interval <= 0:
            errors.append("Analytics flush interval must be positive")

        if not 0.0 < config.auto_discovery_min_confidence <= 1.0:
            errors.append("Auto-discovery confidence must be in (0, 1]")
        if config.auto_discovery_lookback_days < 1:
            errors.append("Auto-discovery lookback must be at least one day")

        return len(errors) == 0, errors
