"""Configuration management module for the furniture search engine."""

from .engine_config import EngineConfig, apply_env_overrides, ENV_PREFIX
from .config_storage import ConfigStorage
from .config_validator import ConfigValidator

__all__ = [
    'EngineConfig',
    'apply_env_overrides',
    'ENV_PREFIX',
    'ConfigStorage',
    'ConfigValidator'
]
