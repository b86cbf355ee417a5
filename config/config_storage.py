"""Configuration persistence and storage."""

import json
import logging
from pathlib import Path
from typing import Optional, Dict, Any, List
from datetime import datetime
import shutil

from filelock import FileLock

from .engine_config import EngineConfig, apply_env_overrides

logger = logging.getLogger(__name__)


class ConfigStorage:
    """Handles configuration file persistence."""

    CONFIG_FILENAME = "engine_config.json"
    CONFIG_DIR = ".furniture_search"

    def __init__(self, base_path: Optional[str] = None):
        """Initialize configuration storage."""
        self.base_path = Path(base_path) if base_path else Path.cwd()
        self.config_dir = self.base_path / self.CONFIG_DIR
        self.config_file = self.config_dir / self.CONFIG_FILENAME
        self.lock_path = str(self.config_file) + '.lock'

    def _ensure_config_dir(self) -> None:
        self.config_dir.mkdir(parents=True, exist_ok=True)

    def load_config(self) -> EngineConfig:
        """
        Load configuration from file.

        Returns:
            The stored EngineConfig, or defaults if the file is missing or invalid
        """
        if not self.config_file.exists():
            return EngineConfig()

        try:
            with open(self.config_file, 'r') as f:
                data = json.load(f)
            return EngineConfig.from_dict(data)
        except (json.JSONDecodeError, TypeError, ValueError) as e:
            logger.warning(f"Failed to load config from {self.config_file}, using defaults: {e}")
            return EngineConfig()

    def load_effective_config(self, environ=None) -> EngineConfig:
        """Stored configuration with environment overrides applied."""
        return apply_env_overrides(self.load_config(), environ)

    def save_config(self, config: EngineConfig) -> None:
        """
        Save configuration to file with atomic write.

        Args:
            config: Configuration to save
        """
        self._ensure_config_dir()
        json_content = json.dumps(config.to_dict(), indent=2)

        temp_file = self.config_file.with_suffix('.tmp')
        with FileLock(self.lock_path):
            try:
                with open(temp_file, 'w') as f:
                    f.write(json_content)

                if self.config_file.exists():
                    backup_file = self.config_file.with_suffix('.backup')
                    shutil.copy2(self.config_file, backup_file)

                temp_file.replace(self.config_file)
            except Exception:
                if temp_file.exists():
                    temp_file.unlink()
                raise

        logger.info(f"Saved engine configuration to {self.config_file}")

    def backup_config(self) -> Optional[Path]:
        """
        Create a timestamped backup of current configuration.

        Returns:
            Path to backup file if created, None if no config exists
        """
        if not self.config_file.exists():
            return None

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        backup_path = self.config_dir / "backups" / f"engine_config_{timestamp}.json"
        backup_path.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(self.config_file, backup_path)
        return backup_path

    def list_backups(self) -> List[Dict[str, Any]]:
        """List all configuration backups, newest first."""
        backup_dir = self.config_dir / "backups"
        if not backup_dir.exists():
            return []

        backups = []
        for backup_file in backup_dir.glob("engine_config_*.json"):
            stat = backup_file.stat()
            backups.append({
                "filename": backup_file.name,
                "path": str(backup_file),
                "size": stat.st_size,
                "modified": datetime.fromtimestamp(stat.st_mtime)
            })

        backups.sort(key=lambda x: x["modified"], reverse=True)
        return backups

    def get_config_path(self) -> Path:
        return self.config_file
