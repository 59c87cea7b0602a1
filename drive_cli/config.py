"""Configuration management for the drive CLI."""

import json
import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional

from drive_cli.constants import CONFIG_DIR_NAME, DEFAULT_API_URL
from drive_common.logging_config import get_logger

logger = get_logger(__name__)


def default_config_path() -> Path:
    return Path.home() / CONFIG_DIR_NAME / 'config.json'


class Config:
    """Manages CLI configuration stored in JSON file."""

    DEFAULT_CONFIG = {
        "api_url": os.environ.get("DRIVE_API_URL", DEFAULT_API_URL),
        "timeout": 30,
        "max_retries": 3,
        "retry_backoff_multiplier": 2,
    }

    def __init__(self, config_path: Path):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to config JSON file (typically ~/.clouddrive/config.json)
        """
        self.config_path = config_path
        self.data = self._load()

    def _load(self) -> dict:
        """
        Load configuration from file, creating defaults if necessary.

        A corrupt file is backed up to config.json.bak and replaced by defaults.
        """
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
        except PermissionError:
            self.config_path = Path(tempfile.gettempdir()) / CONFIG_DIR_NAME / 'config.json'
            self.config_path.parent.mkdir(parents=True, exist_ok=True)

        if self.config_path.exists():
            try:
                with open(self.config_path, 'r') as f:
                    data = json.load(f)
                config = self.DEFAULT_CONFIG.copy()
                config.update(data)
                return config
            except (json.JSONDecodeError, OSError) as e:
                logger.warning(f"Config file unreadable, using defaults: {e}")
                backup_path = self.config_path.with_suffix('.json.bak')
                try:
                    shutil.copy(self.config_path, backup_path)
                except OSError as copy_error:
                    logger.warning(f"Could not back up config file: {copy_error}")
                return self.DEFAULT_CONFIG.copy()

        config = self.DEFAULT_CONFIG.copy()
        try:
            with open(self.config_path, 'w') as f:
                json.dump(config, f, indent=2)
        except OSError as e:
            logger.warning(f"Could not write default config: {e}")
        return config

    def save(self) -> None:
        """Save current configuration to file."""
        try:
            with open(self.config_path, 'w') as f:
                json.dump(self.data, f, indent=2)
        except OSError as e:
            logger.warning(f"Could not save config: {e}")

    def get_api_key(self) -> Optional[str]:
        return self.data.get('api_key')

    def set_api_key(self, key: str) -> None:
        """
        Set API key and save to file.

        Args:
            key: API key string (format: "drv_<uuid>")
        """
        self.data['api_key'] = key
        self.save()

    def get_base_url(self) -> str:
        """
        Get API base URL without a trailing slash.
        """
        return str(self.data.get('api_url', DEFAULT_API_URL)).rstrip('/')

    def get_timeout(self) -> int:
        return self.data.get('timeout', 30)

    def get_retry_config(self) -> dict:
        """
        Get retry configuration.

        Returns:
            Dictionary with 'max_retries' and 'retry_backoff_multiplier'
        """
        return {
            'max_retries': self.data.get('max_retries', 3),
            'retry_backoff_multiplier': self.data.get('retry_backoff_multiplier', 2),
        }
