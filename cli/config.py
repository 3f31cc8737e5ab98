"""Configuration management for the chunkrelay CLI."""

import json
import logging
import os
import shutil
import tempfile
from pathlib import Path

from common.constants import DEFAULT_CHUNK_SIZE_BYTES, DEFAULT_SERVER_PORT

logger = logging.getLogger(__name__)


class Config:
    """Upload settings persisted as JSON (server address, retry policy, chunk size)."""

    DEFAULT_CONFIG = {
        "server_host": os.environ.get("CHUNKRELAY_SERVER_HOST", "localhost"),
        "server_port": int(os.environ.get("CHUNKRELAY_SERVER_PORT", str(DEFAULT_SERVER_PORT))),
        "timeout": 30,
        "max_retries": 3,
        "retry_backoff_multiplier": 2,
        "chunk_size": DEFAULT_CHUNK_SIZE_BYTES,
    }

    def __init__(self, config_path: Path):
        """
        Args:
            config_path: Settings file, normally ~/.chunkrelay/config.json
        """
        self.config_path = self._writable_path(Path(config_path))
        self.data = dict(self.DEFAULT_CONFIG)

        stored = self._read_stored()
        if stored is None:
            self._persist()
        else:
            self.data.update(stored)

    @staticmethod
    def _writable_path(config_path: Path) -> Path:
        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)
            return config_path
        except PermissionError:
            fallback = Path(tempfile.gettempdir()) / '.chunkrelay' / config_path.name
            fallback.parent.mkdir(parents=True, exist_ok=True)
            logger.warning(f"Cannot create {config_path.parent}, keeping settings in {fallback}")
            return fallback

    def _read_stored(self):
        """
        Read the settings file.

        A file that is not valid JSON is copied aside to `.json.bak` and
        treated as empty so the defaults apply.

        Returns:
            Stored settings, {} for an unreadable file, None if there is no file yet
        """
        if not self.config_path.exists():
            return None

        try:
            stored = json.loads(self.config_path.read_text())
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Unreadable config {self.config_path}, using defaults: {e}")
            backup_path = self.config_path.with_suffix('.json.bak')
            try:
                shutil.copy(self.config_path, backup_path)
            except OSError as copy_error:
                logger.warning(f"Could not back up config to {backup_path}: {copy_error}")
            return {}

        if not isinstance(stored, dict):
            logger.warning(f"Ignoring config {self.config_path}: expected a JSON object")
            return {}
        return stored

    def _persist(self) -> None:
        try:
            self.config_path.write_text(json.dumps(self.data, indent=2))
        except OSError as e:
            logger.warning(f"Could not write config to {self.config_path}: {e}")

    def save(self) -> None:
        """Write current settings back to the config file."""
        self.config_path.write_text(json.dumps(self.data, indent=2))

    def get_base_url(self) -> str:
        """Assembler base URL, e.g. "http://localhost:8000"."""
        return f"http://{self.data['server_host']}:{self.data['server_port']}"

    def get_timeout(self) -> int:
        return self.data['timeout']

    def get_chunk_size(self) -> int:
        return self.data['chunk_size']

    def set_chunk_size(self, chunk_size: int) -> None:
        if isinstance(chunk_size, bool) or not isinstance(chunk_size, int) or chunk_size <= 0:
            raise ValueError(f"chunk_size must be a positive integer, got {chunk_size!r}")
        self.data['chunk_size'] = chunk_size
        self.save()

    def get_retry_config(self) -> dict:
        """
        Returns:
            Dictionary with 'max_retries' and 'retry_backoff_multiplier'
        """
        return {
            'max_retries': self.data['max_retries'],
            'retry_backoff_multiplier': self.data['retry_backoff_multiplier'],
        }
