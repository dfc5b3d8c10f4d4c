"""
Where todo keeps its files, and the saved server connection.

Directory lookup order:
    1. explicit path (``--data-dir`` / ``--config-dir``)
    2. ``TODO_DATA_DIR`` / ``TODO_CONFIG_DIR``
    3. the platform's per-user data/config directory, under ``todo/``
"""

import json
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

APP_NAME = 'todo'
DATA_FILE = 'todos.json'
CLOUD_CONFIG_FILE = 'cloud.json'
DEFAULT_PORT = '6982'


class ConfigError(Exception):
    """Raised when the connection configuration cannot be read or written."""


def _platform_base(kind: str) -> Path:
    """Per-user base directory for 'data' or 'config' files."""
    home = Path.home()
    if sys.platform == 'win32':
        return Path(os.environ.get('APPDATA', home / 'AppData' / 'Roaming'))
    if sys.platform == 'darwin':
        return home / 'Library' / 'Application Support'
    if kind == 'config':
        return Path(os.environ.get('XDG_CONFIG_HOME', home / '.config'))
    return Path(os.environ.get('XDG_DATA_HOME', home / '.local' / 'share'))


def data_dir(override: Optional[str] = None) -> Path:
    if override:
        return Path(override)
    if os.environ.get('TODO_DATA_DIR'):
        return Path(os.environ['TODO_DATA_DIR'])
    return _platform_base('data') / APP_NAME


def config_dir(override: Optional[str] = None) -> Path:
    if override:
        return Path(override)
    if os.environ.get('TODO_CONFIG_DIR'):
        return Path(os.environ['TODO_CONFIG_DIR'])
    return _platform_base('config') / APP_NAME


@dataclass
class CloudConfig:
    host: str
    port: str = DEFAULT_PORT

    def to_dict(self) -> dict:
        return {'host': self.host, 'port': self.port}

    @classmethod
    def from_dict(cls, data: dict) -> 'CloudConfig':
        return cls(host=str(data['host']), port=str(data.get('port', DEFAULT_PORT)))


class ConnectionConfig:
    """
    The saved link to a remote server.

    Its presence at startup is what switches the CLI into remote mode.
    """

    def __init__(self, directory: Path):
        self.path = Path(directory) / CLOUD_CONFIG_FILE

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> Optional[CloudConfig]:
        """Return the saved connection, or None when unlinked."""
        if not self.path.exists():
            return None
        try:
            return CloudConfig.from_dict(json.loads(self.path.read_text(encoding='utf-8')))
        except (OSError, json.JSONDecodeError, KeyError, TypeError) as e:
            raise ConfigError(f"could not read {self.path}: {e}") from e

    def save(self, host: str, port: Optional[str] = None) -> CloudConfig:
        cloud = CloudConfig(host=host, port=port or DEFAULT_PORT)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(cloud.to_dict()), encoding='utf-8')
        except OSError as e:
            raise ConfigError(str(e)) from e
        logger.info(f"Linked server {cloud.host}:{cloud.port}")
        return cloud

    def remove(self):
        """
        Delete the saved connection.

        Raises:
            FileNotFoundError: if no connection is saved
            OSError: if the file exists but cannot be removed
        """
        self.path.unlink()
        logger.info("Unlinked server")
