"""
Environment layer behind `app_config`.

Hidden dotfiles are never read. Sources, lowest priority first:
1) `env.example` (committed placeholders)
2) `env.local` (optional, developer-local)
3) The process environment
"""

import os
from pathlib import Path

from dotenv import dotenv_values
from loguru import logger

ENV_FILES = ("env.example", "env.local")


class EnvironConfig:
    """Singleton holding the merged key/value view of the sources above."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._values = {}
            cls._instance._load()
        return cls._instance

    def _load(self):
        root = Path(__file__).parent.parent.parent
        for name in ENV_FILES:
            path = root / name
            if path.exists():
                self._values.update(dotenv_values(path))
                logger.debug("Loaded environment file {}", path)

        self._values.update(os.environ)

    def get(self, key, default=None):
        return self._values.get(key, default)

    def reload(self):
        """Re-read the env files and the process environment (used by tests)."""
        self._values = {}
        self._load()


config = EnvironConfig()
