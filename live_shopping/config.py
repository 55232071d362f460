"""
Environment configuration for the live shopping service.

Values are layered, later sources winning:
1) `env.example` (committed, safe placeholders)
2) `env.local` (optional, MUST NOT be committed)
3) process environment
"""

import os
from pathlib import Path

from dotenv import dotenv_values
from loguru import logger

PROJECT_ROOT = Path(__file__).parent.parent
ENV_FILES = ("env.example", "env.local")

_TRUTHY = {"true", "1", "yes", "on"}


class EnvironConfig:
    """
    Process-wide singleton giving dict-style access to the merged environment.
    """

    _instance = None
    _initialized = False

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if not self._initialized:
            self._config: dict[str, str | None] = {}
            self._load_config()
            EnvironConfig._initialized = True

    def _load_config(self):
        for name in ENV_FILES:
            path = PROJECT_ROOT / name
            if path.exists():
                self._config.update(dotenv_values(path))
                logger.info("Loaded environment variables from {}", path)
        self._config.update(os.environ)

    def reload(self):
        """Re-read env files and the process environment."""
        self._config.clear()
        self._load_config()
        logger.info("Configuration reloaded")

    def __getitem__(self, key):
        if key not in self._config:
            raise KeyError(f"Configuration key '{key}' not found")
        return self._config[key]

    def __contains__(self, key):
        return key in self._config

    def get(self, key, default=None):
        return self._config.get(key, default)

    def items(self):
        return self._config.items()

    def get_bool(self, key: str, default: bool = False) -> bool:
        """Blank or missing values give ``default``; true/1/yes/on are true."""
        value = (self.get(key) or "").strip()
        if not value:
            return default
        return value.lower() in _TRUTHY

    def get_postgres_url(self, label: str = "default") -> str:
        """
        Connection URL for a Postgres label.

        The default label reads POSTGRES_URL_DEFAULT, then POSTGRES_URL, then a
        local fallback. Other labels read POSTGRES_URL_<LABEL> and return an
        empty string when it is not set.
        """
        if label == "default":
            return (
                self.get("POSTGRES_URL_DEFAULT")
                or self.get("POSTGRES_URL")
                or "postgresql://localhost:5432/postgres"
            )
        return self.get(f"POSTGRES_URL_{label.upper()}") or ""


config = EnvironConfig()
