from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
import fcntl
import os
from typing import Any, Dict
import yaml

from runbot.util.logger import get_logger

logger = get_logger("app_configuration")


CONFIG_PATH = Path("./config/app_config.yml").resolve()

DEFAULT_CATALOG_PATH = "./config/catalog.yml"
DEFAULT_REDIS_URL = "redis://localhost:6379/0"


@dataclass(frozen=True, slots=True)
class RedisSettings:
    """Connection settings for the settings store backend."""

    url: str = DEFAULT_REDIS_URL
    socket_timeout: float = 5.0
    socket_connect_timeout: float = 5.0
    key_prefix: str = ""
    max_connections: int = 16


class AppConfig:
    """File-lock based accessor around the YAML application configuration.

    The class caches the contents of ``./config/app_config.yml`` and exposes
    typed shortcuts for the catalog location, the Redis connection and the
    chat command prefix. Uses fcntl file locks for safe concurrent access
    across processes.
    """

    def __init__(self, config_path: Path) -> None:
        self.config_path = config_path
        self._data: Dict[str, Any] = {}
        self.reload()

    # --------------------------
    # Private helpers
    # --------------------------
    def load_from_disk(self) -> Dict[str, Any]:
        try:
            with self.config_path.open("r", encoding="utf-8") as f:
                fcntl.flock(f.fileno(), fcntl.LOCK_SH)
                data = yaml.safe_load(f)
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        except FileNotFoundError:
            logger.error("[APP CONFIGURATION] Config file %s not found.", self.config_path)
            return {}
        except (OSError, yaml.YAMLError) as exc:
            logger.error("[APP CONFIGURATION] Failed to load config %s: %s", self.config_path, exc)
            return {}

        if not isinstance(data, dict):
            if data is not None:
                logger.error("[APP CONFIGURATION] Config %s is not a mapping; ignoring it", self.config_path)
            return {}
        return data

    def _section(self, name: str) -> Dict[str, Any]:
        section = self._data.get(name, {})
        return section if isinstance(section, dict) else {}

    # --------------------------
    # Public API
    # --------------------------
    def reload(self) -> Dict[str, Any]:
        """Reload configuration from disk and return the loaded mapping.

        Returns the raw mapping that was loaded (an empty dict on error).
        """
        self._data = self.load_from_disk()
        return self._data

    @property
    def data(self) -> Dict[str, Any]:
        """Return the current cached configuration mapping."""
        return self._data

    def get(self, key: str, default: Any = None) -> Any:
        """Safe lookup for top-level configuration keys."""
        return self._data.get(key, default)

    # --------------------------
    # High-level shortcuts
    # --------------------------
    @property
    def catalog_path(self) -> Path:
        """Return the path of the language/compiler catalog file."""
        return Path(str(self._data.get("catalog_path") or DEFAULT_CATALOG_PATH)).resolve()

    @property
    def redis_settings(self) -> RedisSettings:
        """Return the Redis connection settings.

        ``RUNBOT_REDIS_URL`` in the environment wins over the ``redis.url``
        key so deployments can point at a different backend without editing
        the file.
        """
        section = self._section("redis")
        url = os.getenv("RUNBOT_REDIS_URL") or section.get("url") or DEFAULT_REDIS_URL
        return RedisSettings(
            url=str(url),
            socket_timeout=float(section.get("socket_timeout", 5.0)),
            socket_connect_timeout=float(section.get("socket_connect_timeout", 5.0)),
            key_prefix=str(section.get("key_prefix") or ""),
            max_connections=int(section.get("max_connections", 16)),
        )
