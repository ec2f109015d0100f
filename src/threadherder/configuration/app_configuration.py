from __future__ import annotations
from datetime import timedelta
import os
from pathlib import Path
import fcntl
from typing import Any, Dict
import yaml

from threadherder.datatypes.lifecycle_datatypes import LifecycleThresholds
from threadherder.util.logger import get_logger

logger = get_logger("app_configuration")


CONFIG_PATH = Path(os.getenv("THREADHERDER_CONFIG", "./config/app_config.yml")).resolve()

DEFAULT_GC_INTERVAL = 60.0
DEFAULT_SOLVED_TIMEOUT = 60.0 * 60
DEFAULT_STALE_TIMEOUT = 7 * 24 * 60 * 60.0
DEFAULT_STALE_GRACE_PERIOD = 7 * 24 * 60 * 60.0
DEFAULT_SOLVED_TAG = "solved"
DEFAULT_STALE_TAG = "stale"


class AppConfig:
    """File-lock based accessor around the YAML application configuration.

    The class caches the contents of ``./config/app_config.yml``, exposes
    dictionary-like access helpers and typed shortcuts for the sweep interval,
    lifecycle thresholds, tag names and permission overrides. Missing or
    malformed values fall back to defaults.
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
            logger.warning("[APP CONFIGURATION] Config file %s not found; using defaults.", self.config_path)
            return {}
        except Exception as exc:
            logger.error("[APP CONFIGURATION] Failed to load config %s: %s", self.config_path, exc)
            return {}

        if not isinstance(data, dict):
            if data is not None:
                logger.error("[APP CONFIGURATION] Config %s is not a mapping; using defaults.", self.config_path)
            return {}
        return data

    def _section(self, name: str) -> Dict[str, Any]:
        section = self._data.get(name, {})
        return section if isinstance(section, dict) else {}

    def _positive_seconds(self, section: str, key: str, default: float) -> float:
        raw = self._section(section).get(key, default)
        try:
            value = float(raw)
        except (TypeError, ValueError):
            logger.warning("[APP CONFIGURATION] %s.%s=%r is not a number; using %.0f", section, key, raw, default)
            return default
        if value <= 0:
            logger.warning("[APP CONFIGURATION] %s.%s must be positive; using %.0f", section, key, default)
            return default
        return value

    def _id_list(self, section: str, key: str) -> frozenset[int]:
        raw = self._section(section).get(key) or []
        if not isinstance(raw, (list, tuple)):
            raw = [raw]
        ids = set()
        for item in raw:
            try:
                ids.add(int(item))
            except (TypeError, ValueError):
                logger.warning("[APP CONFIGURATION] Ignoring invalid id %r in %s.%s", item, section, key)
        return frozenset(ids)

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
        """Return the current cached configuration mapping.

        The returned dict is the internal cache. Callers should not mutate it.
        """
        return self._data

    def get(self, key: str, default: Any = None) -> Any:
        """Safe lookup for top-level configuration keys."""
        return self._data.get(key, default)

    # --------------------------
    # High-level shortcuts
    # --------------------------
    @property
    def gc_interval(self) -> float:
        """Seconds between two garbage collection sweeps. Default 60."""
        return self._positive_seconds("garbage_collection", "interval_seconds", DEFAULT_GC_INTERVAL)

    @property
    def lifecycle_thresholds(self) -> LifecycleThresholds:
        """Return the solved/stale thresholds as a :class:`LifecycleThresholds`."""
        return LifecycleThresholds(
            solved_timeout=timedelta(
                seconds=self._positive_seconds("lifecycle", "solved_timeout_seconds", DEFAULT_SOLVED_TIMEOUT)
            ),
            stale_timeout=timedelta(
                seconds=self._positive_seconds("lifecycle", "stale_timeout_seconds", DEFAULT_STALE_TIMEOUT)
            ),
            stale_grace_period=timedelta(
                seconds=self._positive_seconds("lifecycle", "stale_grace_period_seconds", DEFAULT_STALE_GRACE_PERIOD)
            ),
        )

    @property
    def solved_tag_name(self) -> str:
        return str(self._section("tags").get("solved") or DEFAULT_SOLVED_TAG)

    @property
    def stale_tag_name(self) -> str:
        return str(self._section("tags").get("stale") or DEFAULT_STALE_TAG)

    @property
    def moderator_role_ids(self) -> frozenset[int]:
        """Role ids allowed to mark any thread as solved."""
        return self._id_list("permissions", "moderator_role_ids")

    @property
    def bypass_user_ids(self) -> frozenset[int]:
        """User ids allowed to mark any thread as solved regardless of roles."""
        return self._id_list("permissions", "bypass_user_ids")

    @property
    def log_directory(self) -> str | None:
        """Directory for session log files, or None to log to the console only."""
        value = self._section("logging").get("directory")
        return str(value) if value else None


# Shared application-wide configuration instance
app_config = AppConfig(CONFIG_PATH)
