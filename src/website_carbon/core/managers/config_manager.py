# src/website_carbon/core/managers/config_manager.py
import json
import logging
from typing import Any, Dict, Optional

from website_carbon.core.utils.path_utils import PathUtils

logger = logging.getLogger(__name__)

TRUE_STRINGS = ("1", "true", "yes", "on")


def _cast_like(current: Any, value: Any) -> Any:
    """
    Converts `value` to the type of the setting it replaces, so that
    'measure.concurrency=5' given as text stays an int.
    """
    if current is None or isinstance(current, (dict, list)) or isinstance(value, type(current)):
        return value
    if isinstance(current, bool):
        return str(value).strip().lower() in TRUE_STRINGS
    return type(current)(value)


class ConfigManager:
    """
    Process-wide access to settings.json.

    The file is read once; `set_nested` changes only the in-memory copy
    (command line overrides for one run) and `reset` rereads the file.
    """
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            instance = super().__new__(cls)
            instance._config = {}
            instance.reset()
            cls._instance = instance
        return cls._instance

    def section(self, name: str) -> Dict[str, Any]:
        """A copy of one top-level section, empty when it is missing."""
        value = self._config.get(name)
        return dict(value) if isinstance(value, dict) else {}

    def get_nested(self, key_path: str, default: Optional[Any] = None) -> Any:
        """Value at a dotted path such as 'discovery.sitemap_timeout', or `default`."""
        node: Any = self._config
        for key in key_path.split('.'):
            if not isinstance(node, dict) or key not in node:
                return default
            node = node[key]
        return default if node is None else node

    def set_nested(self, key_path: str, value: Any) -> bool:
        *parents, leaf = key_path.split('.')
        node = self._config
        for key in parents:
            node = node.setdefault(key, {})
            if not isinstance(node, dict):
                logger.error("Cannot set '%s': '%s' is not a section.", key_path, key)
                return False

        try:
            value = _cast_like(node.get(leaf), value)
        except (TypeError, ValueError):
            logger.warning("Could not convert '%s' for setting '%s'. Storing as given.", value, key_path)

        node[leaf] = value
        logger.debug("Setting changed: %s = %r", key_path, value)
        return True

    def reset(self) -> None:
        """Rereads settings.json; a missing or broken file leaves an empty configuration."""
        settings_file = PathUtils.get_settings_file()
        if not settings_file.exists():
            logger.warning("settings.json not found at %s. Using built-in defaults.", settings_file)
            self._config = {}
            return
        try:
            self._config = json.loads(settings_file.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Failed to load %s: %s", settings_file, e)
            self._config = {}
            return
        logger.debug("Settings loaded from %s.", settings_file)


config_manager = ConfigManager()
