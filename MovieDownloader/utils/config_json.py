# 14.10.26

import os
import copy
import json
import logging
from typing import Any, Dict, List, Optional


# Variable
logger = logging.getLogger(__name__)
CONFIG_ENV = "MOVIE_DOWNLOADER_CONFIG"
CONFIG_FILENAME = "config.json"

DEFAULT_CONFIG: Dict[str, Dict[str, Any]] = {
    "DEFAULT": {
        "debug": False,
        "log_to_file": False,
        "log_file": "app.log"
    },
    "SITE": {
        "full_url": "https://streamingcommunityz.bid",
        "languages": ["it", "en"]
    },
    "REQUESTS": {
        "timeout": 20,
        "max_retry": 4,
        "backoff_factor": 0.5,
        "max_backoff": 8,
        "verify": True,
        "user_agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/129.0.0.0 Safari/537.36"
    },
    "SEARCH": {
        "match_exact": True,
        "match_estimate": True,
        "estimate_threshold": 0.6
    },
    "DOWNLOAD": {
        "thread_count": 8,
        "quality": "best",
        "extension": "mp4"
    }
}


class ConfigManager:
    def __init__(self, file_path: Optional[str] = None):
        """
        Load configuration defaults and merge the optional user file on top.

        Parameters:
            - file_path (str, optional): Explicit path to a JSON config file. Falls back to
              the MOVIE_DOWNLOADER_CONFIG environment variable, then ./config.json.
        """
        self.file_path = file_path or os.environ.get(CONFIG_ENV) or os.path.join(os.getcwd(), CONFIG_FILENAME)
        self.config: Dict[str, Dict[str, Any]] = copy.deepcopy(DEFAULT_CONFIG)
        self.load()

    def load(self) -> None:
        if not os.path.isfile(self.file_path):
            logger.debug(f"No config file at {self.file_path}, using defaults")
            return

        try:
            with open(self.file_path, "r", encoding="utf-8") as f:
                user_config = json.load(f)

        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error reading config file {self.file_path}: {e}")
            raise

        for section, values in user_config.items():
            if not isinstance(values, dict):
                logger.warning(f"Ignoring config section {section}: expected an object")
                continue
            self.config.setdefault(section, {}).update(values)

    def get(self, section: str, key: str, default: Any = None) -> Any:
        """Return the raw value stored under section/key, or default when missing."""
        return self.config.get(section, {}).get(key, default)

    def get_int(self, section: str, key: str, default: int = 0) -> int:
        value = self.get(section, key, default)
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning(f"Config {section}.{key}={value!r} is not an int, using {default}")
            return default

    def get_float(self, section: str, key: str, default: float = 0.0) -> float:
        value = self.get(section, key, default)
        try:
            return float(value)
        except (TypeError, ValueError):
            logger.warning(f"Config {section}.{key}={value!r} is not a float, using {default}")
            return default

    def get_bool(self, section: str, key: str, default: bool = False) -> bool:
        value = self.get(section, key, default)
        if isinstance(value, str):
            return value.strip().lower() in ("1", "true", "yes", "on")
        return bool(value)

    def get_list(self, section: str, key: str, default: Optional[List[Any]] = None) -> List[Any]:
        value = self.get(section, key, default)
        if value is None:
            return []
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return list(value)

    def get_dict(self, section: str, key: str) -> Dict[str, Any]:
        value = self.get(section, key)
        if not isinstance(value, dict):
            raise KeyError(f"{section}.{key}")
        return value


config_manager = ConfigManager()
