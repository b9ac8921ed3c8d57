import os
import configparser
import threading
from enum import StrEnum

import appdirs

from .logger import setup_logger, APP_NAME, APP_AUTHOR
from .constants import (
    MAX_TAGS,
    MAX_GAMES,
    MAX_FETCHED_GAMES,
    DUPLICATE_NOTICE_THRESHOLD,
)

logger = setup_logger()

DEFAULT_CATALOG_URL = "https://catalog.yam.local/api"
DEFAULT_REQUEST_TIMEOUT = 30


def get_config_dir():
    """Get the directory for storing configuration and database files"""
    config_dir = appdirs.user_config_dir(APP_NAME, APP_AUTHOR)
    os.makedirs(config_dir, exist_ok=True)
    return config_dir


def get_config_path():
    """Get the path for storing configuration files"""
    return os.path.join(get_config_dir(), "config.ini")


class ConfigSection(StrEnum):
    CATALOG = "Catalog"
    RECOMMENDATIONS = "Recommendations"
    LIBRARY = "Library"
    STORAGE = "Storage"


class CatalogKey(StrEnum):
    BASE_URL = "BaseUrl"
    REQUEST_TIMEOUT = "RequestTimeout"
    USER_AGENT = "UserAgent"


class RecommendationKey(StrEnum):
    MAX_TAGS = "MaxTags"
    MAX_GAMES = "MaxGames"
    MAX_FETCHED_GAMES = "MaxFetchedGames"


class LibraryKey(StrEnum):
    DUPLICATE_NOTICE_THRESHOLD = "DuplicateNoticeThreshold"


class StorageKey(StrEnum):
    DATABASE_PATH = "DatabasePath"


DEFAULTS = {
    ConfigSection.CATALOG: {
        CatalogKey.BASE_URL: DEFAULT_CATALOG_URL,
        CatalogKey.REQUEST_TIMEOUT: str(DEFAULT_REQUEST_TIMEOUT),
        CatalogKey.USER_AGENT: "YAM-Library",
    },
    ConfigSection.RECOMMENDATIONS: {
        RecommendationKey.MAX_TAGS: str(MAX_TAGS),
        RecommendationKey.MAX_GAMES: str(MAX_GAMES),
        RecommendationKey.MAX_FETCHED_GAMES: str(MAX_FETCHED_GAMES),
    },
    ConfigSection.LIBRARY: {
        LibraryKey.DUPLICATE_NOTICE_THRESHOLD: str(DUPLICATE_NOTICE_THRESHOLD),
    },
    ConfigSection.STORAGE: {
        StorageKey.DATABASE_PATH: "",
    },
}


class ConfigManager(configparser.ConfigParser):
    _instance = None
    _lock = threading.Lock()

    def __new__(cls, *args, **kwargs):
        with cls._lock:
            if cls._instance is None:
                cls._instance = super(ConfigManager, cls).__new__(cls)
        return cls._instance

    def __init__(self):
        with self._lock:
            if hasattr(self, "initialized"):
                return
            super().__init__()
            self.logger = setup_logger()
            self.config_path = get_config_path()
            self.read(self.config_path)

            # Add missing sections and keys (for configs written by older versions)
            changed = False
            for section, values in DEFAULTS.items():
                if not self.has_section(section):
                    self.add_section(section)
                    changed = True
                for key, value in values.items():
                    if key not in self[section]:
                        self[section][key] = value
                        changed = True
            if changed:
                self.save()

            self.initialized = True

    def save(self):
        with open(self.config_path, "w") as configfile:
            self.write(configfile)

    def get_int(self, section: ConfigSection, key: StrEnum) -> int:
        """Read an integer setting, falling back to the default on invalid values"""
        default = int(DEFAULTS[section][key])
        try:
            value = self[section].getint(key, fallback=default)
        except ValueError:
            self.logger.warning(f"Invalid value for {section}.{key}, using {default}")
            return default
        if value < 0:
            self.logger.warning(f"Negative value for {section}.{key}, using {default}")
            return default
        return value

    def set_value(self, section: ConfigSection, key: StrEnum, value):
        self.logger.debug(f"Updating {section}.{key}.")
        self[section][key] = str(value)
        self.save()

    @property
    def catalog_base_url(self) -> str:
        return self[ConfigSection.CATALOG].get(CatalogKey.BASE_URL) or DEFAULT_CATALOG_URL

    @property
    def catalog_timeout(self) -> int:
        return self.get_int(ConfigSection.CATALOG, CatalogKey.REQUEST_TIMEOUT)

    @property
    def user_agent(self) -> str:
        return self[ConfigSection.CATALOG].get(CatalogKey.USER_AGENT, "YAM-Library")

    @property
    def duplicate_notice_threshold(self) -> int:
        return self.get_int(ConfigSection.LIBRARY, LibraryKey.DUPLICATE_NOTICE_THRESHOLD)

    @property
    def database_path(self) -> str:
        path = self[ConfigSection.STORAGE].get(StorageKey.DATABASE_PATH, "")
        return path or os.path.join(get_config_dir(), "games.db")

    def recommendation_limits(self) -> tuple[int, int, int]:
        """Return (max_tags, max_games, max_fetched_games)"""
        section = ConfigSection.RECOMMENDATIONS
        return (
            self.get_int(section, RecommendationKey.MAX_TAGS),
            self.get_int(section, RecommendationKey.MAX_GAMES),
            self.get_int(section, RecommendationKey.MAX_FETCHED_GAMES),
        )


config_manager = None


def get_config_manager() -> ConfigManager:
    """Create the configuration singleton on first use"""
    global config_manager
    if config_manager is None:
        config_manager = ConfigManager()
    return config_manager
