from .version import __version__
from .logger import setup_logger
from .normalizer import (
    normalize,
    clean_game_name,
    extract_version,
    extract_thread_id,
    comparison_key,
)
from .ranking import most_frequent, top_n
from .database import DatabaseManager, InMemoryRecordStore, SqliteRecordStore
from .catalog import CatalogError, HttpCatalog
from .dedup import DedupResolver
from .importer import LibraryImporter
from .thread_sync import ThreadSyncEngine
from .update_feed import UpdateFeedBuilder
from .recommender import RecommendationEngine
from .service import LibraryService

__all__ = [
    "__version__",
    "setup_logger",
    "normalize",
    "clean_game_name",
    "extract_version",
    "extract_thread_id",
    "comparison_key",
    "most_frequent",
    "top_n",
    "DatabaseManager",
    "InMemoryRecordStore",
    "SqliteRecordStore",
    "CatalogError",
    "HttpCatalog",
    "DedupResolver",
    "LibraryImporter",
    "ThreadSyncEngine",
    "UpdateFeedBuilder",
    "RecommendationEngine",
    "LibraryService",
]
