"""
Application service wiring the library components together.
"""

from typing import Iterable, List, Optional

from yam_library.catalog import CatalogError, RemoteCatalog
from yam_library.config import ConfigManager
from yam_library.database import RecordStore
from yam_library.dedup import DedupResolver
from yam_library.importer import GameSelector, LibraryImporter
from yam_library.logger import setup_logger
from yam_library.models import (
    Dashboard,
    GameRecord,
    ImportReport,
    SyncReport,
    ThreadRecord,
)
from yam_library.recommender import RecommendationEngine
from yam_library.thread_sync import ThreadSyncEngine
from yam_library.update_feed import UpdateFeedBuilder

logger = setup_logger()


class LibraryService:
    """
    Entry point used by the user interface.

    Stores and catalog are injected; limits are read from the configuration
    when one is given.
    """

    def __init__(
        self,
        library: RecordStore[GameRecord],
        threads: RecordStore[ThreadRecord],
        catalog: RemoteCatalog,
        config: Optional[ConfigManager] = None,
        select_game: Optional[GameSelector] = None,
    ):
        self.library = library
        self.threads = threads
        self.catalog = catalog

        recommendation_limits = {}
        resolver_kwargs = {}
        if config is not None:
            max_tags, max_games, max_fetched_games = config.recommendation_limits()
            recommendation_limits = {
                "max_tags": max_tags,
                "max_games": max_games,
                "max_fetched_games": max_fetched_games,
            }
            resolver_kwargs["notice_threshold"] = config.duplicate_notice_threshold

        self.resolver = DedupResolver(library, **resolver_kwargs)
        self.importer = LibraryImporter(library, catalog, self.resolver, select_game)
        self.thread_sync = ThreadSyncEngine(threads, catalog)
        self.update_feed = UpdateFeedBuilder(threads, library)
        self.recommender = RecommendationEngine(library, threads, catalog, **recommendation_limits)

    async def add_games(self, paths: Iterable[str]) -> ImportReport:
        return await self.importer.import_directories(paths)

    async def add_game_from_url(self, path: str, url: str) -> ImportReport:
        report = ImportReport()
        record = await self.importer.add_game_from_url(path, url, report)
        if record is not None:
            report.added.append(record)
        return report

    async def remove_game(self, game_id: int) -> bool:
        return await self.importer.remove_game(game_id)

    async def sync_watched_threads(self, urls: Iterable[str]) -> SyncReport:
        return await self.thread_sync.sync_watched_threads(urls)

    async def get_pending_updates(self) -> List[ThreadRecord]:
        return await self.update_feed.get_pending_updates()

    async def mark_as_read(self, thread_id: int) -> bool:
        return await self.update_feed.mark_as_read(thread_id)

    async def recommend(self) -> List[GameRecord]:
        return await self.recommender.recommend()

    async def refresh(self) -> Dashboard:
        """
        Obtain the user data, sync the watched threads and build what the user sees.

        Raises:
            CatalogError: the user data cannot be retrieved
        """
        user = await self.catalog.get_user_data()
        if user is None:
            logger.error("Something wrong while retrieving user info")
            raise CatalogError("Cannot retrieve user data")

        sync = await self.thread_sync.sync_watched_threads(user.watched_game_threads)
        pending = await self.update_feed.get_pending_updates()
        recommendations = await self.recommender.recommend()
        return Dashboard(
            user=user,
            sync=sync,
            pending_updates=pending,
            recommendations=recommendations,
        )
