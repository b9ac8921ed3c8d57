"""
Recommendation of games based on the tags of installed and watched games.

The most frequent tags are used as a catalog filter; when the filter
yields too few new games the least frequent tag is dropped and the
catalog is queried again. The tag set shrinks on every round so the
number of queries is bounded by MAX_TAGS + 1.
"""

from typing import List

from yam_library.catalog import RemoteCatalog
from yam_library.constants import (
    LATEST_UPDATES_SORTING,
    MAX_FETCHED_GAMES,
    MAX_GAMES,
    MAX_TAGS,
)
from yam_library.database import RecordStore
from yam_library.logger import setup_logger
from yam_library.models import (
    GameInfo,
    GameRecord,
    LatestUpdatesFilter,
    ThreadRecord,
    game_info_to_record,
)
from yam_library.ranking import most_frequent

logger = setup_logger()


class RecommendationEngine:
    def __init__(
        self,
        library: RecordStore[GameRecord],
        threads: RecordStore[ThreadRecord],
        catalog: RemoteCatalog,
        max_tags: int = MAX_TAGS,
        max_games: int = MAX_GAMES,
        max_fetched_games: int = MAX_FETCHED_GAMES,
    ):
        self.library = library
        self.threads = threads
        self.catalog = catalog
        self.max_tags = max_tags
        self.max_games = max_games
        self.max_fetched_games = max_fetched_games

    async def most_frequent_installed_tags(self, n: int) -> List[str]:
        """Gets the most frequent `n` tags among installed games"""
        games = await self.library.search({})
        return most_frequent((tag for game in games for tag in game.tags), n)

    async def most_frequent_thread_tags(self, n: int) -> List[str]:
        """Gets the most frequent `n` tags among watched games"""
        threads = await self.threads.search({})
        return most_frequent((tag for thread in threads for tag in thread.tags), n)

    async def preferred_tags(self) -> List[str]:
        """
        Rank the union of the two top lists again.

        Tags strong in either population can surface while the total stays
        within the catalog filter limit.
        """
        game_tags = await self.most_frequent_installed_tags(self.max_tags)
        thread_tags = await self.most_frequent_thread_tags(self.max_tags)
        return most_frequent(game_tags + thread_tags, self.max_tags)

    async def recommend(self) -> List[GameRecord]:
        """
        Work out the games recommended for the user based on the games they follow and own.

        Returns:
            Up to `max_games` games, none of them installed, in the order found
        """
        tags = await self.preferred_tags()
        installed_ids = await self.library.ids()
        valid_games: List[GameInfo] = []
        accepted_ids = set()

        while True:
            games = await self.catalog.get_latest_updates(
                LatestUpdatesFilter(tags=list(tags), sorting=LATEST_UPDATES_SORTING),
                self.max_fetched_games,
            )

            for game in games:
                if len(valid_games) >= self.max_games:
                    break
                if game.id in installed_ids or game.id in accepted_ids:
                    continue
                valid_games.append(game)
                accepted_ids.add(game.id)

            logger.debug(f"Recommendations with tags {tags}: {len(valid_games)} games")

            # Broaden the next query by dropping the least frequent tag
            if tags:
                tags.pop()
            if len(valid_games) >= self.max_games or not tags:
                break

        logger.info(f"Recommending {len(valid_games)} games")
        return [game_info_to_record(game) for game in valid_games]
