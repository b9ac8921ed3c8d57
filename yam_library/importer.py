"""
Adding local game directories to the library.

For each directory the cleaned name is searched in the remote catalog, the
match is converted to a GameRecord and stored with the version parsed from
the directory name.
"""

from typing import Awaitable, Callable, Iterable, List, Optional

from yam_library.catalog import RemoteCatalog
from yam_library.database import RecordStore
from yam_library.dedup import DedupResolver
from yam_library.logger import setup_logger
from yam_library.models import (
    GameInfo,
    GameRecord,
    ImportReport,
    Notice,
    NoticeKind,
    game_info_to_record,
)
from yam_library.normalizer import clean_game_name, directory_name, extract_version, is_mod

logger = setup_logger()

# Receives the unparsed directory name and the candidates, returns the chosen game or None
GameSelector = Callable[[str, List[GameInfo]], Awaitable[Optional[GameInfo]]]


async def no_selection(desired_name: str, candidates: List[GameInfo]) -> Optional[GameInfo]:
    """Default selector: ambiguous directories are left out"""
    logger.warning(
        f"{len(candidates)} games match '{desired_name}', no selection made, skipping"
    )
    return None


class LibraryImporter:
    def __init__(
        self,
        library: RecordStore[GameRecord],
        catalog: RemoteCatalog,
        resolver: Optional[DedupResolver] = None,
        select_game: Optional[GameSelector] = None,
    ):
        self.library = library
        self.catalog = catalog
        self.resolver = resolver or DedupResolver(library)
        self.select_game = select_game or no_selection

    async def import_directories(self, paths: Iterable[str]) -> ImportReport:
        """Add the game directories that are not already in the library"""
        paths = list(paths)
        if not paths:
            return ImportReport(notices=[Notice(NoticeKind.WARNING, "No directory selected")])

        dedup = await self.resolver.filter_unlisted(paths)
        report = await self.add_games_from_paths(dedup.paths)
        report.notices = dedup.notices + report.notices
        return report

    async def add_games_from_paths(self, paths: Iterable[str]) -> ImportReport:
        """
        Get information about the games contained in the directories.

        Paths are processed one at a time; an error on one path is reported
        and the remaining paths are still processed.
        """
        report = ImportReport()
        for path in paths:
            try:
                record = await self.get_game_from_path(path, report)
            except Exception as e:
                logger.error(
                    f"Unexpected error while retrieving game data from path: {path}. {e}",
                    exc_info=True,
                )
                report.failed.append(path)
                report.notices.append(
                    Notice(NoticeKind.ERROR, f"Cannot retrieve game data ({path}): {e}")
                )
                continue

            if record is not None:
                report.added.append(record)
        return report

    async def get_game_from_path(self, path: str, report: Optional[ImportReport] = None) -> Optional[GameRecord]:
        """
        Parse the directory name, look the game up and store it.

        Returns:
            The stored record, or None if nothing was added
        """
        report = report if report is not None else ImportReport()
        unparsed_name = directory_name(path)
        include_mods = is_mod(unparsed_name)
        name = clean_game_name(unparsed_name)

        candidates = await self.catalog.get_game_data(name, include_mods)

        if not candidates:
            logger.warning(f"No results found for {name}")
            report.not_found.append(path)
            report.notices.append(Notice(NoticeKind.WARNING, f"No game found for {name}"))
            return None

        selected = candidates[0]
        if len(candidates) > 1:
            selected = await self.select_game(unparsed_name, candidates)
            if selected is None:
                return None

        record = game_info_to_record(selected)
        record.version = extract_version(unparsed_name)
        record.game_directory = str(path)
        return await self._store(record, path, report)

    async def add_game_from_url(self, path: str, url: str, report: Optional[ImportReport] = None) -> Optional[GameRecord]:
        """
        Add a directory whose game is identified by its catalog URL.

        Used when the directory name does not match the catalog name.
        """
        report = report if report is not None else ImportReport()
        version = extract_version(directory_name(path))

        info = await self.catalog.get_game_data_from_url(url)
        record = game_info_to_record(info)
        record.version = version
        record.game_directory = str(path)
        return await self._store(record, path, report)

    async def _store(self, record: GameRecord, path: str, report: ImportReport) -> Optional[GameRecord]:
        if record.id in await self.library.ids():
            logger.info(f"Game {record.id} already listed, skipping: {path}")
            report.already_listed.append(str(path))
            report.notices.append(Notice(NoticeKind.WARNING, f"{record.name} is already listed"))
            return None

        await self.library.insert(record)
        logger.info(f"Added {record.name} ({record.id}) from {path}")
        report.notices.append(Notice(NoticeKind.INFO, f"{record.name} successfully added"))
        return record

    async def remove_game(self, game_id: int) -> bool:
        """Remove a game from the library, the directory on disk is left alone"""
        removed = await self.library.remove(game_id)
        if removed:
            logger.info(f"Removed game {game_id} from the library")
        else:
            logger.warning(f"Cannot remove game {game_id}: not in the library")
        return removed
