"""
Duplicate detection for newly selected game directories.
"""

from typing import Iterable, List, Optional

from yam_library.constants import DUPLICATE_NOTICE_THRESHOLD
from yam_library.database import RecordStore
from yam_library.logger import setup_logger
from yam_library.models import DedupResult, GameRecord, Notice, NoticeKind
from yam_library.normalizer import clean_game_name, comparison_key, directory_name, strip_reserved_chars

logger = setup_logger()


def duplicate_notices(duplicates: List[str], threshold: int = DUPLICATE_NOTICE_THRESHOLD) -> List[Notice]:
    """
    Build the messages about games that are already listed.

    Names are listed one by one only if there are few of them, otherwise a
    single message with the count is returned.
    """
    if not duplicates:
        return []
    if len(duplicates) <= threshold:
        return [Notice(NoticeKind.WARNING, f"{name} is already listed") for name in duplicates]
    return [Notice(NoticeKind.WARNING, f"{len(duplicates)} games are already listed")]


class DedupResolver:
    """Filters candidate install directories against the installed games"""

    def __init__(self, library: RecordStore[GameRecord], notice_threshold: int = DUPLICATE_NOTICE_THRESHOLD):
        self.library = library
        self.notice_threshold = notice_threshold

    async def filter_unlisted(
        self,
        paths: Iterable[str],
        installed: Optional[List[GameRecord]] = None,
    ) -> DedupResult:
        """
        Check that the specified paths do not belong to games already in the library.

        Args:
            paths: Game directories selected by the user
            installed: Installed games, read from the library when omitted

        Returns:
            DedupResult with the unlisted paths in input order, the names
            of the duplicates and the notices for the user
        """
        if installed is None:
            installed = await self.library.search({})

        listed_keys = {comparison_key(game.name) for game in installed}
        # Names without any cased letter (e.g. CJK titles) all clean to ""
        listed_keys.discard("")

        result = DedupResult()
        for path in paths:
            name = strip_reserved_chars(clean_game_name(directory_name(path)))
            if not name:
                logger.warning(f"Cannot compare {path} with the library, empty cleaned name, keeping it")
                result.paths.append(str(path))
            elif name.upper() in listed_keys:
                result.duplicates.append(name)
                logger.info(f"Game already listed, skipping: {path}")
            else:
                result.paths.append(str(path))

        result.notices = duplicate_notices(result.duplicates, self.notice_threshold)
        logger.debug(
            f"Dedup: {len(result.paths) + len(result.duplicates)} -> {len(result.paths)} paths"
        )
        return result
