from typing import List

from yam_library.database import RecordStore
from yam_library.logger import setup_logger
from yam_library.models import GameRecord, ThreadRecord

logger = setup_logger()


class UpdateFeedBuilder:
    """Builds the list of watched games that were updated and are not installed"""

    def __init__(self, threads: RecordStore[ThreadRecord], library: RecordStore[GameRecord]):
        self.threads = threads
        self.library = library

    async def get_pending_updates(self) -> List[ThreadRecord]:
        """
        Obtain the updated threads not yet marked as read, ordered by name.

        Threads of installed games are excluded, their updates go through
        the library instead.
        """
        threads = await self.threads.search(
            {"update_available": True, "marked_as_read": False},
            {"name": 1},
        )
        installed_ids = await self.library.ids()
        pending = [thread for thread in threads if thread.id not in installed_ids]
        logger.debug(f"{len(pending)} pending thread updates ({len(threads) - len(pending)} installed)")
        return pending

    async def mark_as_read(self, thread_id: int) -> bool:
        """Hide an update from the feed until the thread changes again"""
        stored = await self.threads.search({"id": thread_id})
        if not stored:
            logger.warning(f"Cannot mark thread {thread_id} as read: unknown thread")
            return False

        thread = stored[0]
        thread.marked_as_read = True
        await self.threads.write(thread)
        return True
