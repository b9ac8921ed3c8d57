"""
Synchronization of the watched threads with the local thread store.

A thread is considered updated when the URL the user watches differs from
the URL stored at the previous sync for the same thread id. Metadata
changes at an unchanged URL are not detected.
"""

from typing import Iterable

from yam_library.catalog import RemoteCatalog
from yam_library.database import RecordStore
from yam_library.logger import setup_logger
from yam_library.models import SyncFailure, SyncReport, ThreadRecord, game_info_to_thread
from yam_library.normalizer import extract_thread_id

logger = setup_logger()


class ThreadSyncEngine:
    def __init__(self, threads: RecordStore[ThreadRecord], catalog: RemoteCatalog):
        self.threads = threads
        self.catalog = catalog

    async def sync_watched_threads(self, urls: Iterable[str]) -> SyncReport:
        """
        Save the watched threads in the store and flag the updated ones.

        URLs are processed in order; a URL without id or whose lookup fails
        is reported and the batch continues.
        """
        report = SyncReport()
        for url in urls:
            thread_id = extract_thread_id(url)
            if thread_id is None:
                logger.warning(f"Cannot find ID for {url}")
                report.skipped.append(url)
                continue

            try:
                await self._sync_thread(thread_id, url, report)
            except Exception as e:
                logger.error(f"Cannot sync thread {thread_id} ({url}): {e}", exc_info=True)
                report.failed.append(SyncFailure(url=url, error=str(e)))

        logger.info(
            f"Thread sync: {len(report.inserted)} new, {len(report.updated)} updated, "
            f"{len(report.unchanged)} unchanged, {len(report.skipped)} skipped, "
            f"{len(report.failed)} failed"
        )
        return report

    async def _sync_thread(self, thread_id: int, url: str, report: SyncReport):
        stored = await self.threads.search({"id": thread_id})

        if not stored:
            info = await self.catalog.get_game_data_from_url(url)
            thread = game_info_to_thread(info)
            thread.id = thread_id
            thread.url = url
            await self.threads.insert(thread)
            report.inserted.append(thread_id)
            logger.debug(f"New watched thread {thread_id}: {thread.name}")
            return

        if stored[0].url == url:
            report.unchanged.append(thread_id)
            return

        info = await self.catalog.get_game_data_from_url(url)
        thread = game_info_to_thread(info)
        thread.id = thread_id
        thread.url = url
        thread.update_available = True
        thread.marked_as_read = False
        await self.threads.write(thread)
        report.updated.append(thread_id)
        logger.info(f"Update available for thread {thread_id}: {thread.name}")
