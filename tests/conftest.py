"""
Shared fixtures: in-memory stores and a scripted remote catalog.
"""

import pytest

from yam_library.catalog import CatalogError
from yam_library.database import InMemoryRecordStore
from yam_library.models import GameInfo, GameRecord, ThreadRecord, UserData


class FakeCatalog:
    """Remote catalog answering from dicts, recording every call"""

    def __init__(self, by_url=None, by_name=None, latest=None, user=None, failing_urls=()):
        self.by_url = by_url or {}
        self.by_name = by_name or {}
        self.latest = latest or (lambda tags: [])
        self.user = user
        self.failing_urls = set(failing_urls)
        self.calls = []

    async def get_game_data_from_url(self, url):
        self.calls.append(("url", url))
        if url in self.failing_urls:
            raise CatalogError(f"{url} answered HTTP 500")
        return self.by_url[url]

    async def get_game_data(self, name, include_mods):
        self.calls.append(("name", name, include_mods))
        result = self.by_name.get(name, [])
        if isinstance(result, Exception):
            raise result
        return list(result)

    async def get_latest_updates(self, filter, limit):
        self.calls.append(("latest", list(filter.tags), filter.sorting, limit))
        return list(self.latest(list(filter.tags)))[:limit]

    async def get_user_data(self):
        self.calls.append(("user",))
        return self.user


def make_game(id, name, tags=(), **kwargs):
    return GameRecord(id=id, name=name, tags=list(tags), **kwargs)


def make_thread(id, name, url=None, tags=(), **kwargs):
    return ThreadRecord(
        id=id,
        name=name,
        url=url or f"https://site.example/threads/{name.lower().replace(' ', '-')}.{id}/",
        tags=list(tags),
        **kwargs,
    )


def make_info(id, name, url="", tags=(), **kwargs):
    return GameInfo(id=id, name=name, url=url, tags=list(tags), **kwargs)


@pytest.fixture
def library():
    return InMemoryRecordStore(GameRecord)


@pytest.fixture
def threads():
    return InMemoryRecordStore(ThreadRecord)


@pytest.fixture
def user_data():
    return UserData(username="tester")
