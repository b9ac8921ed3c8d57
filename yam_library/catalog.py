"""
Remote catalog access.

The engine talks to the content platform through the RemoteCatalog protocol.
HttpCatalog implements it with aiohttp against the JSON catalog gateway:

    GET {base}/games/by-url?url=...           -> GameInfo
    GET {base}/games/search?name=...&mods=0|1 -> [GameInfo, ...]
    GET {base}/games/latest?tags=...&sort=...&limit=N -> [GameInfo, ...]
    GET {base}/me                             -> UserData

Payloads are decoded with typed msgspec decoders. There is no retry policy,
failures are raised as CatalogError to the immediate caller.
"""

import asyncio
from typing import List, Optional, Protocol

import aiohttp
import msgspec

from yam_library.logger import setup_logger
from yam_library.models import GameInfo, LatestUpdatesFilter, UserData

logger = setup_logger()

_game_decoder = msgspec.json.Decoder(GameInfo)
_game_list_decoder = msgspec.json.Decoder(List[GameInfo])
_user_decoder = msgspec.json.Decoder(UserData)


class CatalogError(Exception):
    """Raised when the remote catalog cannot be reached or answers with invalid data"""


class RemoteCatalog(Protocol):
    async def get_game_data_from_url(self, url: str) -> GameInfo:
        ...

    async def get_game_data(self, name: str, include_mods: bool) -> List[GameInfo]:
        ...

    async def get_latest_updates(self, filter: LatestUpdatesFilter, limit: int) -> List[GameInfo]:
        ...

    async def get_user_data(self) -> Optional[UserData]:
        ...


def decode_game(content: bytes) -> GameInfo:
    try:
        return _game_decoder.decode(content)
    except msgspec.DecodeError as e:
        raise CatalogError(f"Invalid game payload: {e}") from e


def decode_game_list(content: bytes) -> List[GameInfo]:
    try:
        return _game_list_decoder.decode(content)
    except msgspec.DecodeError as e:
        raise CatalogError(f"Invalid game list payload: {e}") from e


def decode_user(content: bytes) -> UserData:
    try:
        return _user_decoder.decode(content)
    except msgspec.DecodeError as e:
        raise CatalogError(f"Invalid user payload: {e}") from e


class HttpCatalog:
    """
    aiohttp client for the remote catalog.

    Usage:
        async with HttpCatalog(base_url) as catalog:
            games = await catalog.get_game_data("Some Game", include_mods=False)

    An existing session can be passed in, it is then left open on close().
    Authentication for get_user_data() is carried by the session cookies.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30,
        user_agent: str = "YAM-Library",
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.user_agent = user_agent
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self):
        self._get_session()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=self.timeout,
                headers={"User-Agent": self.user_agent},
            )
            self._owns_session = True
        return self._session

    async def close(self):
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def _get(self, path: str, params=None) -> bytes:
        """GET a catalog endpoint and return the raw body"""
        url = f"{self.base_url}/{path.lstrip('/')}"
        session = self._get_session()
        try:
            async with session.get(url, params=params) as response:
                if response.status != 200:
                    raise CatalogError(f"{url} answered HTTP {response.status}")
                return await response.read()
        except asyncio.TimeoutError as e:
            raise CatalogError(f"Timeout requesting {url}") from e
        except aiohttp.ClientError as e:
            raise CatalogError(f"Error requesting {url}: {e}") from e

    async def get_game_data_from_url(self, url: str) -> GameInfo:
        logger.debug(f"Fetching game data for {url}")
        content = await self._get("games/by-url", params={"url": url})
        return decode_game(content)

    async def get_game_data(self, name: str, include_mods: bool) -> List[GameInfo]:
        logger.debug(f"Searching catalog for '{name}' (mods: {include_mods})")
        content = await self._get(
            "games/search",
            params={"name": name, "mods": "1" if include_mods else "0"},
        )
        return decode_game_list(content)

    async def get_latest_updates(self, filter: LatestUpdatesFilter, limit: int) -> List[GameInfo]:
        params = [("sort", filter.sorting), ("limit", str(limit))]
        params.extend(("tags", tag) for tag in filter.tags)
        logger.debug(f"Fetching latest updates with tags {filter.tags}")
        content = await self._get("games/latest", params=params)
        return decode_game_list(content)[:limit]

    async def get_user_data(self) -> Optional[UserData]:
        logger.info("Retrieving user info from catalog")
        content = await self._get("me")
        if not content.strip() or content.strip() == b"null":
            return None
        return decode_user(content)
