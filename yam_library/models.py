"""
msgspec-based data models for the game library.

This module provides:
- JSON encoding and typed decoding shared by the stores
- Catalog payloads (GameInfo, UserData) and the persisted records
  (GameRecord, ThreadRecord) as msgspec.Struct definitions
- Result structures returned by the dedup, import and sync operations
- Conversion functions from catalog payloads to persisted records
"""

from datetime import datetime
from enum import StrEnum
from typing import Optional, List

import msgspec

from yam_library.constants import UNKNOWN_VERSION


# =============================================================================
# JSON
# =============================================================================

_decoders = {}


def encode_json(obj) -> bytes:
    return msgspec.json.encode(obj)


def decode_json(data: bytes, type):
    """Decode JSON into `type`, one cached decoder per type"""
    decoder = _decoders.get(type)
    if decoder is None:
        decoder = _decoders[type] = msgspec.json.Decoder(type)
    return decoder.decode(data)


# =============================================================================
# Catalog Payloads
# =============================================================================

class GameInfo(msgspec.Struct):
    """
    Game metadata as returned by the remote catalog.

    `id` is the thread id on the platform and is stable across versions.
    """
    id: int
    name: str
    url: str = ""
    author: str = ""
    version: str = UNKNOWN_VERSION
    tags: List[str] = msgspec.field(default_factory=list)
    overview: str = ""
    preview_url: Optional[str] = None
    rating: float = 0.0
    is_mod: bool = False
    changelog: str = ""
    last_update: Optional[datetime] = None


class UserData(msgspec.Struct):
    """Data of the logged user, including the URLs of the watched game threads"""
    username: str = ""
    avatar_url: Optional[str] = None
    watched_game_threads: List[str] = msgspec.field(default_factory=list)


class LatestUpdatesFilter(msgspec.Struct):
    """Filter for the catalog listing of latest updates"""
    tags: List[str] = msgspec.field(default_factory=list)
    sorting: str = "rating"


# =============================================================================
# Persisted Records
# =============================================================================

class GameRecord(msgspec.Struct):
    """
    Installed game.

    Created when a new install is confirmed against the catalog.
    `id` is unique in the library store.
    """
    id: int
    name: str
    author: str = ""
    url: str = ""
    version: str = UNKNOWN_VERSION
    tags: List[str] = msgspec.field(default_factory=list)
    overview: str = ""
    preview_url: Optional[str] = None
    is_mod: bool = False
    changelog: str = ""
    game_directory: str = ""
    save_paths: List[str] = msgspec.field(default_factory=list)


class ThreadRecord(msgspec.Struct):
    """
    Watched thread of a game that may not be installed.

    `update_available` is set when the watched URL changed since the last sync.
    """
    id: int
    url: str
    name: str
    author: str = ""
    version: str = UNKNOWN_VERSION
    tags: List[str] = msgspec.field(default_factory=list)
    preview_url: Optional[str] = None
    update_available: bool = False
    marked_as_read: bool = False


# =============================================================================
# Operation Results
# =============================================================================

class NoticeKind(StrEnum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class Notice(msgspec.Struct, frozen=True):
    """Message meant for the user of the application"""
    kind: NoticeKind
    message: str


class DedupResult(msgspec.Struct):
    """
    Result of filtering candidate paths against the library.

    `paths` keeps the input order, `duplicates` holds the normalized names
    of the excluded paths.
    """
    paths: List[str] = msgspec.field(default_factory=list)
    duplicates: List[str] = msgspec.field(default_factory=list)
    notices: List[Notice] = msgspec.field(default_factory=list)


class ImportReport(msgspec.Struct):
    """Games added from a batch of directories"""
    added: List[GameRecord] = msgspec.field(default_factory=list)
    not_found: List[str] = msgspec.field(default_factory=list)
    failed: List[str] = msgspec.field(default_factory=list)
    already_listed: List[str] = msgspec.field(default_factory=list)
    notices: List[Notice] = msgspec.field(default_factory=list)


class SyncFailure(msgspec.Struct, frozen=True):
    url: str
    error: str


class SyncReport(msgspec.Struct):
    """Outcome of a watched threads synchronization, ids grouped by outcome"""
    inserted: List[int] = msgspec.field(default_factory=list)
    updated: List[int] = msgspec.field(default_factory=list)
    unchanged: List[int] = msgspec.field(default_factory=list)
    skipped: List[str] = msgspec.field(default_factory=list)
    failed: List[SyncFailure] = msgspec.field(default_factory=list)

    @property
    def processed(self) -> int:
        return (
            len(self.inserted) + len(self.updated) + len(self.unchanged)
            + len(self.skipped) + len(self.failed)
        )


class Dashboard(msgspec.Struct):
    """Everything shown after refreshing the user data"""
    user: UserData
    sync: SyncReport
    pending_updates: List[ThreadRecord]
    recommendations: List[GameRecord]


# =============================================================================
# Conversions
# =============================================================================

def game_info_to_record(info: GameInfo) -> GameRecord:
    """Convert catalog data to an installed game record (no directory yet)"""
    return GameRecord(
        id=info.id,
        name=info.name,
        author=info.author,
        url=info.url,
        version=info.version or UNKNOWN_VERSION,
        tags=list(info.tags),
        overview=info.overview,
        preview_url=info.preview_url,
        is_mod=info.is_mod,
        changelog=info.changelog,
    )


def game_info_to_thread(info: GameInfo) -> ThreadRecord:
    """Convert catalog data to a watched thread record with both flags cleared"""
    return ThreadRecord(
        id=info.id,
        url=info.url,
        name=info.name,
        author=info.author,
        version=info.version or UNKNOWN_VERSION,
        tags=list(info.tags),
        preview_url=info.preview_url,
    )
