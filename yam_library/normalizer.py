"""
Game name normalization.

Directory names chosen by users look like "My Game [MOD] [v.1.2.3]". These
helpers turn such names into comparable identities and pull out the
embedded version and thread id.
"""

import re
from functools import lru_cache
from typing import Iterable, Optional

from yam_library.constants import (
    GAME_NAME_ALLOWED_CHARS,
    MOD_TAG,
    RESERVED_PATH_CHARS,
    UNKNOWN_VERSION,
)

_TAG_PATTERN = re.compile(r"\[(.*?)\]")
_RESERVED_PATTERN = re.compile("[" + re.escape(RESERVED_PATH_CHARS) + "]")
_VERSION_PREFIX_PATTERN = re.compile(r"\[v\.", re.IGNORECASE)
_THREAD_ID_PATTERN = re.compile(r"\.([0-9]+)")
_SEPARATOR_PATTERN = re.compile(r"[\\/]")


def normalize(raw: str, allowed_chars: Iterable[str] = ()) -> str:
    """
    Remove every character that is not a cased letter or whitespace.

    A character is a cased letter when its lower and upper case forms
    differ, so digits, punctuation and symbols are dropped unless they
    appear in `allowed_chars`. The result is trimmed.

    Args:
        raw: String to parse
        allowed_chars: Characters kept even if they are not letters

    Returns:
        The filtered string
    """
    allowed = allowed_chars if isinstance(allowed_chars, (set, frozenset)) else set(allowed_chars)
    kept = [
        ch for ch in raw
        if ch.lower() != ch.upper() or ch.isspace() or ch in allowed
    ]
    return "".join(kept).strip()


@lru_cache(maxsize=1024)
def clean_game_name(raw: str) -> str:
    """
    Remove special characters and bracketed tags ([MOD], [v.1.0], ...) from a game name.

    Cached for performance (up to 1024 unique names).
    """
    name = normalize(raw, GAME_NAME_ALLOWED_CHARS)
    name = _TAG_PATTERN.sub("", name)
    name = _RESERVED_PATTERN.sub("", name)
    return name.strip()


def strip_reserved_chars(name: str, replacement: str = " ") -> str:
    """Replace characters that are invalid in directory names"""
    return _RESERVED_PATTERN.sub(replacement, name).strip()


def comparison_key(raw: str) -> str:
    """Key used to decide whether two names refer to the same game"""
    return strip_reserved_chars(clean_game_name(raw)).upper()


def extract_version(raw: str) -> str:
    """
    Extract the version from a **[v.version]** tag, if any.

    Example: "MyGame [v.1.2.3.4]" -> "1.2.3.4", "MyGame [V.beta]" -> "beta"

    Returns "Unknown" when there is no tag or the tag is never closed.
    """
    match = _VERSION_PREFIX_PATTERN.search(raw)
    if not match:
        return UNKNOWN_VERSION

    end_index = raw.find("]", match.end())
    # Unterminated tag: reported as unknown rather than as an empty version
    if end_index == -1:
        return UNKNOWN_VERSION
    return raw[match.end():end_index]


def extract_thread_id(url: str) -> Optional[int]:
    """
    Extract the thread id from a thread URL.

    The id is the first run of digits preceded by a dot, as in
    ".../threads/cool-game.12345/". Returns None when there is none.
    """
    match = _THREAD_ID_PATTERN.search(url)
    if not match:
        return None
    return int(match.group(1))


def is_mod(raw: str) -> bool:
    """Check if a directory name is tagged as a mod"""
    return MOD_TAG in raw.upper()


def directory_name(path) -> str:
    """
    Get the last component of a directory path.

    Both separators are accepted so that paths coming from Windows
    installs are handled on every platform.
    """
    return _SEPARATOR_PATTERN.split(str(path).rstrip("/\\"))[-1]
