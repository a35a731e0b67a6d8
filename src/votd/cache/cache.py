"""Single-slot, file-backed cache for the verse of the day.

The slot is one file holding one MessagePack-encoded verse, stored as the
two-element array ``[title, text]``. No timestamp is stored in-band: the
file's modification time is the freshness clock, and every write resets
it.

The slot is not locked. Two concurrent invocations may race on
it and the last writer wins; a torn read decodes as corrupt and is handled
by the caller as a cache miss.

See Also:
    :class:`~votd.resolver.VerseResolver` -- decides when the slot is
    read and written.
"""

from __future__ import annotations

import time
from datetime import timedelta
from pathlib import Path
from typing import Any, Optional

import msgpack

from votd.exceptions import CacheCorruptError, CacheLocationUnavailableError, CacheWriteError
from votd.models import Verse
from votd.output import get_output

CACHE_TTL = timedelta(seconds=21600)
"""Freshness window of the cached verse of the day (a quarter of a day)."""


class VerseCache:
    """Handle over the verse-of-the-day cache file.

    Args:
        path: Location of the cache file, or ``None`` when no cache
            directory could be determined. A handle without a path reports
            :attr:`available` as ``False`` and refuses reads and writes.

    Example::

        from votd.cache import VerseCache
        from votd.config import cache_file_path

        cache = VerseCache(cache_file_path())
        age = cache.freshness_age()
        if age is not None and cache.is_fresh(age):
            verse = cache.read()
    """

    def __init__(self, path: str | Path | None) -> None:
        self._path = Path(path) if path is not None else None

    @property
    def path(self) -> Optional[Path]:
        """The cache file location, if known."""
        return self._path

    @property
    def available(self) -> bool:
        """Whether a cache location could be determined."""
        return self._path is not None

    def freshness_age(self) -> Optional[timedelta]:
        """Return how long ago the slot was last written.

        Returns:
            ``None`` if the location is unknown or the file does not exist,
            otherwise ``now - mtime`` (never negative).
        """
        if self._path is None:
            return None
        try:
            mtime = self._path.stat().st_mtime
        except OSError:
            return None
        return timedelta(seconds=max(0.0, time.time() - mtime))

    @staticmethod
    def is_fresh(age: timedelta, ttl: timedelta = CACHE_TTL) -> bool:
        """Return ``True`` when *age* is within *ttl* (inclusive)."""
        return age <= ttl

    def read(self) -> Verse:
        """Decode the verse stored in the slot.

        Raises:
            CacheLocationUnavailableError: No cache location is known.
            CacheCorruptError: The file is missing, unreadable, truncated,
                or does not hold a ``[title, text]`` pair.
        """
        path = self._require_path()
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise CacheCorruptError(f"Cannot read cache file {path}: {exc}") from exc
        return decode_verse(data)

    def write(self, verse: Verse) -> None:
        """Overwrite the slot with *verse*, resetting its modification time.

        Raises:
            CacheLocationUnavailableError: No cache location is known.
            CacheWriteError: The directory or file could not be written.
        """
        path = self._require_path()
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "wb") as f:
                f.write(encode_verse(verse))
        except OSError as exc:
            raise CacheWriteError(f"Cannot write cache file {path}: {exc}") from exc
        get_output().debug(f"Wrote {verse.title} to {path}")

    def clear(self) -> bool:
        """Delete the slot.

        Returns:
            ``True`` if a file was removed, ``False`` if there was none.

        Raises:
            CacheLocationUnavailableError: No cache location is known.
            CacheWriteError: The file exists but could not be removed.
        """
        path = self._require_path()
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise CacheWriteError(f"Cannot remove cache file {path}: {exc}") from exc
        return True

    def _require_path(self) -> Path:
        if self._path is None:
            raise CacheLocationUnavailableError("Can't determine where to place a cache file.")
        return self._path


def encode_verse(verse: Verse) -> bytes:
    """Serialise *verse* as the MessagePack array ``[title, text]``."""
    return msgpack.packb([verse.title, verse.text], use_bin_type=True)


def decode_verse(data: bytes) -> Verse:
    """Decode bytes written by :func:`encode_verse`.

    A map with ``title`` and ``text`` keys is accepted as well. Anything
    else, including trailing bytes, non-string fields, or an empty text,
    is reported as corruption.

    Raises:
        CacheCorruptError: *data* does not decode to a verse.
    """
    try:
        obj: Any = msgpack.unpackb(data, raw=False)
    except (ValueError, TypeError, msgpack.UnpackException) as exc:
        raise CacheCorruptError(f"Undecodable cache data: {exc}") from exc

    if isinstance(obj, (list, tuple)) and len(obj) == 2:
        title, text = obj
    elif isinstance(obj, dict) and set(obj) == {"title", "text"}:
        title, text = obj["title"], obj["text"]
    else:
        raise CacheCorruptError(f"Unexpected cache data shape: {type(obj).__name__}")

    if not isinstance(title, str) or not isinstance(text, str) or not text:
        raise CacheCorruptError("Cached verse has an invalid title or text")
    return Verse(title=title, text=text)
