"""Verse-of-the-day caching for votd.

This package provides :class:`VerseCache`, a handle over a single cache
file holding the most recently fetched verse of the day. The file's
modification time is the freshness clock; entries older than
:data:`CACHE_TTL` are refetched.

The cache is constructed once per invocation by :mod:`votd.app` and passed
to :class:`~votd.resolver.VerseResolver`. Explicitly requested passages
are never cached.
"""

from votd.cache.cache import CACHE_TTL, VerseCache

__all__ = ["CACHE_TTL", "VerseCache"]
