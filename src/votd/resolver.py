"""Decide how a verse is obtained: from the cache slot or the remote service.

:class:`VerseResolver` combines four independent inputs -- explicit passage
or verse of the day, caching on or off, slot freshness, and forced
refresh -- into one fetch/cache plan:

1. An explicit passage is always fetched and never touches the cache.
2. The verse of the day with caching disabled (or no cache location) is
   fetched without cache I/O.
3. A fresh, readable slot is returned as-is unless a refresh is forced.
4. Otherwise the verse of the day is fetched and written back on a
   best-effort basis.

Cache failures never reach the caller: a corrupt slot is a miss and a
failed write only means the next invocation fetches again. Fetch errors
propagate unchanged.
"""

from __future__ import annotations

from typing import Optional, Protocol

from votd.cache import CACHE_TTL, VerseCache
from votd.exceptions import CacheCorruptError, CacheError
from votd.models import CachePolicy, Verse
from votd.output import get_output


class VerseFetcher(Protocol):
    """Anything that can fetch a passage, such as :class:`~votd.client.VerseClient`."""

    def fetch(self, passage: Optional[str] = None, timeout: Optional[float] = None) -> Verse: ...


class VerseResolver:
    """Resolve a passage or the verse of the day according to a cache policy.

    Args:
        client: An open verse fetcher.
        cache: The verse-of-the-day cache handle for this invocation.

    Example::

        with VerseClient() as client:
            resolver = VerseResolver(client, VerseCache(cache_file_path()))
            verse = resolver.resolve(None, CachePolicy(), timeout=2)
    """

    def __init__(self, client: VerseFetcher, cache: VerseCache) -> None:
        self._client = client
        self._cache = cache
        self._warned_unavailable = False

    def resolve(
        self,
        passage: Optional[str],
        policy: CachePolicy,
        timeout: float,
    ) -> Verse:
        """Return the requested verse.

        Args:
            passage: An explicit reference, or ``None`` for the verse of the day.
            policy: Whether the cache may be used and whether to bypass a
                fresh slot.
            timeout: Seconds allowed for the network request.

        Raises:
            FetchError: The remote fetch failed on a path that needed it.
        """
        output = get_output()

        if passage is not None:
            output.debug(f"Explicit passage {passage!r}; cache not consulted")
            return self._client.fetch(passage, timeout)

        if not policy.caching_enabled:
            output.debug("Caching disabled")
            return self._client.fetch(None, timeout)

        if not self._cache.available:
            self._warn_unavailable()
            return self._client.fetch(None, timeout)

        cached = self._read_fresh(policy)
        if cached is not None:
            return cached

        verse = self._client.fetch(None, timeout)
        self._write_back(verse)
        return verse

    def _read_fresh(self, policy: CachePolicy) -> Optional[Verse]:
        """Return the cached verse if the slot is fresh and decodes, else ``None``."""
        output = get_output()
        age = self._cache.freshness_age()
        if age is None:
            output.debug("Cache miss: no cached verse")
            return None
        if policy.force_refresh:
            output.debug("Cache refresh forced")
            return None
        if not self._cache.is_fresh(age, CACHE_TTL):
            output.debug(f"Cache stale: written {int(age.total_seconds())}s ago")
            return None

        try:
            verse = self._cache.read()
        except CacheCorruptError as exc:
            output.debug(f"Cache corrupt, refetching: {exc}")
            return None
        output.debug(f"Cache hit: {verse.title}")
        return verse

    def _write_back(self, verse: Verse) -> None:
        try:
            self._cache.write(verse)
        except CacheError as exc:
            get_output().debug(f"Cache write skipped: {exc}")

    def _warn_unavailable(self) -> None:
        if not self._warned_unavailable:
            get_output().info("Can't determine where to place a cache file. Skipping.")
            self._warned_unavailable = True
