"""Tests for the fetch/cache decision logic in VerseResolver."""

from __future__ import annotations

import os
import time
from pathlib import Path
from typing import Optional

import pytest

from votd.cache import VerseCache
from votd.client import VerseClient
from votd.exceptions import (
    CacheWriteError,
    ConnectionFailedError,
    EmptyResponseError,
    RemoteRejectedError,
    TimeoutExceededError,
)
from votd.models import CachePolicy, Verse
from votd.output import OutputFormat, OutputManager, set_output
from votd.resolver import VerseResolver


CACHED = Verse(title="Psalms 46:10", text="Stop your striving and recognize that I am God!")
FETCHED = Verse(title="John 3:16", text="For this is the way God loved the world.")

TIMEOUT = 2.0


# ---------------------------------------------------------------------------
# Test doubles
# ---------------------------------------------------------------------------


class FakeClient:
    """Returns a fixed verse (or raises) and records every passage requested."""

    def __init__(self, verse: Verse = FETCHED, error: Optional[Exception] = None) -> None:
        self.verse = verse
        self.error = error
        self.calls: list[tuple[Optional[str], Optional[float]]] = []

    def fetch(self, passage: Optional[str] = None, timeout: Optional[float] = None) -> Verse:
        self.calls.append((passage, timeout))
        if self.error is not None:
            raise self.error
        return self.verse


class SpyCache(VerseCache):
    """A real VerseCache that counts reads, writes and freshness checks."""

    def __init__(self, path, fail_writes: bool = False) -> None:
        super().__init__(path)
        self.reads = 0
        self.writes = 0
        self.age_checks = 0
        self.fail_writes = fail_writes

    def freshness_age(self):
        self.age_checks += 1
        return super().freshness_age()

    def read(self) -> Verse:
        self.reads += 1
        return super().read()

    def write(self, verse: Verse) -> None:
        self.writes += 1
        if self.fail_writes:
            raise CacheWriteError("disk full")
        super().write(verse)

    @property
    def io(self) -> int:
        return self.reads + self.writes + self.age_checks


@pytest.fixture(autouse=True)
def _clean_output(quiet_output):
    yield


@pytest.fixture()
def slot(tmp_path: Path) -> Path:
    return tmp_path / "votd-cli-cache.txt"


def _seed(cache: VerseCache, verse: Verse = CACHED, age_seconds: float = 0) -> None:
    """Write *verse* into the slot (bypassing counters) and backdate it."""
    VerseCache(cache.path).write(verse)
    if age_seconds:
        then = time.time() - age_seconds
        os.utime(cache.path, (then, then))


# ---------------------------------------------------------------------------
# Explicit passages
# ---------------------------------------------------------------------------


class TestExplicitPassage:
    def test_fetches_passage(self, slot: Path) -> None:
        client, cache = FakeClient(), SpyCache(slot)
        verse = VerseResolver(client, cache).resolve("John 3:16", CachePolicy(), TIMEOUT)
        assert verse == FETCHED
        assert client.calls == [("John 3:16", TIMEOUT)]

    def test_never_touches_cache(self, slot: Path) -> None:
        client, cache = FakeClient(), SpyCache(slot)
        _seed(cache)
        VerseResolver(client, cache).resolve("Psalms 46:10", CachePolicy(), TIMEOUT)
        assert cache.io == 0
        assert cache.read() == CACHED  # slot untouched

    def test_not_written_even_when_slot_missing(self, slot: Path) -> None:
        client, cache = FakeClient(), SpyCache(slot)
        VerseResolver(client, cache).resolve("votd", CachePolicy(), TIMEOUT)
        assert not slot.exists()
        assert cache.io == 0

    def test_force_refresh_irrelevant(self, slot: Path) -> None:
        client, cache = FakeClient(), SpyCache(slot)
        policy = CachePolicy(force_refresh=True)
        VerseResolver(client, cache).resolve("John 3:16", policy, TIMEOUT)
        assert cache.io == 0

    def test_errors_propagate(self, slot: Path) -> None:
        client = FakeClient(error=RemoteRejectedError(status_code=400))
        with pytest.raises(RemoteRejectedError):
            VerseResolver(client, SpyCache(slot)).resolve("Hezekiah 1:1", CachePolicy(), TIMEOUT)


# ---------------------------------------------------------------------------
# Verse of the day, caching disabled
# ---------------------------------------------------------------------------


class TestCachingDisabled:
    @pytest.mark.parametrize("age", [None, 60, 7 * 3600])
    def test_zero_cache_io(self, slot: Path, age: Optional[int]) -> None:
        client, cache = FakeClient(), SpyCache(slot)
        if age is not None:
            _seed(cache, age_seconds=age)
        policy = CachePolicy(caching_enabled=False)
        verse = VerseResolver(client, cache).resolve(None, policy, TIMEOUT)
        assert verse == FETCHED
        assert client.calls == [(None, TIMEOUT)]
        assert cache.io == 0

    def test_fresh_slot_left_alone(self, slot: Path) -> None:
        client, cache = FakeClient(), SpyCache(slot)
        _seed(cache)
        VerseResolver(client, cache).resolve(None, CachePolicy(caching_enabled=False), TIMEOUT)
        assert VerseCache(slot).read() == CACHED


# ---------------------------------------------------------------------------
# Verse of the day, caching enabled
# ---------------------------------------------------------------------------


class TestFreshCache:
    def test_hit_skips_network_and_write(self, slot: Path) -> None:
        client, cache = FakeClient(), SpyCache(slot)
        _seed(cache, age_seconds=60)
        verse = VerseResolver(client, cache).resolve(None, CachePolicy(), TIMEOUT)
        assert verse == CACHED
        assert client.calls == []
        assert cache.reads == 1
        assert cache.writes == 0

    def test_hit_just_inside_ttl(self, slot: Path) -> None:
        client, cache = FakeClient(), SpyCache(slot)
        _seed(cache, age_seconds=6 * 3600 - 30)
        assert VerseResolver(client, cache).resolve(None, CachePolicy(), TIMEOUT) == CACHED
        assert client.calls == []

    def test_hit_survives_network_failure(self, slot: Path) -> None:
        client = FakeClient(error=ConnectionFailedError())
        cache = SpyCache(slot)
        _seed(cache)
        assert VerseResolver(client, cache).resolve(None, CachePolicy(), TIMEOUT) == CACHED


class TestRefetch:
    def test_stale_slot(self, slot: Path) -> None:
        client, cache = FakeClient(), SpyCache(slot)
        _seed(cache, age_seconds=7 * 3600)
        verse = VerseResolver(client, cache).resolve(None, CachePolicy(), TIMEOUT)
        assert verse == FETCHED
        assert client.calls == [(None, TIMEOUT)]
        assert cache.reads == 0
        assert cache.writes == 1
        assert VerseCache(slot).read() == FETCHED

    def test_stale_slot_age_reset(self, slot: Path) -> None:
        client, cache = FakeClient(), SpyCache(slot)
        _seed(cache, age_seconds=7 * 3600)
        VerseResolver(client, cache).resolve(None, CachePolicy(), TIMEOUT)
        assert VerseCache.is_fresh(VerseCache(slot).freshness_age())

    def test_missing_slot(self, slot: Path) -> None:
        client, cache = FakeClient(), SpyCache(slot)
        verse = VerseResolver(client, cache).resolve(None, CachePolicy(), TIMEOUT)
        assert verse == FETCHED
        assert len(client.calls) == 1
        assert cache.reads == 0
        assert VerseCache(slot).read() == FETCHED

    def test_forced_refresh(self, slot: Path) -> None:
        client, cache = FakeClient(), SpyCache(slot)
        _seed(cache)
        verse = VerseResolver(client, cache).resolve(
            None, CachePolicy(force_refresh=True), TIMEOUT
        )
        assert verse == FETCHED
        assert len(client.calls) == 1
        assert cache.reads == 0
        assert cache.writes == 1
        assert VerseCache(slot).read() == FETCHED

    def test_corrupt_slot_is_a_miss(self, slot: Path) -> None:
        client, cache = FakeClient(), SpyCache(slot)
        slot.write_bytes(b"\xc1\xc1garbage")
        verse = VerseResolver(client, cache).resolve(None, CachePolicy(), TIMEOUT)
        assert verse == FETCHED
        assert cache.reads == 1
        assert len(client.calls) == 1
        assert cache.writes == 1
        assert VerseCache(slot).read() == FETCHED

    def test_write_failure_still_returns_verse(self, slot: Path) -> None:
        client, cache = FakeClient(), SpyCache(slot, fail_writes=True)
        verse = VerseResolver(client, cache).resolve(None, CachePolicy(), TIMEOUT)
        assert verse == FETCHED
        assert cache.writes == 1

    @pytest.mark.parametrize(
        "error",
        [EmptyResponseError(), TimeoutExceededError(), ConnectionFailedError()],
        ids=["empty", "timeout", "connect"],
    )
    def test_fetch_error_propagates_without_write(self, slot: Path, error: Exception) -> None:
        client, cache = FakeClient(error=error), SpyCache(slot)
        with pytest.raises(type(error)):
            VerseResolver(client, cache).resolve(None, CachePolicy(), TIMEOUT)
        assert cache.writes == 0
        assert not slot.exists()

    def test_fetch_error_keeps_stale_slot(self, slot: Path) -> None:
        client, cache = FakeClient(error=TimeoutExceededError()), SpyCache(slot)
        _seed(cache, age_seconds=7 * 3600)
        with pytest.raises(TimeoutExceededError):
            VerseResolver(client, cache).resolve(None, CachePolicy(), TIMEOUT)
        assert VerseCache(slot).read() == CACHED


# ---------------------------------------------------------------------------
# Cache location unavailable
# ---------------------------------------------------------------------------


class TestLocationUnavailable:
    def test_fetches_without_cache(self) -> None:
        client = FakeClient()
        verse = VerseResolver(client, VerseCache(None)).resolve(None, CachePolicy(), TIMEOUT)
        assert verse == FETCHED
        assert client.calls == [(None, TIMEOUT)]

    def test_notice_printed_once(self, capsys) -> None:
        set_output(OutputManager(format=OutputFormat.PLAIN, no_color=True))
        resolver = VerseResolver(FakeClient(), VerseCache(None))
        resolver.resolve(None, CachePolicy(), TIMEOUT)
        resolver.resolve(None, CachePolicy(), TIMEOUT)
        captured = capsys.readouterr()
        assert captured.err.count("Can't determine where to place a cache file") == 1
        assert captured.out == ""

    def test_no_notice_for_explicit_passage(self, capsys) -> None:
        set_output(OutputManager(format=OutputFormat.PLAIN, no_color=True))
        VerseResolver(FakeClient(), VerseCache(None)).resolve("John 3:16", CachePolicy(), TIMEOUT)
        assert "cache" not in capsys.readouterr().err


# ---------------------------------------------------------------------------
# End-to-end with the real HTTP client
# ---------------------------------------------------------------------------


class TestWithVerseClient:
    def test_empty_votd_response(self, slot: Path, fake_api) -> None:
        fake_api.body = []
        cache = SpyCache(slot)
        with VerseClient(transport=fake_api.transport()) as client:
            with pytest.raises(EmptyResponseError):
                VerseResolver(client, cache).resolve(None, CachePolicy(), TIMEOUT)
        assert fake_api.calls == 1
        assert cache.writes == 0

    def test_stale_slot_refetched(self, slot: Path, fake_api, fragment) -> None:
        fake_api.body = [fragment(16, "For God so loved..."), fragment(17, " For God did not send...")]
        cache = SpyCache(slot)
        _seed(cache, age_seconds=7 * 3600)
        with VerseClient(transport=fake_api.transport()) as client:
            verse = VerseResolver(client, cache).resolve(None, CachePolicy(), TIMEOUT)
        assert fake_api.passages == ["votd"]
        assert verse.title == "John 3:16-17"
        assert cache.writes == 1
        assert VerseCache(slot).read() == verse
