"""Fixtures shared by the votd test suite.

The NET Bible API is replaced by :class:`FakeBibleAPI` served over an
:class:`httpx.MockTransport`, and every path votd touches is redirected
into ``tmp_path`` by :func:`isolated_config`.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest

from votd.output import OutputFormat, OutputManager, reset_output, set_output


@pytest.fixture(autouse=True)
def _fresh_output() -> None:
    """Drop the installed OutputManager after each test.

    Its consoles hold the stdout/stderr objects of the test that built it,
    which CliRunner closes when the invocation ends.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Fake NET Bible API
# ---------------------------------------------------------------------------


def make_fragment(
    verse: int | str,
    text: str,
    bookname: str = "John",
    chapter: int | str = 3,
) -> dict[str, Any]:
    """Build one raw fragment as the NET Bible API returns it."""
    return {
        "bookname": bookname,
        "chapter": str(chapter),
        "verse": str(verse),
        "text": text,
    }


class FakeBibleAPI:
    """Records requests and answers them with a canned response.

    Set :attr:`status_code` and :attr:`body` before the request, or
    :attr:`error` to make the transport raise instead.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.body: Any = [make_fragment(16, "For this is the way God loved the world.")]
        self.error: Exception | None = None

    @property
    def calls(self) -> int:
        return len(self.requests)

    @property
    def passages(self) -> list[str | None]:
        return [r.url.params.get("passage") for r in self.requests]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if isinstance(self.body, (bytes, str)):
            return httpx.Response(self.status_code, content=self.body)
        return httpx.Response(
            self.status_code,
            content=json.dumps(self.body).encode(),
            headers={"content-type": "application/json"},
        )

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def fake_api() -> FakeBibleAPI:
    """A fake NET Bible API answering with a single John 3:16 fragment."""
    return FakeBibleAPI()


@pytest.fixture
def patch_transport(
    monkeypatch: pytest.MonkeyPatch, fake_api: FakeBibleAPI
) -> FakeBibleAPI:
    """Route every :class:`~votd.client.VerseClient` through *fake_api*.

    Used by CLI-level tests where the client is constructed inside the
    command and a transport cannot be passed in directly.
    """
    from votd.client import verse_client

    original_init: Callable[..., None] = verse_client.VerseClient.__init__

    def _init(self: Any, *args: Any, **kwargs: Any) -> None:
        kwargs["transport"] = fake_api.transport()
        original_init(self, *args, **kwargs)

    monkeypatch.setattr(verse_client.VerseClient, "__init__", _init)
    return fake_api


# ---------------------------------------------------------------------------
# Filesystem, output and runner
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run with config, cache and data directories under *tmp_path*.

    The XDG layout is forced so the same paths apply on every platform,
    and ``VOTD_*``, ``NO_COLOR`` and ``COLUMNS`` from the developer's
    shell are cleared. Returns *tmp_path*.
    """
    monkeypatch.setattr("votd.config._is_xdg_platform", lambda: True)
    for kind in ("config", "cache", "data"):
        monkeypatch.setenv(f"XDG_{kind.upper()}_HOME", str(tmp_path / kind))
    for var in ("VOTD_TIMEOUT", "VOTD_NO_CACHE", "VOTD_BASE_URL", "NO_COLOR", "COLUMNS"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def cache_path(isolated_config: Path) -> Path:
    """Where the verse-of-the-day slot lives inside the isolated environment."""
    return isolated_config / "cache" / "votd-cli-cache.txt"


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a plain, quiet OutputManager for tests that ignore diagnostics."""
    output = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
    set_output(output)
    return output


@pytest.fixture
def cli_runner():
    from typer.testing import CliRunner

    return CliRunner()


@pytest.fixture
def fragment() -> Callable[..., dict[str, Any]]:
    """Factory for raw NET Bible fragments (see :func:`make_fragment`)."""
    return make_fragment
