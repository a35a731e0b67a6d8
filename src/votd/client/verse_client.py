"""Synchronous client for the NET Bible passage lookup API.

This module provides :class:`VerseClient`, which wraps :class:`httpx.Client`
and performs exactly one GET per :meth:`VerseClient.fetch` call:

- **Passage selection** -- the ``passage`` query parameter carries the
  caller's free-form reference, or the literal ``votd`` for the verse of
  the day.
- **Status first** -- the service answers an unrecognised passage with a
  400 and an empty body, so the status is checked before the body is
  parsed.
- **Fragment merge** -- the JSON array of verse fragments is folded into a
  single :class:`~votd.models.Verse` whose title spans the first and last
  verse numbers.
- **Deadline** -- the timeout bounds the whole exchange, body included.
- **Error mapping** -- transport and payload failures are raised as
  :class:`~votd.exceptions.FetchError` subclasses.
"""

from __future__ import annotations

import time
from typing import Optional, Sequence

import httpx
from pydantic import TypeAdapter, ValidationError

from votd.exceptions import (
    ConnectionFailedError,
    EmptyResponseError,
    FetchError,
    MalformedDataError,
    RemoteRejectedError,
    TimeoutExceededError,
)
from votd.models import DEFAULT_BASE_URL, DEFAULT_TIMEOUT, RawFragment, Verse
from votd.output import get_output

VOTD_PASSAGE = "votd"

_FRAGMENTS = TypeAdapter(list[RawFragment])


class VerseClient:
    """HTTP client for passage and verse-of-the-day lookups.

    Must be used as a context manager so that the underlying transport is
    properly opened and closed.

    Args:
        base_url: The API endpoint. Query parameters are appended to it.
        timeout: Seconds allowed for the whole exchange (connect, send and
            read).
        transport: Optional :mod:`httpx` transport, used by tests to
            substitute an :class:`httpx.MockTransport`.

    Example::

        with VerseClient(timeout=2) as client:
            verse = client.fetch("John 3:16")
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._base_url = base_url
        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> VerseClient:
        self._client = httpx.Client(
            timeout=self._timeout,
            follow_redirects=True,
            transport=self._transport,
        )
        return self

    def __exit__(self, *args: object) -> None:
        if self._client:
            self._client.close()
            self._client = None

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def fetch(self, passage: Optional[str] = None, timeout: Optional[float] = None) -> Verse:
        """Fetch a passage, or the verse of the day when *passage* is ``None``.

        *timeout* is a deadline for the whole exchange, not only for each
        socket operation: the body is streamed and the clock is checked
        after every chunk, so a server trickling bytes in cannot keep the
        call alive past it.

        Args:
            passage: A case-insensitive reference such as ``"john 3:16-17"``.
            timeout: Per-call override of the client timeout, in seconds.

        Returns:
            The merged :class:`~votd.models.Verse`.

        Raises:
            TimeoutExceededError: The exchange took longer than *timeout*.
            ConnectionFailedError: The service could not be reached.
            RemoteRejectedError: The service answered with a non-2xx status.
            EmptyResponseError: The service returned no fragments.
            MalformedDataError: The body is not a list of verse fragments
                or carries non-numeric chapter/verse values.
            FetchError: Any other transport failure.
        """
        assert self._client is not None, "Client not initialised -- use as context manager"

        if timeout is None:
            timeout = self._timeout
        deadline = time.monotonic() + timeout

        params = {"type": "json", "passage": passage if passage is not None else VOTD_PASSAGE}
        output = get_output()
        output.debug(f"GET {self._base_url} passage={params['passage']!r}")

        try:
            with self._client.stream("GET", self._base_url, params=params, timeout=timeout) as response:
                _check_deadline(deadline)
                output.debug(f"HTTP {response.status_code}")
                if not response.is_success:
                    raise RemoteRejectedError(status_code=response.status_code)
                body = _read_body(response, deadline)
        except httpx.TimeoutException as exc:
            raise TimeoutExceededError() from exc
        except httpx.ConnectError as exc:
            raise ConnectionFailedError() from exc
        except httpx.HTTPError as exc:
            raise FetchError(str(exc) or exc.__class__.__name__) from exc

        output.debug(f"Read {len(body)} bytes")
        return merge_fragments(parse_fragments(body))


def _check_deadline(deadline: float) -> None:
    if time.monotonic() > deadline:
        raise TimeoutExceededError()


def _read_body(response: httpx.Response, deadline: float) -> bytes:
    """Read a streamed body, giving up once *deadline* has passed."""
    chunks: list[bytes] = []
    for chunk in response.iter_bytes():
        _check_deadline(deadline)
        chunks.append(chunk)
    return b"".join(chunks)


def parse_fragments(body: bytes | str) -> list[RawFragment]:
    """Validate a response body as an ordered list of :class:`RawFragment`.

    Raises:
        MalformedDataError: The body is not JSON or not a list of fragments.
    """
    try:
        return _FRAGMENTS.validate_json(body)
    except ValidationError as exc:
        raise MalformedDataError(
            f"Unexpected response from server: {exc.error_count()} validation error(s)"
        ) from exc


def _parse_number(value: str, field: str) -> int:
    digits = value[1:] if value.startswith(("+", "-")) else value
    if not (digits.isascii() and digits.isdigit()):
        raise MalformedDataError(f"{field.capitalize()} should be a valid integer, got {value!r}")
    return int(value)


def merge_fragments(fragments: Sequence[RawFragment]) -> Verse:
    """Fold consecutive verse fragments into one titled :class:`Verse`.

    The book and chapter come from the first fragment, the verse range from
    the first and last fragments. Texts are concatenated without a
    separator since each fragment already carries its own spacing.

    Raises:
        EmptyResponseError: *fragments* is empty.
        MalformedDataError: A chapter or verse number is not an integer.
    """
    if not fragments:
        raise EmptyResponseError()

    first, last = fragments[0], fragments[-1]
    book = first.bookname
    chapter = _parse_number(first.chapter, "chapter")
    verse_start = _parse_number(first.verse, "verse")
    verse_end = _parse_number(last.verse, "verse")

    if verse_start == verse_end:
        title = f"{book} {chapter}:{verse_start}"
    else:
        title = f"{book} {chapter}:{verse_start}-{verse_end}"

    return Verse(title=title, text="".join(f.text for f in fragments))
