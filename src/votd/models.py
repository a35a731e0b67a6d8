"""Canonical Pydantic models shared across all votd modules.

This is the single source of truth for data shapes in the project. The
models fall into three groups:

**Verse models** -- produced by the remote client and the cache, consumed
by the formatter:
    :class:`Verse` and the wire-level :class:`RawFragment`.

**Per-invocation models** -- derived from CLI flags, never persisted:
    :class:`CachePolicy` and :class:`RenderOptions`.

**Configuration models** -- serialised as JSON in the user's config
directory:
    :class:`RequestConfig`, :class:`CacheConfig`, :class:`OutputConfig`
    and :class:`GlobalConfig`.

All models use Pydantic v2.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_BASE_URL = "https://labs.bible.org/api/"
DEFAULT_TIMEOUT = 2.0


# --- Verses ---


class Verse(BaseModel):
    """A resolved passage ready for display.

    Example::

        Verse(title="John 3:16", text="For this is the way God loved the world...")
    """

    title: str
    text: str


class RawFragment(BaseModel):
    """One verse-numbered unit of a response from the NET Bible API.

    ``chapter`` and ``verse`` arrive as numeral strings and are parsed by
    the client when the title is derived. Extra keys the service sends
    (such as section ``title`` headings) are ignored.
    """

    model_config = ConfigDict(extra="ignore")

    bookname: str
    chapter: str
    verse: str
    text: str


# --- Per-invocation options ---


class CachePolicy(BaseModel):
    """How the verse-of-the-day slot may be used for one invocation."""

    caching_enabled: bool = True
    force_refresh: bool = False


class RenderOptions(BaseModel):
    """Display options consumed by :func:`votd.formatter.render`."""

    suppress_title: bool = False
    show_translation: bool = False
    was_explicit_passage: bool = False


# --- Configuration ---


class RequestConfig(BaseModel):
    """HTTP request settings."""

    timeout: float = Field(
        default=DEFAULT_TIMEOUT, gt=0, description="Request timeout in seconds"
    )
    base_url: str = Field(
        default=DEFAULT_BASE_URL, description="NET Bible API endpoint"
    )


class CacheConfig(BaseModel):
    """Verse-of-the-day cache settings."""

    enabled: bool = Field(default=True, description="Read and write the VOTD cache")


class OutputConfig(BaseModel):
    """Output preferences."""

    show_translation: bool = Field(
        default=False, description="Always append the translation label to the title"
    )


class GlobalConfig(BaseModel):
    """Top-level configuration stored in ``<config_dir>/config.json``.

    Every section is optional; a missing file yields all defaults.
    """

    request: RequestConfig = Field(default_factory=RequestConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
