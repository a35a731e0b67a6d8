"""HTTP client module for votd.

Provides :class:`VerseClient`, a blocking client backed by
:class:`httpx.Client` that looks up a passage (or the verse of the day)
from the NET Bible API and merges the returned fragments into a
:class:`~votd.models.Verse`.

Example::

    from votd.client import VerseClient

    with VerseClient(timeout=2) as client:
        verse = client.fetch()  # verse of the day
"""

from votd.client.verse_client import VerseClient, merge_fragments, parse_fragments

__all__ = ["VerseClient", "merge_fragments", "parse_fragments"]
