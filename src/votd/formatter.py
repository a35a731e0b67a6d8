"""Render a resolved verse as display lines."""

from __future__ import annotations

import json
import textwrap
from typing import Optional

from votd.models import RenderOptions, Verse
from votd.output import DEFAULT_WIDTH


def title_line(verse: Verse, opts: RenderOptions) -> str:
    """Return the title with its translation / verse-of-the-day suffix."""
    votd = not opts.was_explicit_passage
    if opts.show_translation:
        return f"{verse.title} ({'Verse of the Day - NET' if votd else 'NET'})"
    if votd:
        return f"{verse.title} (Verse of the Day)"
    return verse.title


def wrap_text(text: str, width: Optional[int] = None) -> list[str]:
    """Wrap *text* to *width* columns, keeping word order."""
    return textwrap.wrap(text, width=max(1, width or DEFAULT_WIDTH), break_on_hyphens=False)


def render(verse: Verse, opts: RenderOptions, width: Optional[int] = None) -> list[str]:
    """Turn *verse* into printable lines: an optional title, then the wrapped body.

    Args:
        verse: The resolved verse.
        opts: Title and translation display options.
        width: Available columns; :data:`~votd.output.DEFAULT_WIDTH` when ``None``.
    """
    lines: list[str] = []
    if not opts.suppress_title:
        lines.append(title_line(verse, opts))
    lines.extend(wrap_text(verse.text, width))
    return lines


def render_json(verse: Verse, opts: RenderOptions) -> str:
    """Serialise *verse* for ``--json`` output."""
    data = {
        "title": verse.title,
        "text": verse.text,
        "votd": not opts.was_explicit_passage,
    }
    return json.dumps(data, indent=2, ensure_ascii=False)
