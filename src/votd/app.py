"""Typer application and CLI entry point for votd.

The single ``votd`` command resolves either the verse of the day or the
passage named by its positional words, and prints it to stdout:

    votd                      # verse of the day (cached for 6 hours)
    votd john 3:16-17         # explicit passage, never cached
    votd -r --show-translation

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers and invokes the Typer app.
Unhandled exceptions are written to a crash log under the data directory.

See Also:
    :mod:`votd.resolver`: The fetch/cache decision logic.
    :mod:`votd.config`: Configuration and cache location resolution.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import TYPE_CHECKING, Any, List, Optional

import typer

from votd import __version__
from votd.exit_codes import EXIT_CANCELLED, EXIT_GENERIC_FAILURE, EXIT_SUCCESS

if TYPE_CHECKING:
    from votd.cache import VerseCache


app = typer.Typer(
    name="votd",
    help="Retrieve the verse of the day or a specified verse from the NET Bible.",
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"votd {__version__}")
        raise typer.Exit(code=EXIT_SUCCESS)


@app.command()
def votd_command(
    verse: Optional[List[str]] = typer.Argument(
        None,
        help="Passage to look up, e.g. 'john 3:16-17'. 'random' and 'votd' are "
        "accepted too. Omit for the verse of the day.",
        show_default=False,
    ),
    no_cache: bool = typer.Option(
        False, "--no-cache", "-n", help="Disable reading from/writing to the cache (only affects the verse of the day)."
    ),
    refresh_cache: bool = typer.Option(
        False, "--refresh-cache", "-r", help="Get the current verse of the day from the web, then write it to the cache."
    ),
    only_verse: bool = typer.Option(
        False, "--only-verse", "-o", help="Only display the text of the verse(s), with no title before."
    ),
    show_translation: bool = typer.Option(
        False, "--show-translation", help="Print the translation (NET) after the verse name."
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", "-t", min=0.001, help="Seconds to wait for the server before giving up [default: 2]."
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Print the verse as a JSON object."
    ),
    clear_cache: bool = typer.Option(
        False, "--clear-cache", help="Delete the cached verse of the day and exit."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Retrieve the verse of the day or a specified verse from the NET Bible.

    Verses are case-insensitive, and some short book names are accepted
    (based on the NET Bible API, not this CLI).
    """
    from votd.cache import VerseCache
    from votd.client import VerseClient
    from votd.config import cache_file_path, resolve_config
    from votd.exceptions import VotdError
    from votd.formatter import render, render_json
    from votd.models import CachePolicy, RenderOptions
    from votd.output import OutputFormat, OutputManager, set_output
    from votd.resolver import VerseResolver

    output = OutputManager(
        format=OutputFormat.JSON if json_output else OutputFormat.AUTO,
        no_color=no_color,
        quiet=quiet,
        verbose=verbose,
    )
    set_output(output)

    passage = " ".join(verse) if verse else None
    cache = VerseCache(cache_file_path())

    if clear_cache:
        _clear_cache(cache)
        return

    try:
        config = resolve_config(
            cli_timeout=timeout,
            cli_no_cache=no_cache,
            cli_show_translation=show_translation,
        )
        policy = CachePolicy(
            caching_enabled=config.cache.enabled,
            force_refresh=refresh_cache,
        )
        with VerseClient(
            base_url=config.request.base_url,
            timeout=config.request.timeout,
        ) as client:
            resolved = VerseResolver(client, cache).resolve(
                passage, policy, config.request.timeout
            )
    except VotdError as exc:
        output.error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    opts = RenderOptions(
        suppress_title=only_verse,
        show_translation=config.output.show_translation,
        was_explicit_passage=passage is not None,
    )
    if output.format == OutputFormat.JSON:
        output.print_data(render_json(resolved, opts))
        return

    lines = render(resolved, opts, width=output.width)
    if not opts.suppress_title:
        output.print_title(lines.pop(0))
    for line in lines:
        output.print_data(line)


def _clear_cache(cache: VerseCache) -> None:
    """Handle ``--clear-cache``: remove the slot and report what happened."""
    from votd.exceptions import CacheError
    from votd.output import error, info, success

    if not cache.available:
        info("Can't determine where to place a cache file. Nothing to clear.")
        return
    try:
        removed = cache.clear()
    except CacheError as exc:
        error(str(exc))
        raise typer.Exit(code=EXIT_GENERIC_FAILURE) from None
    if removed:
        success(f"Removed {cache.path}")
    else:
        info("No cached verse to clear.")


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_CANCELLED)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path.

    Args:
        exc: The unhandled exception to log.

    Returns:
        Absolute path to the written crash log file.
    """
    from votd.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``votd`` console script.

    Unhandled :class:`~votd.exceptions.VotdError` instances cause a clean
    exit with the error's ``exit_code``. All other exceptions produce a
    crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_CANCELLED)
    except Exception as exc:
        from votd.exceptions import VotdError
        from votd.output import error

        if isinstance(exc, VotdError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
