"""votd -- the NET Bible verse of the day (or any passage) in your terminal.

The package fetches a passage from the NET Bible labs API, caches the
verse of the day for six hours, and prints it wrapped to the terminal
width.

Typical usage::

    votd                  # verse of the day
    votd john 3:16-17     # a specific passage
    votd --refresh-cache  # refetch the verse of the day

Modules:
    app: Typer application and CLI entry point.
    resolver: Cache/fetch decision logic.
    client: HTTP client for the NET Bible API.
    cache: Single-slot verse-of-the-day cache.
    formatter: Title and body line rendering.
    models: Pydantic models shared across the package.
    config: XDG-aware configuration and cache location.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr output system with Rich support.
"""

__version__ = "0.1.0"
