"""Exception hierarchy for votd.

All exceptions inherit from :class:`VotdError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`votd.exit_codes`.
The top-level handler in :func:`votd.app.main` catches ``VotdError`` and
exits with the appropriate code, while unexpected exceptions produce a
crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Only fetch errors ever reach that handler during normal operation. Cache
errors are raised by :class:`~votd.cache.VerseCache` so that
:class:`~votd.resolver.VerseResolver` can recover from them locally.

Subclass hierarchy::

    VotdError (exit 1)
    +-- FetchError
    |   +-- TimeoutExceededError
    |   +-- RemoteRejectedError
    |   +-- ConnectionFailedError
    |   +-- EmptyResponseError
    |   +-- MalformedDataError
    +-- CacheError
    |   +-- CacheCorruptError
    |   +-- CacheLocationUnavailableError
    |   +-- CacheWriteError
    +-- ConfigError
"""

from votd.exit_codes import EXIT_GENERIC_FAILURE


class VotdError(Exception):
    """Base exception for all votd errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


# --- Fetch errors (fatal) ---


class FetchError(VotdError):
    """Raised when a passage could not be fetched from the remote service."""


class TimeoutExceededError(FetchError):
    """Raised when the request exceeded the configured timeout."""

    def __init__(self, message: str = "timeout exceeded", exit_code: int | None = None):
        super().__init__(message, exit_code)


class RemoteRejectedError(FetchError):
    """Raised when the service answers with a non-2xx status.

    The service answers an unrecognised passage with a 400 and an empty
    body, so this usually means the requested verse is invalid.
    """

    def __init__(
        self,
        message: str = "Server returned an error; is the verse you requested valid?",
        status_code: int | None = None,
        exit_code: int | None = None,
    ):
        super().__init__(message, exit_code)
        self.status_code = status_code


class ConnectionFailedError(FetchError):
    """Raised when the service could not be reached (DNS, refused, offline)."""

    def __init__(
        self,
        message: str = "Couldn't connect to server; are you connected to the Internet?",
        exit_code: int | None = None,
    ):
        super().__init__(message, exit_code)


class EmptyResponseError(FetchError):
    """Raised when the service returned an empty list of verses."""

    def __init__(self, message: str = "No verses returned", exit_code: int | None = None):
        super().__init__(message, exit_code)


class MalformedDataError(FetchError):
    """Raised when the response body does not match the expected verse shape."""


# --- Cache errors (recovered by the resolver) ---


class CacheError(VotdError):
    """Base class for verse cache failures."""


class CacheCorruptError(CacheError):
    """Raised when the cache slot cannot be decoded into a verse."""


class CacheLocationUnavailableError(CacheError):
    """Raised when no platform cache directory could be determined."""


class CacheWriteError(CacheError):
    """Raised when the cache slot could not be written."""


# --- Configuration ---


class ConfigError(VotdError):
    """Raised for configuration problems (unreadable file, invalid JSON or values)."""
