"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to an error category and is referenced by the
corresponding :class:`~votd.exceptions.VotdError` subclass. Every failed
fetch (timeout, rejected passage, unreachable service, bad payload) exits
with :data:`EXIT_GENERIC_FAILURE` so shell wrappers only need to test for
non-zero. Invalid arguments are rejected by Click itself with status 2.

Example::

    $ votd john 99:99
    Server returned an error; is the verse you requested valid?
    $ echo $?
    1
"""

EXIT_SUCCESS = 0
"""The verse was resolved and printed."""

EXIT_GENERIC_FAILURE = 1
"""The verse could not be resolved (network, remote or configuration error)."""

EXIT_CANCELLED = 130
"""The user interrupted the command with Ctrl-C."""
