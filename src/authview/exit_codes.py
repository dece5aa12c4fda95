"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each login outcome and each :class:`~authview.exceptions.AuthviewError`
subclass maps to one of these constants, so shell wrappers can branch on the
result of ``authview login`` or ``authview replay`` without parsing stdout.

Example::

    $ authview replay transcripts/cancelled.yaml
    $ echo $?
    8   # EXIT_USER_CANCEL -- the user backed out of the login screen
"""

EXIT_SUCCESS = 0
"""The command completed successfully (or the login succeeded)."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_PROVIDER_ERROR = 3
"""The identity provider redirected to the callback URI with an error."""

EXIT_TRANSPORT_ERROR = 6
"""A navigation failed before reaching the callback URI."""

EXIT_TRANSCRIPT_ERROR = 7
"""A navigation transcript could not be loaded or validated."""

EXIT_USER_CANCEL = 8
"""The user cancelled the login (back action, timeout, or leaving the screen)."""
