"""Built-in CLI commands: ``classify``, ``replay``, ``login`` and ``config``."""

from authview.exit_codes import (
    EXIT_PROVIDER_ERROR,
    EXIT_SUCCESS,
    EXIT_TRANSPORT_ERROR,
    EXIT_USER_CANCEL,
)
from authview.models import AuthenticationStatus, Outcome

_OUTCOME_EXIT_CODES = {
    AuthenticationStatus.SUCCESS: EXIT_SUCCESS,
    AuthenticationStatus.ERROR_SERVER: EXIT_PROVIDER_ERROR,
    AuthenticationStatus.ERROR_HTTP: EXIT_TRANSPORT_ERROR,
    AuthenticationStatus.USER_CANCEL: EXIT_USER_CANCEL,
}


def outcome_exit_code(outcome: Outcome) -> int:
    """Process exit code reported for a login *outcome*."""
    return _OUTCOME_EXIT_CODES[outcome.status]
