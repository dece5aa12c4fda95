"""Map an explicit user cancel (back action, timeout) to a pending outcome.

A cancel request is advisory: it records :meth:`Outcome.user_cancel
<authview.models.Outcome.user_cancel>` on the session and clears its
``started`` flag, but nothing is delivered until the host actually leaves the
login screen. A provider or transport outcome that was classified first is
never overwritten by a cancel, and a cancel recorded first yields to a
callback classified before the screen is left.
"""

from __future__ import annotations

import logging
from typing import Optional

from authview.models import Outcome, Session

logger = logging.getLogger(__name__)


class CancellationHandler:
    """Records cancel requests against the in-flight session."""

    def request_cancel(self, session: Optional[Session]) -> bool:
        """Mark *session* as cancelled by the user.

        Returns:
            ``True`` if ``UserCancel`` is now the pending outcome, ``False``
            if there was nothing to cancel or a classified outcome already
            won.
        """
        if session is None or not session.in_progress:
            logger.debug("Cancel requested with no authentication in progress")
            return False

        session.started = False
        if session.finished and session.outcome is not None:
            logger.debug(
                "Cancel requested after '%s' was recorded; keeping it",
                session.outcome.status.value,
            )
            return False

        session.outcome = Outcome.user_cancel()
        logger.debug("User cancel recorded")
        return True

    @staticmethod
    def resolve(session: Session) -> Outcome:
        """The outcome to deliver when the screen is left: recorded or ``UserCancel``."""
        return session.outcome or Outcome.user_cancel()
