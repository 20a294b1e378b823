"""Session persistence for the signed-in candidate.

The session lives in its own file (data/session.json) so the bearer token is
only ever read from here, fresh on each backend call. Nothing else keeps a
copy of it.
"""

import json
import logging
import os
import time
from pathlib import Path

from .exceptions import NotAuthenticatedError
from .models import Session

logger = logging.getLogger(__name__)

SESSION_FILE = Path(__file__).parent.parent / "data" / "session.json"


class SessionStore:
    """Reads and writes the current session in data/session.json."""

    def __init__(self, path: Path | None = None):
        self._file = Path(path) if path else SESSION_FILE

    def load(self) -> Session | None:
        """Get the stored session, expired or not. None if absent or unreadable."""
        if not self._file.exists():
            return None
        try:
            with open(self._file) as f:
                return Session(**json.load(f))
        except (json.JSONDecodeError, OSError, TypeError, ValueError) as e:
            logger.warning("Ignoring unreadable session file %s: %s", self._file, e)
            return None

    def save(self, session: Session) -> None:
        self._file.parent.mkdir(parents=True, exist_ok=True)
        # Owner-only from creation; chmod also tightens a pre-existing file.
        fd = os.open(self._file, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w") as f:
            json.dump(session.model_dump(), f, indent=2)
        self._file.chmod(0o600)

    def clear(self) -> None:
        """Remove the stored session. Idempotent."""
        self._file.unlink(missing_ok=True)

    def current(self) -> Session | None:
        """Get the session if it has not expired."""
        session = self.load()
        if session is None or session.expires_at <= time.time():
            return None
        return session

    def get_token(self) -> str:
        """Get the bearer token for the live session.

        Raises:
            NotAuthenticatedError: If there is no session or it has expired.
        """
        session = self.load()
        if session is None:
            raise NotAuthenticatedError()
        if session.expires_at <= time.time():
            raise NotAuthenticatedError("Session expired")
        return session.access_token
