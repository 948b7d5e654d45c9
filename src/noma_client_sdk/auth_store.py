from __future__ import annotations

import logging
from dataclasses import dataclass, field

from pydantic import ValidationError

from .models import SessionData
from .storage import SESSION_KEY, DeviceStorage

logger = logging.getLogger(__name__)


@dataclass
class AuthStore:
    """Single source of truth for who is currently signed in on this device.

    Sessions are replaced wholesale; there is no field-level mutation. The
    token is read from here at send time by every request.
    """

    storage: DeviceStorage = field(default_factory=DeviceStorage)
    _session: SessionData | None = None

    @property
    def session(self) -> SessionData | None:
        return self._session

    @property
    def token(self) -> str | None:
        return self._session.token if self._session else None

    def is_authenticated(self) -> bool:
        return self._session is not None

    def save(self, session: SessionData) -> None:
        self._session = session
        self.storage.set(SESSION_KEY, session.model_dump(mode="json"))
        logger.info("session_saved", extra={"session_id": session.id, "user_id": session.user.id})

    def load(self) -> SessionData | None:
        data = self.storage.get(SESSION_KEY)
        if not data:
            return None
        try:
            self._session = SessionData.model_validate(data)
        except ValidationError:
            logger.warning("session_restore_failed")
            self.clear()
            return None
        return self._session

    def clear(self) -> None:
        previous = self._session
        self._session = None
        self.storage.remove(SESSION_KEY)
        logger.info("session_cleared", extra={"session_id": previous.id if previous else None})
