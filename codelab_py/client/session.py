"""Authentication session shared by the HTTP client layer."""

import logging
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


class AuthSession:
    """
    Holds the bearer token for one CLI session.
    Subscribers are notified when the backend forces a logout.
    """

    def __init__(self, token: Optional[str] = None):
        self.token = token or None
        self._subscribers: List[Callable[[], None]] = []

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    def login(self, token: str) -> None:
        self.token = token

    def logout(self) -> None:
        self.token = None

    def subscribe(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register a forced-logout callback. Returns an unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def invalidate(self) -> None:
        """Drop the token after a 401 and notify subscribers."""
        logger.debug("Session invalidated by backend")
        self.token = None
        for callback in list(self._subscribers):
            callback()

    def headers(self) -> dict:
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}
