"""Session storage for access grants obtained through OAuth."""

from abc import ABC, abstractmethod
from typing import Optional

from .models.shop_models import ShopSession


def offline_session_id(shop: str) -> str:
    """Session id under which a shop's offline grant is stored."""
    return f"offline_{shop}"


class BaseSessionStorage(ABC):
    """Abstract session storage interface."""

    @abstractmethod
    def store_session(self, session: ShopSession) -> None:
        """Store a session under its id."""

    @abstractmethod
    def load_session(self, session_id: str) -> Optional[ShopSession]:
        """Get a stored session by id."""

    @abstractmethod
    def delete_session(self, session_id: str) -> bool:
        """Delete a session. Returns True if one was stored."""


class InMemorySessionStorage(BaseSessionStorage):
    """In-memory session storage for development/testing."""

    def __init__(self):
        self._sessions: dict[str, ShopSession] = {}

    def store_session(self, session: ShopSession) -> None:
        self._sessions[session.id] = session

    def load_session(self, session_id: str) -> Optional[ShopSession]:
        return self._sessions.get(session_id)

    def delete_session(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None
