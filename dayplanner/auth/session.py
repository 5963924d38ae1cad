"""Principal resolution for tool calls and context builds."""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from ..errors import Unauthenticated

logger = logging.getLogger(__name__)


class SessionProvider(ABC):
    """Resolves the authenticated user id of the current session."""

    @abstractmethod
    async def get_user_id(self) -> Optional[str]:
        """
        Get the authenticated user id.

        Returns:
            User id, or None if there is no valid session
        """
        pass


class StaticSession(SessionProvider):
    """Session bound to a fixed user id (console runtime and tests)."""

    def __init__(self, user_id: Optional[str]):
        self.user_id = user_id

    async def get_user_id(self) -> Optional[str]:
        return self.user_id


class AnonymousSession(SessionProvider):
    """Session with no principal."""

    async def get_user_id(self) -> Optional[str]:
        return None


async def require_user_id(session: Optional[SessionProvider]) -> str:
    """
    Resolve the caller's user id or fail before any store access.

    Raises:
        Unauthenticated: If there is no session or it has no user id
    """
    if session is None:
        raise Unauthenticated("Not authenticated: no session")

    user_id = await session.get_user_id()
    if not user_id:
        raise Unauthenticated("Not authenticated")
    return user_id
