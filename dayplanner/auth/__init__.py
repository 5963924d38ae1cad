"""Session and principal resolution."""

from .session import AnonymousSession, SessionProvider, StaticSession, require_user_id

__all__ = ["AnonymousSession", "SessionProvider", "StaticSession", "require_user_id"]
