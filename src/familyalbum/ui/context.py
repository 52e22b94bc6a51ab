"""
Session context handed to every page render.

Pages never look the user up themselves. ``SessionContextProvider`` follows
the auth service through a session-change subscription and exposes the
latest state as an immutable ``ViewContext``.
"""

from dataclasses import dataclass

from ..logging_config import get_logger
from ..services.auth import AuthService, Session, SessionSubscription, UserInfo

logger = get_logger(__name__)


@dataclass(frozen=True)
class ViewContext:
    """Who is looking at the page."""

    user: UserInfo | None = None
    session: Session | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def is_admin(self) -> bool:
        return self.user is not None and self.user.is_admin

    @property
    def display_name(self) -> str:
        return self.user.full_name if self.user else "User"

    @classmethod
    def from_session(cls, session: Session | None) -> "ViewContext":
        return cls(user=session.user if session else None, session=session)


class SessionContextProvider:
    """Keeps a ``ViewContext`` in step with an ``AuthService``."""

    def __init__(self, auth_service: AuthService):
        self.auth_service = auth_service
        self._context = ViewContext.from_session(auth_service.get_current_session())
        self._subscription: SessionSubscription | None = auth_service.on_session_change(self._on_session_change)

    @property
    def context(self) -> ViewContext:
        return self._context

    @property
    def closed(self) -> bool:
        return self._subscription is None

    def _on_session_change(self, session: Session | None) -> None:
        self._context = ViewContext.from_session(session)
        logger.debug("view_context_updated", user_id=self._context.user.user_id if self._context.user else None)

    def close(self) -> None:
        """Stop following the auth service."""
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
