"""Authentication service for the familyalbum application.

Identity comes from one of two providers:

- ``iap``: the Cloud IAP JWT assertion header set by the load balancer.
- ``development``: a user described by ``DEV_USER_*`` environment variables,
  available only when ``ENVIRONMENT`` is a development value.

Views do not read a global user. They register for session changes with
``on_session_change`` and drop the registration when they are disposed.
"""

import base64
import html
import json
import os
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from ..error_handling import AuthenticationError, AuthorizationError
from ..logging_config import get_logger, log_error, log_security_event, log_user_action

logger = get_logger(__name__)

DEVELOPMENT_ENVIRONMENTS = ["development", "dev", "local", "test"]
PROVIDER_IAP = "iap"
PROVIDER_DEVELOPMENT = "development"
ROLE_ADMIN = "admin"
ROLE_USER = "user"


@dataclass
class UserInfo:
    """Represents the signed-in family member."""

    user_id: str
    email: str
    full_name: str = "User"
    role: str = ROLE_USER
    picture: str | None = None

    @property
    def is_admin(self) -> bool:
        """Admins may upload photos."""
        return self.role == ROLE_ADMIN


@dataclass
class Session:
    """An authenticated session."""

    user: UserInfo
    provider: str
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))


SessionCallback = Callable[[Session | None], None]


class SessionSubscription:
    """Registration returned by ``AuthService.on_session_change``."""

    def __init__(self, service: "AuthService", callback: SessionCallback):
        self._service = service
        self.callback = callback
        self.active = True

    def unsubscribe(self) -> None:
        """Stop receiving session changes. Calling it twice is harmless."""
        if self.active:
            self._service._remove_subscription(self)
            self.active = False


def _is_development_mode() -> bool:
    environment = os.getenv("ENVIRONMENT", "development").lower().strip()
    return environment in DEVELOPMENT_ENVIRONMENTS


def _sanitize(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return html.escape(text) if text else None


class AuthService:
    """Session holder and sign-in entry point."""

    IAP_HEADER_NAME = "X-Goog-IAP-JWT-Assertion"

    def __init__(self, admin_emails: list[str] | None = None) -> None:
        """
        Initialize the authentication service.

        Args:
            admin_emails: Emails that receive the admin role on IAP sign-in
                (defaults to the ADMIN_EMAILS setting)
        """
        self._session: Session | None = None
        self._subscriptions: list[SessionSubscription] = []
        self._development_mode = _is_development_mode()

        if admin_emails is None:
            from ..config import get_admin_emails

            admin_emails = get_admin_emails()
        self._admin_emails = {email.lower() for email in admin_emails}

        if self._development_mode:
            logger.info("development_auth_mode_enabled")

    # Session access

    def get_current_session(self) -> Session | None:
        """Get the current session, if any."""
        return self._session

    def get_current_user(self) -> UserInfo | None:
        """Get the signed-in user, if any."""
        return self._session.user if self._session else None

    def is_authenticated(self) -> bool:
        """Check if a user is currently signed in."""
        return self._session is not None

    def ensure_authenticated(self) -> UserInfo:
        """
        Get the signed-in user or fail.

        Raises:
            AuthenticationError: If nobody is signed in
        """
        if self._session is None:
            raise AuthenticationError("User is not authenticated", code="user_not_authenticated")
        return self._session.user

    def require_admin(self) -> UserInfo:
        """
        Get the signed-in user if they are an admin.

        Raises:
            AuthenticationError: If nobody is signed in
            AuthorizationError: If the user is not an admin
        """
        user = self.ensure_authenticated()
        if not user.is_admin:
            raise AuthorizationError(
                "Admin role required",
                code="admin_required",
                details={"user_id": user.user_id, "role": user.role},
            )
        return user

    # Sign in / out

    def sign_in(self, provider: str, headers: dict[str, str] | None = None) -> Session | None:
        """
        Sign in with the given provider.

        Args:
            provider: "iap" or "development"
            headers: Request headers (needed by "iap")

        Returns:
            The new session, or None if the provider could not identify a user

        Raises:
            AuthenticationError: If the provider is unknown or not allowed here
        """
        if provider == PROVIDER_DEVELOPMENT:
            if not self._development_mode:
                log_security_event("development_sign_in_rejected")
                raise AuthenticationError(
                    "Development sign-in is disabled outside development environments",
                    code="development_auth_disabled",
                )
            user: UserInfo | None = self._get_development_user()
        elif provider == PROVIDER_IAP:
            user = self.parse_iap_header(headers or {})
        else:
            raise AuthenticationError(f"Unknown auth provider: {provider}", code="unknown_provider")

        if user is None:
            self._set_session(None)
            return None

        session = Session(user=user, provider=provider)
        self._set_session(session)
        log_user_action(user.user_id, "signed_in", provider=provider, email=user.email)
        return session

    def sign_out(self) -> None:
        """End the current session."""
        user_id = self._session.user.user_id if self._session else None
        self._set_session(None)
        log_user_action(user_id or "unknown", "signed_out")

    # Subscriptions

    def on_session_change(self, callback: SessionCallback) -> SessionSubscription:
        """
        Register ``callback`` to be called with the new session whenever it changes.

        Returns:
            Subscription whose ``unsubscribe()`` removes the callback
        """
        subscription = SessionSubscription(self, callback)
        self._subscriptions.append(subscription)
        return subscription

    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def _remove_subscription(self, subscription: SessionSubscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    def _set_session(self, session: Session | None) -> None:
        previous = self._session
        self._session = session

        previous_id = previous.user.user_id if previous else None
        current_id = session.user.user_id if session else None
        if previous_id == current_id:
            return

        for subscription in list(self._subscriptions):
            try:
                subscription.callback(session)
            except Exception as e:
                log_error(e, {"operation": "session_change_callback"})

    # Providers

    def _get_development_user(self) -> UserInfo:
        """Build the development user from DEV_USER_* variables."""
        dev_email = os.getenv("DEV_USER_EMAIL", "dev@example.com")
        dev_name = os.getenv("DEV_USER_NAME", "Development User")
        dev_user_id = os.getenv("DEV_USER_ID", "dev-user-123")
        dev_role = os.getenv("DEV_USER_ROLE", ROLE_ADMIN)

        if not dev_email or "@" not in dev_email:
            logger.warning("invalid_dev_user_email", email=dev_email)
            dev_email = "dev@example.com"

        if not dev_user_id or not dev_user_id.strip():
            logger.warning("invalid_dev_user_id", user_id=dev_user_id)
            dev_user_id = "dev-user-123"

        return UserInfo(
            user_id=dev_user_id.strip(),
            email=dev_email,
            full_name=_sanitize(dev_name) or "User",
            role=dev_role if dev_role in (ROLE_ADMIN, ROLE_USER) else ROLE_USER,
        )

    def parse_iap_header(self, headers: dict[str, str]) -> UserInfo | None:
        """
        Extract the user from the Cloud IAP JWT assertion header.

        Header lookup is case-insensitive. The signature is verified by IAP
        before the request reaches the app; only the payload is decoded here.

        Returns:
            UserInfo, or None when the header is missing or malformed
        """
        wanted = self.IAP_HEADER_NAME.lower()
        jwt_token = next((value for key, value in headers.items() if key.lower() == wanted), None)

        if not jwt_token:
            log_security_event("missing_iap_header", headers_present=sorted(headers))
            return None

        try:
            return self._extract_user_info(self._decode_jwt_payload(jwt_token))
        except ValueError as e:
            log_error(e, {"operation": "parse_iap_header"})
            log_security_event("authentication_failure", error=str(e))
            return None

    def _decode_jwt_payload(self, jwt_token: str) -> dict[str, Any]:
        parts = jwt_token.split(".")
        if len(parts) != 3:
            raise ValueError("Invalid JWT token format")

        payload_b64 = parts[1]
        payload_b64 += "=" * (-len(payload_b64) % 4)

        try:
            payload = json.loads(base64.urlsafe_b64decode(payload_b64).decode("utf-8"))
        except (ValueError, UnicodeDecodeError) as e:
            raise ValueError(f"Failed to decode JWT payload: {e}") from e

        if not isinstance(payload, dict):
            raise ValueError("JWT payload is not an object")
        return payload

    def _extract_user_info(self, payload: dict[str, Any]) -> UserInfo:
        email = _sanitize(payload.get("email"))
        sub = _sanitize(payload.get("sub"))

        if not email:
            raise ValueError("Email not found in JWT payload")
        if not sub:
            raise ValueError("Subject (user ID) not found in JWT payload")

        role = ROLE_ADMIN if email.lower() in self._admin_emails else ROLE_USER
        return UserInfo(
            user_id=sub,
            email=email,
            full_name=_sanitize(payload.get("name")) or "User",
            role=role,
            picture=_sanitize(payload.get("picture")),
        )
