"""
Unit tests for authentication service.
"""

from unittest.mock import MagicMock, patch

import pytest

from familyalbum.error_handling import AuthenticationError, AuthorizationError
from familyalbum.services.auth import (
    PROVIDER_DEVELOPMENT,
    PROVIDER_IAP,
    ROLE_ADMIN,
    ROLE_USER,
    AuthService,
    UserInfo,
)
from tests.conftest import TestDataFactory


class TestUserInfo:
    """Test cases for UserInfo dataclass."""

    def test_defaults(self):
        """Test name and role defaults."""
        user_info = UserInfo(user_id="123", email="user@example.com")

        assert user_info.full_name == "User"
        assert user_info.role == ROLE_USER
        assert user_info.picture is None
        assert not user_info.is_admin

    def test_admin(self):
        assert UserInfo(user_id="1", email="a@b.c", role=ROLE_ADMIN).is_admin


class TestDevelopmentSignIn:
    """Test cases for the development provider."""

    def test_development_mode_flag(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "development")
        assert AuthService(admin_emails=[])._development_mode is True

        monkeypatch.setenv("ENVIRONMENT", "production")
        assert AuthService(admin_emails=[])._development_mode is False

    def test_sign_in_default_user(self, monkeypatch):
        """Test the default development user is an admin."""
        for key in ("DEV_USER_EMAIL", "DEV_USER_NAME", "DEV_USER_ID"):
            monkeypatch.delenv(key, raising=False)
        service = AuthService(admin_emails=[])

        session = service.sign_in(PROVIDER_DEVELOPMENT)

        assert session is not None
        assert session.provider == PROVIDER_DEVELOPMENT
        assert session.user.email == "dev@example.com"
        assert session.user.user_id == "dev-user-123"
        assert session.user.full_name == "Development User"
        assert session.user.is_admin
        assert service.get_current_user() == session.user
        assert service.is_authenticated()

    def test_sign_in_custom_user(self, monkeypatch):
        monkeypatch.setenv("DEV_USER_EMAIL", "custom@test.com")
        monkeypatch.setenv("DEV_USER_ID", "custom-123")
        monkeypatch.setenv("DEV_USER_NAME", "<b>Grandpa</b>")
        monkeypatch.setenv("DEV_USER_ROLE", "user")

        user = AuthService(admin_emails=[]).sign_in(PROVIDER_DEVELOPMENT).user

        assert user.email == "custom@test.com"
        assert user.user_id == "custom-123"
        assert user.full_name == "&lt;b&gt;Grandpa&lt;/b&gt;"
        assert user.role == ROLE_USER

    def test_invalid_dev_values_fall_back(self, monkeypatch):
        monkeypatch.setenv("DEV_USER_EMAIL", "not-an-email")
        monkeypatch.setenv("DEV_USER_ROLE", "superuser")

        user = AuthService(admin_emails=[]).sign_in(PROVIDER_DEVELOPMENT).user

        assert user.email == "dev@example.com"
        assert user.role == ROLE_USER

    def test_rejected_outside_development(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "production")
        service = AuthService(admin_emails=[])

        with pytest.raises(AuthenticationError):
            service.sign_in(PROVIDER_DEVELOPMENT)

        assert not service.is_authenticated()

    def test_unknown_provider(self):
        with pytest.raises(AuthenticationError, match="Unknown auth provider"):
            AuthService(admin_emails=[]).sign_in("github")


class TestIAPSignIn:
    """Test cases for the Cloud IAP provider."""

    def test_parse_valid_header(self):
        service = AuthService(admin_emails=[])
        headers = TestDataFactory.create_iap_headers(user_id="sub-1", email="ann@example.com", name="Ann")

        user = service.parse_iap_header(headers)

        assert user == UserInfo(user_id="sub-1", email="ann@example.com", full_name="Ann", role=ROLE_USER)

    def test_header_lookup_is_case_insensitive(self):
        service = AuthService(admin_emails=[])
        token = TestDataFactory.create_valid_jwt_token()

        user = service.parse_iap_header({"x-goog-iap-jwt-assertion": token})

        assert user is not None
        assert user.user_id == "test-user-123"

    def test_missing_name_defaults_to_user(self):
        headers = TestDataFactory.create_iap_headers(name=None)

        user = AuthService(admin_emails=[]).parse_iap_header(headers)

        assert user.full_name == "User"

    def test_admin_emails_grant_admin(self):
        service = AuthService(admin_emails=["Ann@Example.com"])
        headers = TestDataFactory.create_iap_headers(email="ann@example.com")

        session = service.sign_in(PROVIDER_IAP, headers)

        assert session.user.is_admin

    def test_admin_emails_from_config(self, monkeypatch):
        monkeypatch.setenv("ADMIN_EMAILS", "boss@example.com, other@example.com")
        headers = TestDataFactory.create_iap_headers(email="boss@example.com")

        assert AuthService().parse_iap_header(headers).is_admin

    @pytest.mark.parametrize(
        "headers",
        [
            {},
            {"X-Goog-IAP-JWT-Assertion": "not-a-jwt"},
            {"X-Goog-IAP-JWT-Assertion": "a.!!!.c"},
            {"X-Goog-IAP-JWT-Assertion": TestDataFactory.create_valid_jwt_token({"sub": "1"})},
            {"X-Goog-IAP-JWT-Assertion": TestDataFactory.create_valid_jwt_token({"email": "a@b.c"})},
        ],
    )
    def test_invalid_headers_return_none(self, headers):
        service = AuthService(admin_emails=[])

        assert service.parse_iap_header(headers) is None
        assert service.sign_in(PROVIDER_IAP, headers) is None
        assert not service.is_authenticated()


class TestSessionGuards:
    """Test cases for ensure_authenticated and require_admin."""

    def test_ensure_authenticated_without_session(self):
        with pytest.raises(AuthenticationError):
            AuthService(admin_emails=[]).ensure_authenticated()

    def test_require_admin(self, monkeypatch):
        monkeypatch.setenv("DEV_USER_ROLE", "user")
        service = AuthService(admin_emails=[])
        service.sign_in(PROVIDER_DEVELOPMENT)

        with pytest.raises(AuthorizationError):
            service.require_admin()

    def test_sign_out(self):
        service = AuthService(admin_emails=[])
        service.sign_in(PROVIDER_DEVELOPMENT)

        service.sign_out()

        assert service.get_current_session() is None
        assert service.get_current_user() is None


class TestSessionSubscriptions:
    """Test cases for session change notifications."""

    def test_callbacks_receive_changes(self):
        service = AuthService(admin_emails=[])
        callback = MagicMock()
        service.on_session_change(callback)

        session = service.sign_in(PROVIDER_DEVELOPMENT)
        service.sign_out()

        assert [call.args[0] for call in callback.call_args_list] == [session, None]

    def test_same_user_does_not_notify(self):
        service = AuthService(admin_emails=[])
        service.sign_in(PROVIDER_DEVELOPMENT)
        callback = MagicMock()
        service.on_session_change(callback)

        service.sign_in(PROVIDER_DEVELOPMENT)

        callback.assert_not_called()

    def test_unsubscribe(self):
        service = AuthService(admin_emails=[])
        callback = MagicMock()
        subscription = service.on_session_change(callback)

        subscription.unsubscribe()
        subscription.unsubscribe()
        service.sign_in(PROVIDER_DEVELOPMENT)

        callback.assert_not_called()
        assert not subscription.active
        assert service.subscriber_count() == 0

    def test_failing_callback_does_not_stop_others(self):
        service = AuthService(admin_emails=[])
        failing = MagicMock(side_effect=RuntimeError("boom"))
        working = MagicMock()
        service.on_session_change(failing)
        service.on_session_change(working)

        with patch("familyalbum.services.auth.log_error") as mock_log_error:
            service.sign_in(PROVIDER_DEVELOPMENT)

        working.assert_called_once()
        mock_log_error.assert_called_once()
