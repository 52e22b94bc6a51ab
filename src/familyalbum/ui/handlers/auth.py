"""Authentication handlers for familyalbum application."""

import streamlit as st

from ...error_handling import FamilyAlbumError
from ...logging_config import get_logger
from ...services.auth import PROVIDER_DEVELOPMENT, PROVIDER_IAP, AuthService, _is_development_mode
from ..context import SessionContextProvider, ViewContext
from ..navigation import View, navigate

logger = get_logger(__name__)


def get_session_auth_service() -> AuthService:
    """Get the auth service of the current browser session, creating it on first use."""
    if "auth_service" not in st.session_state:
        st.session_state.auth_service = AuthService()
    return st.session_state.auth_service


def get_context_provider() -> SessionContextProvider:
    """Get the context provider of the current browser session."""
    provider = st.session_state.get("context_provider")
    if provider is None or provider.closed:
        provider = SessionContextProvider(get_session_auth_service())
        st.session_state.context_provider = provider
    return provider


def release_session_auth() -> None:
    """Close the context provider and forget the auth service of the current browser session."""
    provider = st.session_state.get("context_provider")
    if provider is not None:
        provider.close()
    for key in ("context_provider", "auth_service"):
        if key in st.session_state:
            del st.session_state[key]


def authenticate_user() -> ViewContext:
    """
    Sign the session in from Cloud IAP headers if it is not signed in yet.

    In development the user signs in explicitly from the sign-in screen.

    Returns:
        ViewContext: The context pages render with
    """
    auth_service = get_session_auth_service()
    provider = get_context_provider()

    if auth_service.is_authenticated() or _is_development_mode():
        return provider.context

    headers = {}
    if hasattr(st, "context") and hasattr(st.context, "headers"):
        headers = dict(st.context.headers)

    try:
        if auth_service.sign_in(PROVIDER_IAP, headers) is None:
            st.session_state.auth_error = "Cloud IAP authentication required"
            logger.warning("authentication_failed", reason="no_valid_iap_header")
        else:
            st.session_state.auth_error = None
    except FamilyAlbumError as e:
        st.session_state.auth_error = e.user_message

    return provider.context


def handle_login() -> None:
    """Sign in with the development provider from the sign-in screen."""
    try:
        get_session_auth_service().sign_in(PROVIDER_DEVELOPMENT)
        st.session_state.auth_error = None
    except FamilyAlbumError as e:
        st.session_state.auth_error = e.user_message
    st.rerun()


def handle_logout() -> None:
    """Sign out, drop the session's auth state and return to the dashboard."""
    get_session_auth_service().sign_out()
    release_session_auth()
    st.session_state.auth_error = None
    logger.info("user_logout")
    navigate(View.DASHBOARD)


def require_authentication(context: ViewContext) -> bool:
    """
    Check that a user is signed in, rendering the sign-in screen if not.

    Returns:
        bool: True if authenticated, False otherwise
    """
    if context.is_authenticated:
        return True

    from ..components.common import render_sign_in_screen

    render_sign_in_screen(st.session_state.get("auth_error"))
    return False
