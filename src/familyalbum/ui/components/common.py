"""Reusable UI components for familyalbum application."""

import streamlit as st

from ...logging_config import get_logger
from ...services.auth import _is_development_mode
from ..context import ViewContext
from ..navigation import View, current_view, navigate

logger = get_logger(__name__)

NAVIGATION = [
    ("🏠 Dashboard", View.DASHBOARD),
    ("🖼️ Gallery", View.GALLERY),
    ("❤️ Favorites", View.FAVORITES),
    ("📤 Upload", View.UPLOAD),
]


def render_empty_state(
    title: str,
    description: str,
    icon: str = "📭",
    action_text: str | None = None,
    action_view: View | None = None,
) -> None:
    """
    Render an empty state message with optional action button.

    Args:
        title: Main title for the empty state
        description: Description text
        icon: Emoji icon to display
        action_text: Text for action button (optional)
        action_view: View to navigate to when action button is clicked (optional)
    """
    col1, col2, col3 = st.columns([1, 2, 1])

    with col2:
        st.markdown(
            f"""
        <div style='text-align: center; padding: 2rem 0;'>
            <div style='font-size: 4rem; margin-bottom: 1rem;'>{icon}</div>
            <h3 style='color: #666; margin-bottom: 1rem;'>{title}</h3>
            <p style='color: #888; margin-bottom: 2rem;'>{description}</p>
        </div>
        """,
            unsafe_allow_html=True,
        )

        if action_text and action_view:
            if st.button(action_text, use_container_width=True, type="primary"):
                navigate(action_view)


def render_error_message(error_type: str, message: str, details: str | None = None) -> None:
    """
    Render a standardized error message.

    Args:
        error_type: Type of error (e.g., "Upload Error")
        message: Main error message
        details: Additional error details (optional)
    """
    st.error(f"**{error_type}:** {message}")

    if details:
        with st.expander("🔍 Error details"):
            st.code(details)


def render_stat_card(label: str, value: int, icon: str) -> None:
    """Render one dashboard counter."""
    st.metric(label=f"{icon} {label}", value=value)


def format_date(value) -> str:
    """Format a date or datetime as e.g. "Jul 4, 2024"."""
    if value is None:
        return ""
    return f"{value:%b} {value.day}, {value.year}"


def navigation_items(context: ViewContext) -> list[tuple[str, View]]:
    """Navigation entries visible to the user; Upload is for admins only."""
    return [(label, view) for label, view in NAVIGATION if view != View.UPLOAD or context.is_admin]


def render_header() -> None:
    """Render the application header."""
    st.markdown("# 📸 Family Memories")
    st.divider()


def render_sidebar(context: ViewContext) -> None:
    """Render the sidebar with navigation and the signed-in user."""
    from ..handlers.auth import handle_logout

    with st.sidebar:
        st.markdown("### 📸 Family Memories")
        st.divider()

        if not context.is_authenticated:
            st.info("Sign in to see the family photos")
            return

        active = current_view()
        for label, view in navigation_items(context):
            if st.button(
                label,
                key=f"nav_{view.value}",
                use_container_width=True,
                type="primary" if view == active else "secondary",
            ):
                navigate(view)

        st.divider()

        st.markdown(f"**{context.display_name}**")
        st.caption(context.user.email if context.user else "")

        if st.button("🚪 Sign out", key="nav_sign_out", use_container_width=True):
            handle_logout()


def render_sign_in_screen(auth_error: str | None = None) -> None:
    """Render the welcome screen shown to visitors who are not signed in."""
    from ..handlers.auth import handle_login

    col1, col2, col3 = st.columns([1, 2, 1])

    with col2:
        st.markdown("## Welcome to Family Memories")
        st.markdown("Sign in to browse, upload and comment on the family's photos.")

        if auth_error:
            st.error(auth_error)

        if _is_development_mode():
            if st.button("Sign in", type="primary", use_container_width=True):
                handle_login()
        else:
            st.info("Access is provided through your organization's sign-in. Reload the page to try again.")


def render_footer() -> None:
    """Render the application footer."""
    from ... import __version__

    st.divider()

    st.markdown(
        f"""
    <div style='text-align: center; color: #666; font-size: 0.8em;'>
        <strong>Family Memories v{__version__}</strong>
    </div>
    """,
        unsafe_allow_html=True,
    )
