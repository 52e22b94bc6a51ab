"""Dashboard page for familyalbum application."""

import streamlit as st

from ...config import get_recent_photos_limit
from ...error_handling import FamilyAlbumError
from ...logging_config import get_logger
from ...services.loader import DashboardData, ViewLoader
from ...services.photos import get_photo_service
from ..components.common import render_empty_state, render_stat_card
from ..components.gallery import render_photo_grid
from ..context import ViewContext
from ..handlers.auth import get_session_auth_service, require_authentication
from ..navigation import View, navigate

logger = get_logger(__name__)


def load_dashboard() -> DashboardData:
    """Load the dashboard data; an unavailable backend yields an empty dashboard."""
    try:
        loader = ViewLoader(get_photo_service(), get_session_auth_service().get_current_user)
    except FamilyAlbumError:
        return DashboardData()
    return loader.load_dashboard(recent_limit=get_recent_photos_limit())


def render_dashboard_page(context: ViewContext) -> None:
    """Render the welcome, counters and most recent photos."""
    if not require_authentication(context):
        return

    data = load_dashboard()
    user = data.user or context.user

    st.markdown(f"## Welcome back, {user.full_name if user else 'User'}")
    st.caption("Your family's memories, all in one place.")

    col1, col2, col3 = st.columns(3)
    with col1:
        render_stat_card("Total photos", data.stats.total, "📷")
    with col2:
        render_stat_card("This month", data.stats.this_month, "🗓️")
    with col3:
        render_stat_card("Favorites", data.stats.favorites, "❤️")

    st.divider()

    col1, col2 = st.columns([3, 1])
    with col1:
        st.markdown("### Recent photos")
    with col2:
        if st.button("View all", key="dashboard_view_all", use_container_width=True):
            navigate(View.GALLERY)

    if not data.recent_photos:
        render_empty_state(
            title="No photos yet",
            description="Start building your family album.",
            icon="📷",
            action_text="Upload photos" if context.is_admin else None,
            action_view=View.UPLOAD if context.is_admin else None,
        )
        return

    render_photo_grid(data.recent_photos, key_prefix="recent")

    if context.is_admin:
        st.divider()
        if st.button("📤 Upload photos", key="dashboard_upload", type="primary"):
            navigate(View.UPLOAD)
