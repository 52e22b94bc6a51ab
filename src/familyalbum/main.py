"""
Main Streamlit application for familyalbum.

This is the entry point for the family photo sharing web application.
"""

import streamlit as st

from familyalbum.config import get_debug_mode
from familyalbum.error_handling import handle_error
from familyalbum.logging_config import configure_structured_logging, get_logger
from familyalbum.ui.components.common import render_error_message, render_footer, render_header, render_sidebar
from familyalbum.ui.context import ViewContext
from familyalbum.ui.handlers.auth import authenticate_user
from familyalbum.ui.navigation import View, current_view, navigate
from familyalbum.ui.pages.dashboard import render_dashboard_page
from familyalbum.ui.pages.favorites import render_favorites_page
from familyalbum.ui.pages.gallery import render_gallery_page
from familyalbum.ui.pages.photo import render_photo_page
from familyalbum.ui.pages.upload import render_upload_page

configure_structured_logging()
logger = get_logger(__name__)

PAGES = {
    View.DASHBOARD: render_dashboard_page,
    View.GALLERY: render_gallery_page,
    View.FAVORITES: render_favorites_page,
    View.UPLOAD: render_upload_page,
    View.PHOTO: render_photo_page,
}


def initialize_session_state() -> None:
    """Initialize session state variables."""
    if "auth_error" not in st.session_state:
        st.session_state.auth_error = None

    if "current_page" not in st.session_state:
        # A shared photo link opens straight on the photo
        st.session_state.current_page = View.PHOTO.value if st.query_params.get("id") else View.DASHBOARD.value


def render_main_content(context: ViewContext) -> None:
    """Render the page for the current view."""
    view = current_view()

    try:
        PAGES[view](context)
    except Exception as e:
        error_info = handle_error(e, {"operation": "render_page", "page": view.value})
        logger.error("page_render_error", page=view.value, code=error_info.code, category=error_info.category.value)
        render_error_message(f"The {view.value} page could not be displayed", error_info.user_message, error_info.message)

        if st.button("🏠 Back to dashboard", use_container_width=True, type="primary"):
            navigate(View.DASHBOARD)


def main() -> None:
    """Main application entry point."""
    st.set_page_config(
        page_title="Family Memories",
        page_icon="📸",
        layout="wide",
        initial_sidebar_state="expanded",
        menu_items={
            "Get Help": None,
            "Report a bug": None,
            "About": "Family Memories - share and treasure the family's photos",
        },
    )

    initialize_session_state()
    context = authenticate_user()

    logger.info(
        "session_initialized",
        authenticated=context.is_authenticated,
        current_page=st.session_state.current_page,
        user_id=context.user.user_id if context.user else None,
    )

    render_header()
    render_sidebar(context)

    with st.container():
        render_main_content(context)

    render_footer()

    if get_debug_mode():
        with st.expander("Debug Info"):
            st.write("Session State:", st.session_state)


if __name__ == "__main__":
    main()
