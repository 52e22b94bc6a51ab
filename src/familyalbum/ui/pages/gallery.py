"""Gallery page for familyalbum application."""

import streamlit as st

from ...error_handling import FamilyAlbumError
from ...logging_config import get_logger
from ...models.photo import Photo
from ...services.loader import ViewLoader
from ...services.photos import get_photo_service
from ...services.query import Category, PhotoQuery, SortKey
from ..components.common import render_empty_state
from ..components.gallery import render_photo_grid, render_photo_list
from ..context import ViewContext
from ..handlers.auth import get_session_auth_service, require_authentication

logger = get_logger(__name__)

CATEGORY_LABELS = {
    Category.ALL: "All photos",
    Category.FAVORITES: "Favorites",
    Category.RECENT: "Recent",
}

SORT_LABELS = {
    SortKey.NEWEST: "Newest first",
    SortKey.OLDEST: "Oldest first",
    SortKey.TITLE: "Title",
    SortKey.DATE_TAKEN: "Date taken",
}

VIEW_MODES = ["Grid", "List"]


def load_gallery_photos() -> list[Photo]:
    """Load the whole working set; an unavailable backend yields an empty gallery."""
    try:
        loader = ViewLoader(get_photo_service(), get_session_auth_service().get_current_user)
    except FamilyAlbumError:
        return []
    return loader.load_gallery()


def render_gallery_controls() -> tuple[PhotoQuery, str]:
    """Render the search box, category filter, sort order and view toggle."""
    col1, col2, col3, col4 = st.columns([3, 1, 1, 1])

    with col1:
        term = st.text_input(
            "Search",
            key="gallery_term",
            placeholder="Search by title, description, event, location, tags or people",
        )

    with col2:
        category = st.selectbox(
            "Show",
            list(CATEGORY_LABELS),
            format_func=lambda value: CATEGORY_LABELS[value],
            key="gallery_category",
        )

    with col3:
        sort_key = st.selectbox(
            "Sort by",
            list(SORT_LABELS),
            format_func=lambda value: SORT_LABELS[value],
            key="gallery_sort_key",
        )

    with col4:
        view_mode = st.radio("View", VIEW_MODES, horizontal=True, key="gallery_view_mode")

    return PhotoQuery.from_inputs(term, category, sort_key), view_mode


def render_gallery_page(context: ViewContext) -> None:
    """Render every photo with search, filter and sort controls."""
    if not require_authentication(context):
        return

    st.markdown("## 🖼️ Photo gallery")

    query, view_mode = render_gallery_controls()
    photos = load_gallery_photos()
    visible = query.apply(photos)

    logger.debug(
        "gallery_query_applied",
        term=query.term,
        category=query.category.value,
        sort_key=query.sort_key.value,
        total=len(photos),
        visible=len(visible),
    )

    st.caption(f"{len(visible)} of {len(photos)} photos")
    st.divider()

    if not visible:
        render_empty_state(
            title="No photos found",
            description="Try adjusting your search or filters",
            icon="🔍",
        )
        return

    if view_mode == "Grid":
        render_photo_grid(visible, key_prefix="gallery_grid")
    else:
        render_photo_list(visible, key_prefix="gallery_list")
