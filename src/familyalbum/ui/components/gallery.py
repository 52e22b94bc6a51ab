"""Photo card components shared by the dashboard, gallery and favorites views."""

import streamlit as st

from ...logging_config import get_logger
from ...models.photo import Photo
from ..navigation import View, navigate
from .common import format_date

logger = get_logger(__name__)

GRID_COLUMNS = 3


def photo_subtitle(photo: Photo) -> str:
    """One-line summary under a card: event, location and date taken when known."""
    parts = []
    if photo.event:
        parts.append(f"🎉 {photo.event}")
    if photo.location:
        parts.append(f"📍 {photo.location}")
    if photo.is_taken_known():
        parts.append(f"📅 {format_date(photo.date_taken)}")
    return " · ".join(parts)


def render_photo_card(photo: Photo, key_prefix: str = "card", compact: bool = False) -> None:
    """
    Render a single photo with its title and an "Open" button.

    Args:
        photo: Photo to show
        key_prefix: Widget key prefix, unique per view section
        compact: Hide the description and tags
    """
    try:
        st.image(photo.file_url, use_container_width=True)
    except Exception as e:
        logger.error("render_photo_error", photo_id=photo.id, error=str(e))
        st.caption("📷 Image unavailable")

    title = f"❤️ {photo.title}" if photo.is_favorite else photo.title
    st.markdown(f"**{title}**")

    subtitle = photo_subtitle(photo)
    if subtitle:
        st.caption(subtitle)

    if not compact:
        if photo.description:
            st.write(photo.description)
        if photo.tags:
            st.caption(" ".join(f"#{tag}" for tag in photo.tags))

    if st.button("Open", key=f"{key_prefix}_{photo.id}", use_container_width=True):
        navigate(View.PHOTO, photo_id=photo.id)


def render_photo_grid(photos: list[Photo], key_prefix: str = "grid", columns: int = GRID_COLUMNS) -> None:
    """Render photos in rows of ``columns`` cards."""
    for start in range(0, len(photos), columns):
        cols = st.columns(columns)
        for col, photo in zip(cols, photos[start : start + columns], strict=False):
            with col:
                render_photo_card(photo, key_prefix=key_prefix, compact=True)


def render_photo_list(photos: list[Photo], key_prefix: str = "list") -> None:
    """Render photos one per row with their details."""
    for photo in photos:
        with st.container():
            col1, col2 = st.columns([1, 3])

            with col1:
                st.image(photo.file_url, use_container_width=True)

            with col2:
                title = f"❤️ {photo.title}" if photo.is_favorite else photo.title
                st.markdown(f"### {title}")
                subtitle = photo_subtitle(photo)
                if subtitle:
                    st.caption(subtitle)
                if photo.description:
                    st.write(photo.description)
                if photo.people:
                    st.caption("👥 " + ", ".join(photo.people))
                if photo.tags:
                    st.caption(" ".join(f"#{tag}" for tag in photo.tags))
                if st.button("Open", key=f"{key_prefix}_{photo.id}"):
                    navigate(View.PHOTO, photo_id=photo.id)

            st.divider()
