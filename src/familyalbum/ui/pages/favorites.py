"""Favorites page for familyalbum application."""

import streamlit as st

from ...error_handling import FamilyAlbumError
from ...models.photo import Photo
from ...services.loader import ViewLoader
from ...services.photos import get_photo_service
from ..components.common import render_empty_state
from ..components.gallery import render_photo_grid
from ..context import ViewContext
from ..handlers.auth import get_session_auth_service, require_authentication
from ..navigation import View


def load_favorite_photos() -> list[Photo]:
    try:
        loader = ViewLoader(get_photo_service(), get_session_auth_service().get_current_user)
    except FamilyAlbumError:
        return []
    return loader.load_favorites()


def render_favorites_page(context: ViewContext) -> None:
    """Render the photos marked as favorite, newest first."""
    if not require_authentication(context):
        return

    st.markdown("## ❤️ Favorites")
    st.caption("The family's most treasured moments")

    photos = load_favorite_photos()
    if not photos:
        render_empty_state(
            title="No favorites yet",
            description="Open a photo and mark it as a favorite to see it here.",
            icon="💝",
            action_text="Browse gallery",
            action_view=View.GALLERY,
        )
        return

    st.caption(f"{len(photos)} favorite photos")
    render_photo_grid(photos, key_prefix="favorites")
