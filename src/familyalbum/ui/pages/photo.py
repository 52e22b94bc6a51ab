"""Photo detail page for familyalbum application."""

import streamlit as st

from ...error_handling import FamilyAlbumError
from ...logging_config import get_logger, log_error
from ...models.photo import Photo
from ...services.loader import PhotoViewData, ViewLoader
from ...services.photos import PhotoService, get_photo_service
from ..components.common import format_date, render_error_message
from ..context import ViewContext
from ..handlers.auth import get_session_auth_service, require_authentication
from ..navigation import View, get_requested_photo_id, navigate

logger = get_logger(__name__)


def load_photo_view(photo_id: str) -> PhotoViewData:
    try:
        loader = ViewLoader(get_photo_service(), get_session_auth_service().get_current_user)
    except FamilyAlbumError:
        return PhotoViewData()
    return loader.load_photo_view(photo_id)


def comment_can_submit(content: str | None, context: ViewContext) -> bool:
    """A comment needs non-blank content and a signed-in author."""
    return bool(content and content.strip()) and context.is_authenticated


def render_photo_details(photo: Photo) -> None:
    """Render the photo's descriptive fields."""
    if photo.description:
        st.write(photo.description)

    if photo.event:
        st.markdown(f"🎉 **Event:** {photo.event}")
    if photo.location:
        st.markdown(f"📍 **Location:** {photo.location}")
    if photo.date_taken:
        st.markdown(f"📅 **Taken:** {format_date(photo.date_taken)}")
    st.markdown(f"📤 **Added:** {format_date(photo.created_at)}")

    if photo.people:
        st.markdown("👥 **People:** " + ", ".join(photo.people))
    if photo.tags:
        st.markdown("🏷️ **Tags:** " + " ".join(f"`{tag}`" for tag in photo.tags))


def render_favorite_toggle(photo: Photo, photo_service: PhotoService, context: ViewContext) -> None:
    label = "💔 Remove from favorites" if photo.is_favorite else "❤️ Add to favorites"
    if st.button(label, key=f"favorite_{photo.id}", use_container_width=True):
        try:
            photo_service.toggle_favorite(photo, user_id=context.user.user_id if context.user else None)
        except FamilyAlbumError as e:
            log_error(e, {"operation": "toggle_favorite", "photo_id": photo.id})
        st.rerun()


def render_comments(data: PhotoViewData, photo_service: PhotoService, context: ViewContext) -> None:
    """Render the comment list (newest first) and the add-comment box."""
    st.markdown(f"### 💬 Comments ({len(data.comments)})")

    counter = st.session_state.get("comment_input_counter", 0)
    content = st.text_area("Add a comment", key=f"comment_input_{data.photo.id}_{counter}", placeholder="Share a memory...")

    if st.button("Post comment", key=f"post_comment_{data.photo.id}", disabled=not comment_can_submit(content, context)):
        try:
            photo_service.add_comment(data.photo.id, context.display_name, content)
            st.session_state.comment_input_counter = counter + 1
        except FamilyAlbumError as e:
            log_error(e, {"operation": "add_comment", "photo_id": data.photo.id})
        st.rerun()

    if not data.comments:
        st.caption("No comments yet. Be the first to share a memory!")
        return

    for comment in data.comments:
        with st.container(border=True):
            st.markdown(f"**{comment.author_name}** · {format_date(comment.created_at)}")
            st.write(comment.content)


def render_photo_page(context: ViewContext) -> None:
    """Render one photo; a missing or unknown id returns to the gallery."""
    if not require_authentication(context):
        return

    photo_id = get_requested_photo_id()
    if not photo_id:
        logger.info("photo_id_missing")
        navigate(View.GALLERY)
        return

    data = load_photo_view(photo_id)
    if not data.found:
        navigate(View.GALLERY)
        return

    try:
        photo_service = get_photo_service()
    except FamilyAlbumError as e:
        render_error_message("Unavailable", e.user_message)
        return

    if st.button("← Back to gallery", key="photo_back"):
        navigate(View.GALLERY)

    photo = data.photo
    st.markdown(f"## {photo.title}")

    col1, col2 = st.columns([2, 1])
    with col1:
        st.image(photo.file_url, use_container_width=True)
    with col2:
        render_favorite_toggle(photo, photo_service, context)
        render_photo_details(photo)

    st.divider()
    render_comments(data, photo_service, context)
