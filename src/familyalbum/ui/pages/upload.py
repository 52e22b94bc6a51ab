"""Upload page for familyalbum application."""

from typing import Any

import streamlit as st

from ...error_handling import FamilyAlbumError
from ...logging_config import get_logger
from ...services.photos import get_photo_service
from ...services.storage import get_storage_service
from ...services.uploads import UploadFile, UploadForm, UploadService, extract_date_taken, filter_image_files
from ..components.common import render_error_message
from ..context import ViewContext
from ..handlers.auth import require_authentication
from ..navigation import View, navigate

logger = get_logger(__name__)

ACCEPTED_TYPES = ["jpg", "jpeg", "png", "gif", "webp", "bmp", "tiff", "heic", "heif"]

CHIP_ACTIONS = {
    "people": ("add_person", "remove_person"),
    "tags": ("add_tag", "remove_tag"),
}


def _initialize_session_state() -> None:
    """Initialize session state variables for the upload form."""
    if "upload_people" not in st.session_state:
        st.session_state.upload_people = []
    if "upload_tags" not in st.session_state:
        st.session_state.upload_tags = []
    if "upload_file_names" not in st.session_state:
        st.session_state.upload_file_names = []


def clear_upload_session_state() -> None:
    """Forget the form after a successful upload."""
    for key in list(st.session_state.keys()):
        if key == "photo_uploader" or str(key).startswith("upload_"):
            del st.session_state[key]


def to_upload_files(uploaded_files: list[Any] | None) -> list[UploadFile]:
    """Convert Streamlit uploaded files, keeping images only."""
    files = [
        UploadFile(name=uploaded.name, data=uploaded.getvalue(), content_type=uploaded.type)
        for uploaded in uploaded_files or []
    ]
    return filter_image_files(files)


def _prefill_from_files(files: list[UploadFile]) -> None:
    """On a new file selection, prefill an empty title and date taken from the first file."""
    names = [upload.name for upload in files]
    if names == st.session_state.upload_file_names:
        return
    st.session_state.upload_file_names = names

    if not files:
        return

    form = UploadForm(title=st.session_state.get("upload_title", ""))
    form.apply_default_title(files)
    st.session_state.upload_title = form.title

    if st.session_state.get("upload_date_taken") is None:
        taken = extract_date_taken(files[0].data)
        if taken:
            st.session_state.upload_date_taken = taken


def _render_chip_input(label: str, field_name: str) -> None:
    """Render one of the form's chip lists (people or tags) with an input to add more."""
    state_key = f"upload_{field_name}"
    form = UploadForm(people=list(st.session_state.upload_people), tags=list(st.session_state.upload_tags))
    add, remove = CHIP_ACTIONS[field_name]
    changed = False

    col1, col2 = st.columns([4, 1])
    with col1:
        value = st.text_input(label, key=f"{state_key}_input")
    with col2:
        st.write("")
        if st.button("Add", key=f"{state_key}_add", use_container_width=True):
            getattr(form, add)(value)
            changed = True

    values = getattr(form, field_name)
    if values and not changed:
        cols = st.columns(min(len(values), 6))
        for index, item in enumerate(values):
            with cols[index % len(cols)]:
                if st.button(f"{item} ✕", key=f"{state_key}_chip_{index}"):
                    getattr(form, remove)(item)
                    changed = True

    if changed:
        st.session_state[state_key] = getattr(form, field_name)
        st.rerun()


def _render_locked_notice() -> None:
    st.warning("🔒 Only admins can upload photos.")
    if st.button("Back to gallery", key="upload_locked_back", type="primary"):
        navigate(View.GALLERY)


def render_upload_page(context: ViewContext) -> None:
    """Render the upload form for admins and a locked notice for everyone else."""
    if not require_authentication(context):
        return

    st.markdown("## 📤 Upload photos")

    if not context.is_admin:
        _render_locked_notice()
        return

    _initialize_session_state()

    uploaded = st.file_uploader(
        "Choose photos",
        type=ACCEPTED_TYPES,
        accept_multiple_files=True,
        key="photo_uploader",
    )
    files = to_upload_files(uploaded)
    _prefill_from_files(files)

    if files:
        st.caption(f"{len(files)} photo(s) selected")

    col1, col2 = st.columns(2)
    with col1:
        st.text_input("Title *", key="upload_title")
        st.text_input("Event", key="upload_event", placeholder="e.g. Summer vacation 2024")
        st.date_input("Date taken", value=None, key="upload_date_taken")
    with col2:
        st.text_area("Description", key="upload_description")
        st.text_input("Location", key="upload_location")
        st.checkbox("Mark as favorite", key="upload_is_favorite")

    _render_chip_input("People", "people")
    _render_chip_input("Tags", "tags")

    form = UploadForm(
        title=st.session_state.get("upload_title", ""),
        description=st.session_state.get("upload_description", ""),
        event=st.session_state.get("upload_event", ""),
        date_taken=st.session_state.get("upload_date_taken"),
        location=st.session_state.get("upload_location", ""),
        people=list(st.session_state.upload_people),
        tags=list(st.session_state.upload_tags),
        is_favorite=bool(st.session_state.get("upload_is_favorite", False)),
    )

    st.divider()

    if not st.button("Upload", type="primary", disabled=not form.can_submit(files), key="upload_submit"):
        return

    progress_bar = st.progress(0)

    def on_progress(filename: str, index: int, count: int) -> None:
        progress_bar.progress(index / count, text=f"Uploading {filename} ({index + 1}/{count})")

    try:
        service = UploadService(get_photo_service(), get_storage_service())
        created = service.upload(context.user, form, files, progress=on_progress)
    except FamilyAlbumError as e:
        render_error_message("Upload failed", e.user_message, str(e))
        return

    progress_bar.progress(1.0, text="Done")
    logger.info("upload_page_completed", count=len(created))
    clear_upload_session_state()
    navigate(View.GALLERY)
