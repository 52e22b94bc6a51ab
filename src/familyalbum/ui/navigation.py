"""Named views and navigation between them."""

from enum import Enum
from urllib.parse import urlencode

import streamlit as st

from ..logging_config import get_logger

logger = get_logger(__name__)


class View(str, Enum):
    """The application's views."""

    DASHBOARD = "Dashboard"
    GALLERY = "Gallery"
    FAVORITES = "Favorites"
    UPLOAD = "Upload"
    PHOTO = "Photo"

    @classmethod
    def parse(cls, value: "str | View | None") -> "View":
        """Resolve a view by name; unknown or missing names fall back to the dashboard."""
        if isinstance(value, View):
            return value
        for view in cls:
            if value and view.value.lower() == str(value).strip("/").lower():
                return view
        return cls.DASHBOARD


def page_url(view: View, **params: str) -> str:
    """
    Build the URL of a view.

    The dashboard lives at ``/``; every other view at ``/<Name>``. Keyword
    arguments become query parameters, e.g. ``page_url(View.PHOTO, id="abc")``.
    """
    path = "/" if view == View.DASHBOARD else f"/{view.value}"
    query = {key: value for key, value in params.items() if value is not None}
    return f"{path}?{urlencode(query)}" if query else path


def current_view() -> View:
    """The view the session is on."""
    return View.parse(st.session_state.get("current_page"))


def navigate(view: View, photo_id: str | None = None, rerun: bool = True) -> None:
    """
    Switch the session to ``view``.

    Args:
        view: Target view
        photo_id: Photo to show (only used by the Photo view)
        rerun: Rerun the script immediately
    """
    previous = st.session_state.get("current_page")
    st.session_state.current_page = view.value

    if view == View.PHOTO and photo_id:
        st.query_params["id"] = photo_id
    elif "id" in st.query_params:
        del st.query_params["id"]

    logger.info("page_navigation", from_page=previous, to_page=view.value, photo_id=photo_id)
    if rerun:
        st.rerun()


def get_requested_photo_id() -> str | None:
    """The ``id`` query parameter of the Photo view, if set and non-blank."""
    photo_id = st.query_params.get("id")
    if photo_id and photo_id.strip():
        return photo_id.strip()
    return None
