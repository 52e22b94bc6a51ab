"""Configuration for UI unit tests."""

from unittest.mock import MagicMock, patch

import pytest


class SessionState(dict):
    """Dict with attribute access, like ``st.session_state``."""

    def __getattr__(self, name):
        try:
            return self[name]
        except KeyError as e:
            raise AttributeError(name) from e

    def __setattr__(self, name, value):
        self[name] = value

    def __delattr__(self, name):
        del self[name]


@pytest.fixture
def fake_streamlit():
    """A stand-in ``st`` module with real session state and query params."""
    st = MagicMock()
    st.session_state = SessionState()
    st.query_params = {}
    with (
        patch("familyalbum.ui.navigation.st", st),
        patch("familyalbum.ui.handlers.auth.st", st),
        patch("familyalbum.ui.pages.upload.st", st),
    ):
        yield st
