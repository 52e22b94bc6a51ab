"""
Unit tests for the application entry point.
"""

from unittest.mock import MagicMock, patch

from familyalbum import main
from familyalbum.error_handling import get_error_handler
from familyalbum.ui.context import ViewContext
from familyalbum.ui.navigation import View


class TestRenderMainContent:
    """Test cases for page routing and page failures."""

    def setup_method(self):
        get_error_handler().reset_statistics()

    def test_renders_current_page(self):
        page = MagicMock()
        context = ViewContext()

        with (
            patch.dict(main.PAGES, {View.GALLERY: page}),
            patch("familyalbum.main.current_view", return_value=View.GALLERY),
        ):
            main.render_main_content(context)

        page.assert_called_once_with(context)

    def test_page_failure_is_classified_and_shown(self):
        """Test a failing page shows the classified user message."""
        page = MagicMock(side_effect=RuntimeError("duckdb IO failure"))

        with (
            patch.dict(main.PAGES, {View.GALLERY: page}),
            patch("familyalbum.main.current_view", return_value=View.GALLERY),
            patch("familyalbum.main.st") as mock_st,
            patch("familyalbum.main.render_error_message") as mock_render,
        ):
            mock_st.button.return_value = False
            main.render_main_content(ViewContext())

        mock_render.assert_called_once_with(
            "The Gallery page could not be displayed",
            "The photo library is unavailable right now.",
            "duckdb IO failure",
        )
        assert get_error_handler().get_error_statistics() == {"database_error": 1}

    def test_back_to_dashboard(self):
        page = MagicMock(side_effect=RuntimeError("boom"))

        with (
            patch.dict(main.PAGES, {View.FAVORITES: page}),
            patch("familyalbum.main.current_view", return_value=View.FAVORITES),
            patch("familyalbum.main.st") as mock_st,
            patch("familyalbum.main.render_error_message"),
            patch("familyalbum.main.navigate") as mock_navigate,
        ):
            mock_st.button.return_value = True
            main.render_main_content(ViewContext())

        mock_navigate.assert_called_once_with(View.DASHBOARD)
