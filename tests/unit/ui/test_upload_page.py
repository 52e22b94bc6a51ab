"""Tests for upload page session handling."""

from datetime import date
from unittest.mock import Mock

from familyalbum.services.uploads import UploadFile
from familyalbum.ui.pages.upload import _prefill_from_files, clear_upload_session_state, to_upload_files


def uploaded(name: str, data: bytes = b"x", content_type: str = "image/jpeg") -> Mock:
    mock_file = Mock()
    mock_file.name = name
    mock_file.type = content_type
    mock_file.getvalue.return_value = data
    return mock_file


class TestUploadSession:
    """Test the upload form's session state."""

    def test_to_upload_files_keeps_images(self):
        files = to_upload_files([uploaded("a.jpg"), uploaded("notes.txt", content_type="text/plain")])

        assert [upload.name for upload in files] == ["a.jpg"]
        assert files[0].data == b"x"

    def test_to_upload_files_none(self):
        assert to_upload_files(None) == []

    def test_clear_upload_session_state(self, fake_streamlit):
        fake_streamlit.session_state.update(
            {"upload_title": "x", "upload_tags": ["a"], "photo_uploader": [], "current_page": "Upload"}
        )

        clear_upload_session_state()

        assert dict(fake_streamlit.session_state) == {"current_page": "Upload"}

    def test_prefill_from_new_selection(self, fake_streamlit, jpeg_factory):
        fake_streamlit.session_state.upload_file_names = []
        files = [UploadFile("beach.day.jpg", jpeg_factory(exif_datetime="2022:08:01 09:00:00"))]

        _prefill_from_files(files)

        assert fake_streamlit.session_state.upload_title == "beach"
        assert fake_streamlit.session_state.upload_date_taken == date(2022, 8, 1)
        assert fake_streamlit.session_state.upload_file_names == ["beach.day.jpg"]

    def test_prefill_keeps_typed_title(self, fake_streamlit, sample_image_data):
        fake_streamlit.session_state.update({"upload_file_names": [], "upload_title": "Mine"})

        _prefill_from_files([UploadFile("beach.jpg", sample_image_data)])

        assert fake_streamlit.session_state.upload_title == "Mine"
        assert "upload_date_taken" not in fake_streamlit.session_state

    def test_same_selection_is_not_prefilled_again(self, fake_streamlit, sample_image_data):
        fake_streamlit.session_state.update({"upload_file_names": ["beach.jpg"], "upload_title": ""})

        _prefill_from_files([UploadFile("beach.jpg", sample_image_data)])

        assert fake_streamlit.session_state.upload_title == ""
