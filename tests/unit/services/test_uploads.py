"""
Unit tests for the upload workflow.
"""

from datetime import date
from unittest.mock import MagicMock

import pytest

from familyalbum.error_handling import AuthorizationError, StorageError, ValidationError
from familyalbum.services.uploads import (
    UploadFile,
    UploadForm,
    UploadService,
    default_title,
    extract_date_taken,
    filter_image_files,
    numbered_title,
)
from tests.conftest import TestDataFactory


class TestTitles:
    """Test cases for title defaults and numbering."""

    @pytest.mark.parametrize(
        "filename,expected",
        [("beach.jpg", "beach"), ("IMG_0001.HEIC", "IMG_0001"), ("my.holiday.photo.png", "my"), ("noext", "noext")],
    )
    def test_default_title(self, filename, expected):
        assert default_title(filename) == expected

    def test_single_file_keeps_title(self):
        assert numbered_title("Picnic", 0, 1) == "Picnic"

    def test_multiple_files_are_numbered(self):
        assert [numbered_title("Picnic", i, 3) for i in range(3)] == ["Picnic (1)", "Picnic (2)", "Picnic (3)"]


class TestUploadForm:
    """Test cases for form state."""

    def test_tags_are_trimmed_and_unique(self):
        form = UploadForm()

        form.add_tag("  beach ")
        form.add_tag("beach")
        form.add_tag("   ")
        form.add_tag("sun")

        assert form.tags == ["beach", "sun"]

    def test_people_are_trimmed_and_unique(self):
        form = UploadForm()

        form.add_person("Alice")
        form.add_person(" Alice")
        form.add_person("Bob")
        form.remove_person("Alice")

        assert form.people == ["Bob"]

    def test_remove_tag(self):
        form = UploadForm(tags=["a", "b"])

        form.remove_tag("a")
        form.remove_tag("missing")

        assert form.tags == ["b"]

    def test_can_submit(self):
        files = [UploadFile("a.jpg", b"x")]

        assert UploadForm(title="Beach").can_submit(files)
        assert not UploadForm(title="  ").can_submit(files)
        assert not UploadForm(title="Beach").can_submit([])

    def test_apply_default_title(self):
        form = UploadForm()

        form.apply_default_title([UploadFile("sunset.2024.jpg", b"x"), UploadFile("other.jpg", b"x")])

        assert form.title == "sunset"

    def test_apply_default_title_keeps_existing(self):
        form = UploadForm(title="Mine")

        form.apply_default_title([UploadFile("sunset.jpg", b"x")])

        assert form.title == "Mine"

    @pytest.mark.parametrize("value", ["", None, "   "])
    def test_empty_date_taken_is_none(self, value):
        assert UploadForm(date_taken=value).taken_on() is None

    def test_date_taken_parsed(self):
        assert UploadForm(date_taken="2024-07-04").taken_on() == date(2024, 7, 4)


class TestFiles:
    """Test cases for file type handling and EXIF dates."""

    def test_filter_image_files(self):
        files = [
            UploadFile("a.jpg", b"x"),
            UploadFile("notes.txt", b"x"),
            UploadFile("b", b"x", content_type="image/png"),
        ]

        assert [upload.name for upload in filter_image_files(files)] == ["a.jpg", "b"]

    def test_heic_without_browser_type_is_kept(self):
        files = [UploadFile("IMG_0001.HEIC", b"x", content_type=""), UploadFile("burst.heif", b"x")]

        assert filter_image_files(files) == files

    def test_extract_date_taken(self, jpeg_factory):
        assert extract_date_taken(jpeg_factory(exif_datetime="2023:07:04 10:15:00")) == date(2023, 7, 4)

    def test_extract_date_taken_without_exif(self, sample_image_data):
        assert extract_date_taken(sample_image_data) is None

    def test_extract_date_taken_not_an_image(self):
        assert extract_date_taken(b"definitely not an image") is None

    def test_extract_date_taken_malformed_value(self, jpeg_factory):
        assert extract_date_taken(jpeg_factory(exif_datetime="sometime")) is None


class TestUploadService:
    """Test cases for UploadService with local storage and a DuckDB record store."""

    def setup_method(self):
        self.admin = TestDataFactory.create_user_info(user_id="admin-1", admin=True)

    def test_upload_multiple_files(self, photo_service, local_storage, sample_image_data):
        """Test each file becomes a numbered photo with the shared form values."""
        service = UploadService(photo_service, local_storage)
        form = UploadForm(
            title="Picnic",
            description="Sunny day",
            event="Summer",
            date_taken="",
            location="Park",
            people=["Alice"],
            tags=["food"],
            is_favorite=True,
        )
        files = [UploadFile("one.jpg", sample_image_data), UploadFile("two.jpg", sample_image_data)]
        progress = MagicMock()

        created = service.upload(self.admin, form, files, progress=progress)

        assert [photo.title for photo in created] == ["Picnic (1)", "Picnic (2)"]
        for photo in created:
            assert photo.user_id == "admin-1"
            assert photo.date_taken is None
            assert photo.is_favorite is True
            assert photo.people == ["Alice"]
            assert photo.tags == ["food"]
            assert photo.file_url.startswith("http://media.test/admin-1/")
        assert created[0].file_url.endswith("_one.jpg")
        assert len(photo_service.list_photos()) == 2
        assert [call.args for call in progress.call_args_list] == [("one.jpg", 0, 2), ("two.jpg", 1, 2)]

    def test_upload_single_file_keeps_title(self, photo_service, local_storage, sample_image_data):
        service = UploadService(photo_service, local_storage)

        created = service.upload(
            self.admin, UploadForm(title="Portrait", date_taken="2020-02-02"), [UploadFile("p.jpg", sample_image_data)]
        )

        assert created[0].title == "Portrait"
        assert created[0].date_taken == date(2020, 2, 2)

    def test_non_admin_is_rejected(self, photo_service, local_storage, sample_image_data):
        service = UploadService(photo_service, local_storage)
        user = TestDataFactory.create_user_info(admin=False)

        with pytest.raises(AuthorizationError):
            service.upload(user, UploadForm(title="x"), [UploadFile("a.jpg", sample_image_data)])

    @pytest.mark.parametrize(
        "title,files,code",
        [
            ("Beach", [], "no_files"),
            ("   ", [UploadFile("a.jpg", b"x")], "missing_title"),
            ("Beach", [UploadFile("a.txt", b"x")], "not_an_image"),
            ("Beach", [UploadFile("a.jpg", b"")], "invalid_file_size"),
        ],
    )
    def test_validation(self, photo_service, local_storage, title, files, code):
        service = UploadService(photo_service, local_storage)

        with pytest.raises(ValidationError) as exc_info:
            service.upload(self.admin, UploadForm(title=title), files)

        assert exc_info.value.code == code
        assert photo_service.list_photos() == []

    def test_file_too_large(self, photo_service, local_storage):
        service = UploadService(photo_service, local_storage, max_file_size=4)

        with pytest.raises(ValidationError) as exc_info:
            service.upload(self.admin, UploadForm(title="Big"), [UploadFile("a.jpg", b"12345")])

        assert exc_info.value.code == "invalid_file_size"

    def test_max_file_size_from_environment(self, photo_service, local_storage, monkeypatch):
        monkeypatch.setenv("MAX_FILE_SIZE", "1024")

        assert UploadService(photo_service, local_storage).max_file_size == 1024

    def test_storage_failure_stops_processing(self, photo_service, sample_image_data):
        storage = MagicMock()
        storage.store.side_effect = StorageError("bucket unavailable")
        service = UploadService(photo_service, storage)

        with pytest.raises(StorageError):
            service.upload(self.admin, UploadForm(title="x"), [UploadFile("a.jpg", sample_image_data)])

        assert photo_service.list_photos() == []
