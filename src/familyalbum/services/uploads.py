"""
Photo upload workflow for the familyalbum application.

An upload takes one form (title, description, event, date taken, location,
people, tags, favorite flag) and one or more image files. Each file is
stored in object storage and becomes its own photo record; with several
files the titles are numbered "Title (1)", "Title (2)", and so on.
"""

import io
import os
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path

from PIL import ExifTags, Image, UnidentifiedImageError

from ..error_handling import AuthorizationError, ValidationError
from ..logging_config import get_logger, log_context, log_user_action
from ..models.photo import Photo, parse_date
from .auth import UserInfo
from .photos import PhotoService
from .storage import LocalStorageService, StorageService, build_object_path, guess_content_type

logger = get_logger(__name__)

DEFAULT_MAX_FILE_SIZE = 50 * 1024 * 1024

# EXIF date tags in priority order
EXIF_DATE_TAGS = ["DateTimeOriginal", "DateTimeDigitized", "DateTime"]
EXIF_IFD_POINTER = 0x8769

ProgressCallback = Callable[[str, int, int], None]


@dataclass
class UploadFile:
    """A file picked in the upload form."""

    name: str
    data: bytes
    content_type: str | None = None

    @property
    def mime_type(self) -> str:
        return self.content_type or guess_content_type(self.name)

    @property
    def size(self) -> int:
        return len(self.data)

    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")


def filter_image_files(files: list[UploadFile]) -> list[UploadFile]:
    """Drop anything that is not an image, as the file picker does."""
    images = [upload for upload in files if upload.is_image()]
    if len(images) != len(files):
        logger.info("non_image_files_ignored", ignored=[upload.name for upload in files if not upload.is_image()])
    return images


def default_title(filename: str) -> str:
    """Title suggested for a file: its name up to the first dot."""
    return Path(filename).name.split(".")[0]


def numbered_title(title: str, index: int, count: int) -> str:
    """Title for the ``index``-th (0-based) of ``count`` files uploaded together."""
    if count == 1:
        return title
    return f"{title} ({index + 1})"


def _add_unique(values: list[str], value: str) -> list[str]:
    value = value.strip()
    if value and value not in values:
        return [*values, value]
    return values


@dataclass
class UploadForm:
    """Values of the upload form."""

    title: str = ""
    description: str = ""
    event: str = ""
    date_taken: str | date | None = None
    location: str = ""
    people: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    is_favorite: bool = False

    def add_tag(self, tag: str) -> None:
        self.tags = _add_unique(self.tags, tag)

    def remove_tag(self, tag: str) -> None:
        self.tags = [existing for existing in self.tags if existing != tag]

    def add_person(self, person: str) -> None:
        self.people = _add_unique(self.people, person)

    def remove_person(self, person: str) -> None:
        self.people = [existing for existing in self.people if existing != person]

    def apply_default_title(self, files: list[UploadFile]) -> None:
        """Fill an empty title from the first file's name."""
        if not self.title and files:
            self.title = default_title(files[0].name)

    def can_submit(self, files: list[UploadFile]) -> bool:
        """Whether the submit button should be enabled."""
        return bool(files) and bool(self.title.strip())

    def taken_on(self) -> date | None:
        """The date taken, with an empty entry meaning "unknown"."""
        return parse_date(self.date_taken)


def extract_date_taken(image_data: bytes) -> date | None:
    """
    Read the capture date from an image's EXIF data.

    Returns:
        The date from the first EXIF date tag present, or None
    """
    try:
        with Image.open(io.BytesIO(image_data)) as image:
            exif = image.getexif()
            if not exif:
                return None

            values = dict(exif)
            values.update(exif.get_ifd(EXIF_IFD_POINTER))

        tag_ids = {name: tag for tag, name in ExifTags.TAGS.items()}
        for tag_name in EXIF_DATE_TAGS:
            raw = values.get(tag_ids[tag_name])
            if not raw:
                continue
            try:
                return datetime.strptime(str(raw).strip(), "%Y:%m:%d %H:%M:%S").date()
            except ValueError:
                logger.debug("exif_date_parse_failed", tag_name=tag_name, value=str(raw))

        return None

    except (UnidentifiedImageError, OSError) as e:
        logger.debug("exif_read_failed", error=str(e))
        return None


class UploadService:
    """Stores uploaded files and creates their photo records."""

    def __init__(
        self,
        photo_service: PhotoService,
        storage_service: StorageService | LocalStorageService,
        max_file_size: int | None = None,
    ):
        self.photo_service = photo_service
        self.storage_service = storage_service
        self.max_file_size = max_file_size or int(os.getenv("MAX_FILE_SIZE", DEFAULT_MAX_FILE_SIZE))

    def validate(self, user: UserInfo, form: UploadForm, files: list[UploadFile]) -> None:
        """
        Check an upload before anything is stored.

        Raises:
            AuthorizationError: If the user is not an admin
            ValidationError: If there are no files, a non-image or oversized file, or no title
        """
        if not user.is_admin:
            raise AuthorizationError(
                "Only admins can upload photos", code="upload_forbidden", details={"user_id": user.user_id}
            )

        if not files:
            raise ValidationError("No file selected", code="no_files")

        if not form.title.strip():
            raise ValidationError("A title is required", code="missing_title")

        for upload in files:
            if not upload.is_image():
                raise ValidationError(
                    f"'{upload.name}' is not an image",
                    code="not_an_image",
                    details={"filename": upload.name, "content_type": upload.mime_type},
                )
            if upload.size == 0 or upload.size > self.max_file_size:
                raise ValidationError(
                    f"'{upload.name}' is empty or larger than {self.max_file_size} bytes",
                    code="invalid_file_size",
                    details={"filename": upload.name, "size": upload.size, "max_size": self.max_file_size},
                )

    def upload(
        self,
        user: UserInfo,
        form: UploadForm,
        files: list[UploadFile],
        progress: ProgressCallback | None = None,
    ) -> list[Photo]:
        """
        Store every file and create one photo record per file, in order.

        Processing stops at the first failure; photos created before it are kept.

        Args:
            user: Uploading admin
            form: Shared form values
            files: Image files
            progress: Called as ``progress(filename, index, count)`` before each file

        Returns:
            The created photos

        Raises:
            AuthorizationError, ValidationError: From ``validate``
            StorageError, DatabaseError: If storing a file or its record fails
        """
        self.validate(user, form, files)

        created: list[Photo] = []
        count = len(files)
        taken_on = form.taken_on()

        with log_context(operation="upload", user_id=user.user_id, count=count) as upload_logger:
            for index, upload in enumerate(files):
                if progress:
                    progress(upload.name, index, count)

                handle = self.storage_service.store(
                    build_object_path(user.user_id, upload.name), upload.data, upload.mime_type
                )
                photo = Photo.create_new(
                    title=numbered_title(form.title.strip(), index, count),
                    file_url=self.storage_service.public_url_for(handle),
                    user_id=user.user_id,
                    description=form.description,
                    event=form.event,
                    location=form.location,
                    date_taken=taken_on,
                    is_favorite=form.is_favorite,
                    people=form.people,
                    tags=form.tags,
                )
                created.append(self.photo_service.create_photo(photo))
                upload_logger.info("photo_uploaded", index=index, filename=upload.name, photo_id=photo.id)

        log_user_action(user.user_id, "photos_uploaded", count=len(created))
        return created
