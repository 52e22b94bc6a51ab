"""Photo and comment operations for the familyalbum application."""

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from ..error_handling import ValidationError
from ..logging_config import get_logger, log_user_action
from ..models.comment import Comment
from ..models.photo import Photo, ensure_utc, parse_datetime
from .records import RecordStore, get_record_store

logger = get_logger(__name__)

PHOTOS_TABLE = "photos"
COMMENTS_TABLE = "comments"


@dataclass
class PhotoStats:
    """Dashboard counters."""

    total: int = 0
    this_month: int = 0
    favorites: int = 0

    def to_dict(self) -> dict[str, int]:
        return {"total": self.total, "this_month": self.this_month, "favorites": self.favorites}


def compute_stats(records: list[dict[str, Any]], now: datetime | None = None) -> PhotoStats:
    """
    Count photos overall, created in the current calendar month, and marked favorite.

    Args:
        records: Rows holding at least ``created_at`` and ``is_favorite``
        now: Reference time (defaults to the current UTC time)
    """
    now = ensure_utc(now or datetime.now(UTC))
    this_month = 0
    favorites = 0

    for record in records:
        created_at = parse_datetime(record["created_at"])
        if created_at.year == now.year and created_at.month == now.month:
            this_month += 1
        if record.get("is_favorite"):
            favorites += 1

    return PhotoStats(total=len(records), this_month=this_month, favorites=favorites)


class PhotoService:
    """Reads and writes photos and their comments through the record store."""

    def __init__(self, record_store: RecordStore):
        self.record_store = record_store

    def list_photos(self) -> list[Photo]:
        """Load the whole working set, newest first."""
        records = self.record_store.list(PHOTOS_TABLE, order=("created_at", False))
        photos = [Photo.from_dict(record) for record in records]
        logger.info("photos_loaded", count=len(photos))
        return photos

    def list_favorites(self) -> list[Photo]:
        """Load favorite photos, newest first."""
        records = self.record_store.list(PHOTOS_TABLE, filters={"is_favorite": True}, order=("created_at", False))
        return [Photo.from_dict(record) for record in records]

    def list_recent(self, limit: int = 6) -> list[Photo]:
        """Load the ``limit`` most recently added photos."""
        records = self.record_store.list(PHOTOS_TABLE, order=("created_at", False), limit=limit)
        return [Photo.from_dict(record) for record in records]

    def get_photo(self, photo_id: str) -> Photo:
        """
        Load one photo.

        Raises:
            NotFoundError: If the photo does not exist
        """
        return Photo.from_dict(self.record_store.get_by_id(PHOTOS_TABLE, photo_id))

    def create_photo(self, photo: Photo) -> Photo:
        """
        Insert a new photo record.

        Raises:
            ValidationError: If the photo has no title or no file URL
        """
        if not photo.validate():
            raise ValidationError(
                "Photo requires a title and a file URL",
                code="invalid_photo",
                details={"photo_id": photo.id},
            )

        stored = Photo.from_dict(self.record_store.insert(PHOTOS_TABLE, photo.to_record()))
        log_user_action(photo.user_id or "unknown", "photo_created", photo_id=stored.id, title=stored.title)
        return stored

    def set_favorite(self, photo_id: str, is_favorite: bool) -> Photo:
        """Set the favorite flag and return the updated photo."""
        record = self.record_store.update(PHOTOS_TABLE, photo_id, {"is_favorite": is_favorite})
        return Photo.from_dict(record)

    def toggle_favorite(self, photo: Photo, user_id: str | None = None) -> Photo:
        """
        Flip a photo's favorite flag.

        Returns:
            The photo as stored after the update
        """
        updated = self.set_favorite(photo.id, not photo.is_favorite)
        log_user_action(user_id or "unknown", "favorite_toggled", photo_id=photo.id, is_favorite=updated.is_favorite)
        return updated

    def list_comments(self, photo_id: str) -> list[Comment]:
        """Load the comments on a photo, newest first."""
        records = self.record_store.list(COMMENTS_TABLE, filters={"photo_id": photo_id}, order=("created_at", False))
        return [Comment.from_dict(record) for record in records]

    def add_comment(self, photo_id: str, author_name: str, content: str) -> Comment:
        """
        Add a comment to an existing photo.

        Raises:
            ValidationError: If the content is blank
            NotFoundError: If the photo does not exist
        """
        if not content or not content.strip():
            raise ValidationError("Comment content is required", code="empty_comment", details={"photo_id": photo_id})

        self.record_store.get_by_id(PHOTOS_TABLE, photo_id)

        comment = Comment.create_new(photo_id=photo_id, author_name=author_name or "User", content=content)
        stored = Comment.from_dict(self.record_store.insert(COMMENTS_TABLE, comment.to_record()))
        log_user_action(author_name, "comment_added", photo_id=photo_id, comment_id=stored.id)
        return stored

    def get_stats(self, now: datetime | None = None) -> PhotoStats:
        """Compute dashboard counters over every photo."""
        records = self.record_store.list(PHOTOS_TABLE, columns=["created_at", "is_favorite"])
        return compute_stats(records, now)


def get_photo_service() -> PhotoService:
    """Get a photo service bound to the global record store."""
    return PhotoService(get_record_store())
