"""
Photo model for the familyalbum application.

A ``Photo`` is one row of the ``photos`` table. Optional attributes are
explicit ``None``-able fields so that search and sort code never has to guess
whether a key is present.
"""

import uuid
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from typing import Any


def ensure_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime; naive values are taken to already be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def parse_datetime(value: Any) -> datetime:
    """Parse a datetime from a datetime instance or an ISO-8601 string (``Z`` suffix allowed)."""
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return ensure_utc(datetime.fromisoformat(text))
    raise ValueError(f"Unsupported datetime value: {value!r}")


def parse_date(value: Any) -> date | None:
    """
    Parse an optional calendar date.

    Empty strings and ``None`` mean "not set". Datetimes are truncated to
    their date and ISO strings may carry a time part.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        return date.fromisoformat(text[:10])
    raise ValueError(f"Unsupported date value: {value!r}")


def _optional_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text if text.strip() else None


def _text_list(value: Any) -> list[str]:
    if not value:
        return []
    return [str(item) for item in value]


@dataclass
class Photo:
    """
    Represents a shared family photo.

    ``created_at`` is set once when the record is inserted. ``is_favorite`` is
    the only attribute the application changes afterwards.
    """

    id: str
    title: str
    file_url: str
    created_at: datetime
    user_id: str | None = None
    description: str | None = None
    event: str | None = None
    location: str | None = None
    date_taken: date | None = None
    is_favorite: bool = False
    people: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)

    @classmethod
    def create_new(
        cls,
        title: str,
        file_url: str,
        user_id: str | None = None,
        description: str | None = None,
        event: str | None = None,
        location: str | None = None,
        date_taken: date | None = None,
        is_favorite: bool = False,
        people: list[str] | None = None,
        tags: list[str] | None = None,
        created_at: datetime | None = None,
    ) -> "Photo":
        """
        Create a new Photo with a generated ID and the current UTC time.

        Args:
            title: Display title
            file_url: Public URL of the stored image
            user_id: ID of the uploading user
            description: Free text description
            event: Event the photo belongs to (e.g. "Summer 2024")
            location: Where the photo was taken
            date_taken: When the photo was taken, if known
            is_favorite: Initial favorite flag
            people: Names of people in the photo
            tags: Free form tags
            created_at: Insertion time (defaults to now)

        Returns:
            New Photo instance
        """
        return cls(
            id=str(uuid.uuid4()),
            title=title.strip(),
            file_url=file_url,
            created_at=ensure_utc(created_at) if created_at else datetime.now(UTC),
            user_id=user_id,
            description=_optional_text(description),
            event=_optional_text(event),
            location=_optional_text(location),
            date_taken=date_taken,
            is_favorite=is_favorite,
            people=list(people or []),
            tags=list(tags or []),
        )

    def to_dict(self) -> dict[str, Any]:
        """
        Convert the photo to a JSON friendly dictionary.

        Returns:
            Dictionary with ISO formatted dates
        """
        return {
            "id": self.id,
            "user_id": self.user_id,
            "title": self.title,
            "description": self.description,
            "event": self.event,
            "location": self.location,
            "file_url": self.file_url,
            "created_at": self.created_at.isoformat(),
            "date_taken": self.date_taken.isoformat() if self.date_taken else None,
            "is_favorite": self.is_favorite,
            "people": list(self.people),
            "tags": list(self.tags),
        }

    def to_record(self) -> dict[str, Any]:
        """
        Convert the photo to column values for the record store.

        Timestamps are stored as naive UTC and empty lists as NULL.
        """
        record = self.to_dict()
        record["created_at"] = ensure_utc(self.created_at).replace(tzinfo=None)
        record["date_taken"] = self.date_taken
        record["people"] = list(self.people) or None
        record["tags"] = list(self.tags) or None
        return record

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Photo":
        """
        Create a Photo from a dictionary (a database row or ``to_dict`` output).

        Missing optional keys and ``None`` list columns are accepted.
        """
        return cls(
            id=str(data["id"]),
            title=data["title"],
            file_url=data.get("file_url") or "",
            created_at=parse_datetime(data["created_at"]),
            user_id=data.get("user_id"),
            description=_optional_text(data.get("description")),
            event=_optional_text(data.get("event")),
            location=_optional_text(data.get("location")),
            date_taken=parse_date(data.get("date_taken")),
            is_favorite=bool(data.get("is_favorite", False)),
            people=_text_list(data.get("people")),
            tags=_text_list(data.get("tags")),
        )

    def validate(self) -> bool:
        """
        Validate the Photo instance.

        Returns:
            True if valid, False otherwise
        """
        if not self.id or not self.title or not self.title.strip():
            return False

        if not self.file_url:
            return False

        return True

    def is_taken_known(self) -> bool:
        """Check whether the date the photo was taken is recorded."""
        return self.date_taken is not None
