"""Comment model for the familyalbum application."""

import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from .photo import ensure_utc, parse_datetime


@dataclass
class Comment:
    """A comment left on a photo. Comments are never edited or deleted."""

    id: str
    photo_id: str
    author_name: str
    content: str
    created_at: datetime

    @classmethod
    def create_new(
        cls, photo_id: str, author_name: str, content: str, created_at: datetime | None = None
    ) -> "Comment":
        """
        Create a new Comment with a generated ID.

        Args:
            photo_id: ID of the photo being commented on
            author_name: Display name of the author
            content: Comment text (surrounding whitespace is removed)
            created_at: Submission time (defaults to now)

        Returns:
            New Comment instance
        """
        return cls(
            id=str(uuid.uuid4()),
            photo_id=photo_id,
            author_name=author_name,
            content=content.strip(),
            created_at=ensure_utc(created_at) if created_at else datetime.now(UTC),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "photo_id": self.photo_id,
            "author_name": self.author_name,
            "content": self.content,
            "created_at": self.created_at.isoformat(),
        }

    def to_record(self) -> dict[str, Any]:
        record = self.to_dict()
        record["created_at"] = ensure_utc(self.created_at).replace(tzinfo=None)
        return record

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Comment":
        return cls(
            id=str(data["id"]),
            photo_id=str(data["photo_id"]),
            author_name=data.get("author_name") or "User",
            content=data["content"],
            created_at=parse_datetime(data["created_at"]),
        )

    def validate(self) -> bool:
        """Check the comment has a target photo, an author and non-blank content."""
        return bool(self.id and self.photo_id and self.author_name and self.content.strip())
