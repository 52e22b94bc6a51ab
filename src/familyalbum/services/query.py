"""
Search, category filtering and sorting of an in-memory photo working set.

The gallery loads every photo once and re-runs ``query_photos`` whenever the
search box, the category selector or the sort selector changes. The functions
here are pure: they never touch the store, never mutate the input list and
return the very same ``Photo`` objects they were given.
"""

import calendar
import locale
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import UTC, date, datetime
from enum import Enum

from ..models.photo import Photo, ensure_utc


class Category(str, Enum):
    """Coarse predicates applied before sorting."""

    ALL = "all"
    FAVORITES = "favorites"
    RECENT = "recent"

    @classmethod
    def parse(cls, value: "str | Category") -> "Category":
        """
        Parse a category from its string value.

        Raises:
            ValueError: If the value is not a known category
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(f"Unknown category: {value!r}") from None


class SortKey(str, Enum):
    """Orderings offered by the gallery."""

    NEWEST = "newest"
    OLDEST = "oldest"
    TITLE = "title"
    DATE_TAKEN = "date_taken"

    @classmethod
    def parse(cls, value: "str | SortKey") -> "SortKey":
        """
        Parse a sort key from its string value.

        Raises:
            ValueError: If the value is not a known sort key
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(f"Unknown sort key: {value!r}") from None


def one_month_before(moment: datetime) -> datetime:
    """
    Step back one calendar month from ``moment``.

    The day of month is kept when the previous month has it and clamped to
    that month's last day otherwise, so March 31 becomes February 28 (or 29)
    and January 31 becomes December 31 of the previous year. Time of day and
    tzinfo are unchanged.
    """
    if moment.month == 1:
        year, month = moment.year - 1, 12
    else:
        year, month = moment.year, moment.month - 1

    last_day = calendar.monthrange(year, month)[1]
    return moment.replace(year=year, month=month, day=min(moment.day, last_day))


def matches_term(photo: Photo, term: str) -> bool:
    """
    Check whether a photo matches a search term.

    Matching is a case-insensitive substring test against the title,
    description, event, location, every tag and every person. Missing
    optional fields simply do not match.
    """
    needle = term.casefold()

    for text in (photo.title, photo.description, photo.event, photo.location):
        if text and needle in text.casefold():
            return True

    for values in (photo.tags, photo.people):
        if values and any(needle in value.casefold() for value in values if value):
            return True

    return False


def filter_by_category(photos: Iterable[Photo], category: Category, now: datetime) -> list[Photo]:
    """Keep the photos that belong to ``category`` as of ``now``."""
    if category is Category.FAVORITES:
        return [photo for photo in photos if photo.is_favorite]

    if category is Category.RECENT:
        cutoff = ensure_utc(one_month_before(now))
        return [photo for photo in photos if ensure_utc(photo.created_at) > cutoff]

    return list(photos)


def _title_key(photo: Photo) -> str:
    return locale.strxfrm(photo.title.casefold())


def _created_key(photo: Photo) -> datetime:
    return ensure_utc(photo.created_at)


def _taken_key(photo: Photo) -> date:
    taken = photo.date_taken
    if isinstance(taken, datetime):
        return taken.date()
    return taken  # type: ignore[return-value]


def sort_photos(photos: Sequence[Photo], sort_key: SortKey) -> list[Photo]:
    """
    Return ``photos`` ordered by ``sort_key``.

    All orderings are stable. For ``DATE_TAKEN`` the photos with a known date
    come first, newest taken first, followed by the undated photos in their
    incoming order.
    """
    if sort_key is SortKey.NEWEST:
        return sorted(photos, key=_created_key, reverse=True)

    if sort_key is SortKey.OLDEST:
        return sorted(photos, key=_created_key)

    if sort_key is SortKey.TITLE:
        return sorted(photos, key=_title_key)

    dated = [photo for photo in photos if photo.is_taken_known()]
    undated = [photo for photo in photos if not photo.is_taken_known()]
    return sorted(dated, key=_taken_key, reverse=True) + undated


def query_photos(
    photos: Sequence[Photo],
    term: str = "",
    category: Category | str = Category.ALL,
    sort_key: SortKey | str = SortKey.NEWEST,
    now: datetime | None = None,
) -> list[Photo]:
    """
    Produce the visible, ordered subset of a photo working set.

    Args:
        photos: Every photo currently loaded; left untouched
        term: Free text search; the empty string disables text filtering
        category: "all", "favorites" or "recent"
        sort_key: "newest", "oldest", "title" or "date_taken"
        now: Evaluation time for the "recent" window (defaults to the current UTC time)

    Returns:
        A new list holding a subset of the input objects

    Raises:
        ValueError: If the category or sort key is unknown
    """
    category = Category.parse(category)
    sort_key = SortKey.parse(sort_key)

    visible: list[Photo] = list(photos)
    if term:
        visible = [photo for photo in visible if matches_term(photo, term)]

    visible = filter_by_category(visible, category, now or datetime.now(UTC))
    return sort_photos(visible, sort_key)


@dataclass(frozen=True)
class PhotoQuery:
    """The gallery's current search box, category and sort selections."""

    term: str = ""
    category: Category = Category.ALL
    sort_key: SortKey = SortKey.NEWEST

    @classmethod
    def from_inputs(cls, term: str | None, category: str, sort_key: str) -> "PhotoQuery":
        """Build a query from raw widget values."""
        return cls(term=term or "", category=Category.parse(category), sort_key=SortKey.parse(sort_key))

    def apply(self, photos: Sequence[Photo], now: datetime | None = None) -> list[Photo]:
        """Run this query over ``photos``."""
        return query_photos(photos, self.term, self.category, self.sort_key, now=now)
