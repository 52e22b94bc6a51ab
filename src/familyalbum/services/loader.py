"""
Concurrent view loading for the familyalbum application.

Views fetch their data in phases. Every phase is a task group run on a
thread pool: all of its tasks start together, and the phase returns only
after every task has finished (the join point). A failing task is logged and
replaced by its default value, so a view always gets something to render.

Dashboard: phase 1 loads the user and the recent photos, phase 2 the
aggregate counters. Photo view: a single phase loads user, photo and comments.
"""

import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from ..error_handling import NotFoundError
from ..logging_config import get_logger, log_error, log_performance
from ..models.comment import Comment
from ..models.photo import Photo
from .auth import UserInfo
from .photos import PhotoService, PhotoStats

logger = get_logger(__name__)


@dataclass(frozen=True)
class Task:
    """One unit of work in a phase, with the value to use if it fails."""

    name: str
    func: Callable[[], Any]
    default: Any = None


def run_phase(phase: str, tasks: list[Task], max_workers: int | None = None) -> dict[str, Any]:
    """
    Run ``tasks`` concurrently and wait for all of them.

    Args:
        phase: Name used in logs
        tasks: Tasks to run; names must be unique
        max_workers: Thread pool size (defaults to one thread per task)

    Returns:
        Mapping of task name to its result, or to its default when it raised
    """
    if not tasks:
        return {}

    start = time.perf_counter()
    results: dict[str, Any] = {}

    with ThreadPoolExecutor(max_workers=max_workers or len(tasks), thread_name_prefix=f"load-{phase}") as executor:
        futures = {task.name: (task, executor.submit(task.func)) for task in tasks}

    for name, (task, future) in futures.items():
        error = future.exception()
        if error is None:
            results[name] = future.result()
        else:
            if not isinstance(error, NotFoundError):
                log_error(error, {"operation": "load_task", "phase": phase, "task": name})
            results[name] = task.default

    log_performance("load_phase", time.perf_counter() - start, phase=phase, tasks=[task.name for task in tasks])
    return results


@dataclass
class DashboardData:
    user: UserInfo | None = None
    recent_photos: list[Photo] = field(default_factory=list)
    stats: PhotoStats = field(default_factory=PhotoStats)


@dataclass
class PhotoViewData:
    user: UserInfo | None = None
    photo: Photo | None = None
    comments: list[Comment] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.photo is not None


class ViewLoader:
    """Loads the data behind each view through the photo service."""

    def __init__(self, photo_service: PhotoService, current_user: Callable[[], UserInfo | None]):
        """
        Args:
            photo_service: Service used for photo and comment reads
            current_user: Returns the signed-in user (may call the auth backend)
        """
        self.photo_service = photo_service
        self.current_user = current_user

    def load_dashboard(self, recent_limit: int = 6, now: datetime | None = None) -> DashboardData:
        """Load the dashboard: user and recent photos first, counters once both are in."""
        first = run_phase(
            "dashboard_primary",
            [
                Task("user", self.current_user, None),
                Task("recent_photos", lambda: self.photo_service.list_recent(recent_limit), []),
            ],
        )

        second = run_phase(
            "dashboard_stats",
            [Task("stats", lambda: self.photo_service.get_stats(now), PhotoStats())],
        )

        return DashboardData(user=first["user"], recent_photos=first["recent_photos"], stats=second["stats"])

    def load_photo_view(self, photo_id: str) -> PhotoViewData:
        """Load one photo with its comments and the current user; ``photo`` is None if it can't be loaded."""
        results = run_phase(
            "photo_view",
            [
                Task("user", self.current_user, None),
                Task("photo", lambda: self.photo_service.get_photo(photo_id), None),
                Task("comments", lambda: self.photo_service.list_comments(photo_id), []),
            ],
        )

        if results["photo"] is None:
            logger.warning("photo_view_unavailable", photo_id=photo_id)

        return PhotoViewData(user=results["user"], photo=results["photo"], comments=results["comments"])

    def load_gallery(self) -> list[Photo]:
        """Load the whole working set, or an empty list if the store is unavailable."""
        return run_phase("gallery", [Task("photos", self.photo_service.list_photos, [])])["photos"]

    def load_favorites(self) -> list[Photo]:
        """Load favorite photos, or an empty list if the store is unavailable."""
        return run_phase("favorites", [Task("photos", self.photo_service.list_favorites, [])])["photos"]
