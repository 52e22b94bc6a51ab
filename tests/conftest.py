"""
Pytest configuration and fixtures for familyalbum tests.
"""

import base64
import io
import json
import tempfile
import time
from collections.abc import Generator
from datetime import UTC, date, datetime
from pathlib import Path

import pytest
from PIL import Image

from familyalbum.config import get_config
from familyalbum.models.database import create_database
from familyalbum.models.photo import Photo
from familyalbum.services.auth import ROLE_ADMIN, ROLE_USER, UserInfo
from familyalbum.services.photos import PhotoService
from familyalbum.services.records import RecordStore, reset_record_store
from familyalbum.services.storage import LocalStorageService, reset_storage_service


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield Path(tmp_dir)


def make_jpeg(exif_datetime: str | None = None, size: tuple[int, int] = (4, 4)) -> bytes:
    """Build a small JPEG, optionally carrying an EXIF DateTime."""
    image = Image.new("RGB", size, color=(200, 120, 40))
    buffer = io.BytesIO()
    if exif_datetime:
        exif = Image.Exif()
        exif[0x0132] = exif_datetime
        image.save(buffer, format="JPEG", exif=exif)
    else:
        image.save(buffer, format="JPEG")
    return buffer.getvalue()


@pytest.fixture
def sample_image_data() -> bytes:
    """Provide a small JPEG without EXIF data."""
    return make_jpeg()


@pytest.fixture
def mock_user_id() -> str:
    """Provide a mock user ID for testing."""
    return "test-user-123"


@pytest.fixture(autouse=True)
def setup_test_env(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Set up test environment variables and forget cached configuration and services."""
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.setenv("GCS_PHOTOS_BUCKET", "test-photos-bucket")
    monkeypatch.setenv("GOOGLE_CLOUD_PROJECT", "test-project")
    monkeypatch.delenv("ADMIN_EMAILS", raising=False)
    monkeypatch.delenv("DEV_USER_ROLE", raising=False)

    get_config().clear_cache()
    reset_storage_service()
    reset_record_store()
    yield
    get_config().clear_cache()
    reset_storage_service()
    reset_record_store()


@pytest.fixture
def db_manager(temp_dir: Path):
    """An initialized DuckDB database in a temporary file."""
    manager = create_database(str(temp_dir / "test.duckdb"))
    yield manager
    manager.close()


@pytest.fixture
def record_store(db_manager) -> RecordStore:
    return RecordStore(db_manager)


@pytest.fixture
def photo_service(record_store: RecordStore) -> PhotoService:
    return PhotoService(record_store)


@pytest.fixture
def local_storage(temp_dir: Path) -> LocalStorageService:
    return LocalStorageService(root_dir=str(temp_dir / "objects"), base_url="http://media.test")


class TestDataFactory:
    """Factory class for creating test data objects."""

    __test__ = False

    @staticmethod
    def create_photo(
        title: str = "Photo",
        created_at: datetime | None = None,
        photo_id: str | None = None,
        description: str | None = None,
        event: str | None = None,
        location: str | None = None,
        date_taken: date | None = None,
        is_favorite: bool = False,
        people: list[str] | None = None,
        tags: list[str] | None = None,
        file_url: str = "http://media.test/photo.jpg",
        user_id: str | None = "test-user-123",
    ) -> Photo:
        """Create a Photo for testing; the ID defaults to the title."""
        return Photo(
            id=photo_id or title,
            title=title,
            file_url=file_url,
            created_at=created_at or datetime(2024, 6, 1, 12, 0, tzinfo=UTC),
            user_id=user_id,
            description=description,
            event=event,
            location=location,
            date_taken=date_taken,
            is_favorite=is_favorite,
            people=list(people or []),
            tags=list(tags or []),
        )

    @staticmethod
    def create_user_info(
        user_id: str = "test-user-123",
        email: str = "test@example.com",
        full_name: str = "Test User",
        admin: bool = True,
    ) -> UserInfo:
        """Create a UserInfo object for testing."""
        return UserInfo(
            user_id=user_id,
            email=email,
            full_name=full_name,
            role=ROLE_ADMIN if admin else ROLE_USER,
        )

    @staticmethod
    def create_jwt_payload(
        user_id: str = "test-user-123",
        email: str = "test@example.com",
        name: str | None = "Test User",
        picture: str | None = None,
    ) -> dict:
        """Create an IAP JWT payload for testing."""
        current_time = int(time.time())
        payload = {
            "sub": user_id,
            "email": email,
            "iss": "https://cloud.google.com/iap",
            "aud": "/projects/123456789/global/backendServices/test-service",
            "iat": current_time,
            "exp": current_time + 3600,
        }

        if name is not None:
            payload["name"] = name
        if picture is not None:
            payload["picture"] = picture

        return payload

    @staticmethod
    def create_valid_jwt_token(payload: dict | None = None) -> str:
        """Create a structurally valid JWT token with a dummy signature."""
        if payload is None:
            payload = TestDataFactory.create_jwt_payload()

        header = {"alg": "ES256", "typ": "JWT"}

        header_b64 = base64.urlsafe_b64encode(json.dumps(header).encode()).decode().rstrip("=")
        payload_b64 = base64.urlsafe_b64encode(json.dumps(payload).encode()).decode().rstrip("=")
        signature_b64 = base64.urlsafe_b64encode(b"test_signature").decode().rstrip("=")

        return f"{header_b64}.{payload_b64}.{signature_b64}"

    @staticmethod
    def create_iap_headers(**payload_fields) -> dict[str, str]:
        """Create IAP headers with a valid JWT token for testing."""
        payload = TestDataFactory.create_jwt_payload(**payload_fields)
        return {"X-Goog-IAP-JWT-Assertion": TestDataFactory.create_valid_jwt_token(payload)}


@pytest.fixture
def test_data_factory() -> TestDataFactory:
    """Provide TestDataFactory instance for tests."""
    return TestDataFactory()


@pytest.fixture
def jpeg_factory():
    """Provide the JPEG builder: ``jpeg_factory(exif_datetime="2023:07:04 10:00:00")``."""
    return make_jpeg
