"""End to end flow: upload, browse, comment and favorite against local storage and DuckDB."""

from familyalbum.services.loader import ViewLoader
from familyalbum.services.query import PhotoQuery
from familyalbum.services.uploads import UploadFile, UploadForm, UploadService
from tests.conftest import TestDataFactory


class TestAlbumFlow:
    """Integration tests across upload, loading, querying and comments."""

    def test_upload_then_browse(self, photo_service, local_storage, jpeg_factory):
        admin = TestDataFactory.create_user_info(user_id="admin-1", full_name="Ann", admin=True)
        uploads = UploadService(photo_service, local_storage)
        loader = ViewLoader(photo_service, lambda: admin)

        beach = uploads.upload(
            admin,
            UploadForm(title="Beach", event="Summer", tags=["sea"]),
            [UploadFile("beach.jpg", jpeg_factory())],
        )[0]
        uploads.upload(
            admin,
            UploadForm(title="Birthday", location="Home", people=["Grandma"]),
            [UploadFile("cake.jpg", jpeg_factory()), UploadFile("candles.jpg", jpeg_factory())],
        )

        dashboard = loader.load_dashboard(recent_limit=2)
        assert dashboard.stats.total == 3
        assert dashboard.stats.this_month == 3
        assert dashboard.stats.favorites == 0
        assert len(dashboard.recent_photos) == 2

        gallery = loader.load_gallery()
        assert [p.title for p in PhotoQuery.from_inputs("grandma", "all", "title").apply(gallery)] == [
            "Birthday (1)",
            "Birthday (2)",
        ]
        assert [p.title for p in PhotoQuery.from_inputs("SEA", "recent", "newest").apply(gallery)] == ["Beach"]

        photo_service.toggle_favorite(beach, user_id=admin.user_id)
        photo_service.add_comment(beach.id, admin.full_name, "What a day")

        view = loader.load_photo_view(beach.id)
        assert view.found
        assert view.photo.is_favorite
        assert [comment.content for comment in view.comments] == ["What a day"]
        assert [p.title for p in loader.load_favorites()] == ["Beach"]
        assert loader.load_dashboard().stats.favorites == 1

        stored = local_storage.root_dir / beach.file_url.removeprefix("http://media.test/")
        assert stored.read_bytes().startswith(b"\xff\xd8")
