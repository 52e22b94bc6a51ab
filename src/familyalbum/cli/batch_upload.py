"""
Bulk import of a directory of images.

Usage::

    invoke --search-root src/familyalbum/cli --collection batch_upload \\
        batch-upload --directory ./photos --user-id admin-1 --event "Summer 2024"

Each image becomes its own photo titled after its file name, with the date
taken read from EXIF when present. Pass ``--title`` to upload the whole
directory as one batch titled "<title> (1)", "<title> (2)", ...
"""

import os

import structlog
from dotenv import load_dotenv
from invoke import Context, task

from familyalbum.error_handling import FamilyAlbumError
from familyalbum.services.auth import ROLE_ADMIN, UserInfo
from familyalbum.services.photos import get_photo_service
from familyalbum.services.storage import get_storage_service, guess_content_type
from familyalbum.services.uploads import UploadFile, UploadForm, UploadService, extract_date_taken

logger = structlog.get_logger()

SUPPORTED_EXTENSIONS = [".jpg", ".jpeg", ".png", ".gif", ".webp", ".bmp", ".tiff", ".heic", ".heif"]


def find_image_files(directory: str, recursive: bool = False) -> list[str]:
    """List image paths in ``directory`` in a stable order."""
    image_files = []
    if recursive:
        for root, _, files in os.walk(directory):
            for name in files:
                if os.path.splitext(name)[1].lower() in SUPPORTED_EXTENSIONS:
                    image_files.append(os.path.join(root, name))
    else:
        for name in os.listdir(directory):
            path = os.path.join(directory, name)
            if os.path.isfile(path) and os.path.splitext(name)[1].lower() in SUPPORTED_EXTENSIONS:
                image_files.append(path)
    return sorted(image_files)


def read_upload_file(file_path: str) -> UploadFile:
    with open(file_path, "rb") as f:
        data = f.read()
    name = os.path.basename(file_path)
    return UploadFile(name=name, data=data, content_type=guess_content_type(name))


def build_form(
    upload: UploadFile,
    title: str = "",
    event: str = "",
    location: str = "",
    tags: str = "",
    people: str = "",
) -> UploadForm:
    """Form values for one file; an empty title falls back to the file name."""
    form = UploadForm(title=title, event=event, location=location, date_taken=extract_date_taken(upload.data))
    form.apply_default_title([upload])
    for tag in tags.split(","):
        form.add_tag(tag)
    for person in people.split(","):
        form.add_person(person)
    return form


@task
def batch_upload(
    c: Context,
    directory: str,
    user_id: str,
    email: str = "",
    title: str = "",
    event: str = "",
    location: str = "",
    tags: str = "",
    people: str = "",
    env_file: str = ".env",
    recursive: bool = False,
    dry_run: bool = False,
):
    """
    Upload images from a local directory in batch.

    Args:
        c (Context): Invoke context.
        directory (str): Path to the directory containing images.
        user_id (str): The uploader's user ID.
        email (str): The uploader's email. Default is "<user_id>@cli.local".
        title (str): Shared title; files are then numbered. Default is one title per file name.
        event (str): Event for every photo.
        location (str): Location for every photo.
        tags (str): Comma separated tags for every photo.
        people (str): Comma separated names for every photo.
        env_file (str): Path to the environment file. Default is '.env'.
        recursive (bool): Search for images in subdirectories. Default is False.
        dry_run (bool): If True, lists files to be processed without uploading. Default is False.
    """
    if os.path.exists(env_file):
        logger.info("env_file_loaded", env_file=env_file)
        load_dotenv(dotenv_path=env_file)
    else:
        logger.warning("env_file_not_found", env_file=env_file)

    if not os.path.isdir(directory):
        logger.error("directory_not_found", directory=directory)
        return

    image_files = find_image_files(directory, recursive=recursive)
    if not image_files:
        logger.warning("no_image_files_found", directory=directory)
        return

    logger.info("batch_upload_started", directory=directory, user_id=user_id, files=len(image_files), dry_run=dry_run)

    if dry_run:
        print("\n--- Dry Run Mode: Files to be processed ---")
        for file_path in image_files:
            print(f"- {file_path}")
        print("--- End of Dry Run ---")
        return

    uploader = UserInfo(user_id=user_id, email=email or f"{user_id}@cli.local", full_name="CLI User", role=ROLE_ADMIN)
    service = UploadService(get_photo_service(), get_storage_service())

    successful_uploads = 0
    failed_uploads = 0

    if title:
        uploads = []
        for file_path in image_files:
            try:
                uploads.append(read_upload_file(file_path))
            except OSError as e:
                logger.error("file_read_failed", file_path=file_path, error=str(e))

        # upload() stops at the first failure; every file started before it was created
        started: list[str] = []
        if uploads:
            form = build_form(uploads[0], title, event, location, tags, people)
            try:
                successful_uploads = len(
                    service.upload(uploader, form, uploads, progress=lambda name, index, count: started.append(name))
                )
            except FamilyAlbumError as e:
                successful_uploads = max(len(started) - 1, 0)
                logger.error("batch_upload_failed", error=str(e), created=successful_uploads)
        failed_uploads = len(image_files) - successful_uploads
    else:
        for file_path in image_files:
            try:
                upload = read_upload_file(file_path)
                form = build_form(upload, "", event, location, tags, people)
                service.upload(uploader, form, [upload])
                logger.info("file_uploaded", file_path=file_path, title=form.title)
                successful_uploads += 1
            except (FamilyAlbumError, OSError) as e:
                logger.error("file_upload_failed", file_path=file_path, error=str(e))
                failed_uploads += 1

    logger.info("batch_upload_finished", successful=successful_uploads, failed=failed_uploads, total=len(image_files))
    print(f"\nBatch upload complete. Successful: {successful_uploads}, Failed: {failed_uploads}")
