import logging
import os
import tempfile
from typing import List, Optional

from core.errors import NotFoundError, PayloadTooLargeError, ValidationError
from core.validation import ImageFormatValidator
from database.database import TransactionRunner
from repository.announcement_repository import AnnouncementRepository

logger = logging.getLogger(__name__)

MAX_PHOTO_SIZE_BYTES = 20 * 1024 * 1024
IMAGES_URL_PREFIX = "/images"


class PhotoUploadService:
    """Stores announcement photos on disk and records their public URL.

    A photo lives at ``{public_directory}/images/{id}.{ext}`` and is served as
    ``/images/{id}.{ext}``.
    """

    def __init__(
        self,
        repository: AnnouncementRepository,
        image_validator: ImageFormatValidator,
        transaction: TransactionRunner,
        public_directory: str,
        max_size_bytes: int = MAX_PHOTO_SIZE_BYTES,
    ):
        self.repository = repository
        self.image_validator = image_validator
        self.transaction = transaction
        self.public_directory = public_directory
        self.max_size_bytes = max_size_bytes

    @property
    def images_directory(self) -> str:
        return os.path.join(self.public_directory, "images")

    def upload_photo(self, announcement_id: str, photo_bytes: bytes, upload_directory: str) -> str:
        announcement = self.repository.find_by_id(announcement_id)
        if announcement is None:
            raise NotFoundError(f"Announcement {announcement_id} not found")

        if len(photo_bytes) > self.max_size_bytes:
            raise PayloadTooLargeError("Photo exceeds the 20MB size limit")

        mime_type = self.image_validator.detect_mime_type(photo_bytes)
        if mime_type is None:
            raise ValidationError("INVALID_FILE_FORMAT", "Photo must be a supported image format", "photo")

        filename = f"{announcement_id}.{self.image_validator.extension_for(mime_type)}"
        photo_url = f"{IMAGES_URL_PREFIX}/{filename}"
        file_path = os.path.join(upload_directory, filename)
        previous_url = announcement.photo_url
        written = []

        def apply(db):
            if self.repository.update_photo_url(db, announcement_id, photo_url) == 0:
                # deleted since the lookup above; write nothing
                raise NotFoundError(f"Announcement {announcement_id} not found")
            # a failed write raises here and the row update is rolled back
            self._write_file(file_path, photo_bytes)
            written.append(file_path)

        try:
            self.transaction(apply)
        except Exception:
            # commit failed after the write: drop the file unless it replaced the current photo
            if written and previous_url != photo_url:
                self._remove_quietly(file_path)
            raise

        if previous_url and previous_url != photo_url:
            self.delete_photos(previous_url)

        logger.info("photo stored: announcement=%s url=%s (%s bytes)", announcement_id, photo_url, len(photo_bytes))
        return photo_url

    def delete_photos(self, photo_url: Optional[str]) -> None:
        """Best-effort removal of a stored photo. Never raises for filesystem errors."""
        if not photo_url:
            return
        self._remove_quietly(self._path_for(photo_url))

    def find_missing_photo_files(self) -> List[str]:
        """Ids of announcements whose photo_url points at a file that is not on disk."""
        return [
            announcement.id
            for announcement in self.repository.find_with_photo()
            if not os.path.exists(self._path_for(announcement.photo_url))
        ]

    def _path_for(self, photo_url: str) -> str:
        # basename keeps the path inside the images directory
        return os.path.join(self.images_directory, os.path.basename(photo_url))

    @staticmethod
    def _write_file(file_path: str, data: bytes) -> None:
        directory = os.path.dirname(file_path) or "."
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".upload-")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp_path, file_path)
        except OSError:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    @staticmethod
    def _remove_quietly(file_path: str) -> None:
        try:
            os.remove(file_path)
            logger.info("photo deleted: %s", file_path)
        except OSError as e:
            logger.warning("photo delete failed: %s, %s", file_path, e)
