import logging
from typing import List, NamedTuple, Optional

from sqlalchemy.exc import IntegrityError

from core.errors import ConflictError, NotFoundError, UnauthenticatedError, UnauthorizedError
from core.security import generate_management_password, verify_password
from core.validation import AnnouncementValidator, LocationValidator, TextSanitizer
from repository.announcement_model import Announcement
from repository.announcement_repository import AnnouncementRepository
from services.photo_upload_service import PhotoUploadService

logger = logging.getLogger(__name__)

# free-text fields escaped before they are stored
SANITIZED_FIELDS = ("pet_name", "species", "breed", "sex", "description", "reward")


class CreatedAnnouncement(NamedTuple):
    announcement: Announcement
    management_password: str


class AnnouncementService:
    def __init__(
        self,
        repository: AnnouncementRepository,
        validator: AnnouncementValidator,
        location_validator: LocationValidator,
        sanitizer: TextSanitizer,
        photo_upload_service: PhotoUploadService,
        management_password_length: int = 12,
    ):
        self.repository = repository
        self.validator = validator
        self.location_validator = location_validator
        self.sanitizer = sanitizer
        self.photo_upload_service = photo_upload_service
        self.management_password_length = management_password_length

    def get_all_announcements(self, lat=None, lng=None, range=None) -> List[Announcement]:
        location_filter = self.location_validator.validate(lat, lng, range)
        return self.repository.find_all(location_filter)

    def get_announcement_by_id(self, announcement_id: str) -> Announcement:
        announcement = self.repository.find_by_id(announcement_id)
        if announcement is None:
            raise NotFoundError(f"Announcement {announcement_id} not found")
        return announcement

    def create_announcement(self, data) -> CreatedAnnouncement:
        """Validate, sanitize and store a new announcement.

        The plaintext management password exists only in the returned
        value; the caller has to hand it to the reporter right away.
        """
        dto = self.validator.validate(data)

        if dto.microchip_number and self.repository.exists_by_microchip(dto.microchip_number):
            raise ConflictError("Microchip number already exists", field="microchipNumber")

        fields = dto.model_dump()
        for name in SANITIZED_FIELDS:
            fields[name] = self.sanitizer.sanitize(fields[name])

        management_password = generate_management_password(self.management_password_length)
        try:
            announcement = self.repository.create(fields, management_password)
        except IntegrityError:
            # lost a race against another insert with the same microchip
            raise ConflictError("Microchip number already exists", field="microchipNumber") from None

        return CreatedAnnouncement(announcement, management_password)

    def verify_management_access(self, announcement_id: str, username: Optional[str], password: Optional[str]) -> Announcement:
        """Basic-auth check for owner operations: username is the id, password the management password."""
        if not username or not password:
            raise UnauthenticatedError("Missing or invalid credentials")

        announcement = self.get_announcement_by_id(announcement_id)

        if username != announcement_id or not verify_password(password, announcement.management_password_hash):
            raise UnauthorizedError("Invalid management credentials")
        return announcement

    def delete_announcement(self, announcement_id: str) -> None:
        announcement = self.get_announcement_by_id(announcement_id)

        # file cleanup is best-effort; the row goes regardless
        if announcement.photo_url:
            self.photo_upload_service.delete_photos(announcement.photo_url)

        self.repository.delete(announcement_id)
        logger.info("announcement deleted: id=%s", announcement_id)
