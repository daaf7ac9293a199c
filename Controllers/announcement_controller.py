from typing import Optional

from fastapi.security import HTTPBasicCredentials

from schemas.announcement_schema import AnnouncementCreatedResponse, AnnouncementResponse
from services.announcement_service import AnnouncementService
from services.photo_upload_service import PhotoUploadService


def _serialize(announcement) -> dict:
    return AnnouncementResponse.model_validate(announcement).model_dump(by_alias=True, mode="json")


class AnnouncementController:
    def __init__(self, announcement_service: AnnouncementService, photo_upload_service: PhotoUploadService, images_directory: str):
        self.announcement_service = announcement_service
        self.photo_upload_service = photo_upload_service
        self.images_directory = images_directory

    # -----------------------
    # list / detail
    # -----------------------
    def list_announcements(self, lat=None, lng=None, range=None) -> dict:
        announcements = self.announcement_service.get_all_announcements(lat, lng, range)
        return {"data": [_serialize(a) for a in announcements]}

    def get_announcement(self, announcement_id: str) -> dict:
        return _serialize(self.announcement_service.get_announcement_by_id(announcement_id))

    # -----------------------
    # create (step 1)
    # -----------------------
    def create_announcement(self, payload) -> dict:
        created = self.announcement_service.create_announcement(payload)
        response = AnnouncementCreatedResponse.model_validate(
            {
                **AnnouncementResponse.model_validate(created.announcement).model_dump(),
                "management_password": created.management_password,
            }
        )
        return response.model_dump(by_alias=True, mode="json")

    # -----------------------
    # photo upload (step 2)
    # -----------------------
    def upload_photo(self, announcement_id: str, credentials: Optional[HTTPBasicCredentials], photo_bytes: bytes) -> str:
        self.announcement_service.verify_management_access(
            announcement_id,
            credentials.username if credentials else None,
            credentials.password if credentials else None,
        )
        return self.photo_upload_service.upload_photo(announcement_id, photo_bytes, self.images_directory)

    # -----------------------
    # delete
    # -----------------------
    def delete_announcement(self, announcement_id: str) -> None:
        self.announcement_service.delete_announcement(announcement_id)
