# routers/announcement_router.py
from typing import Optional

from fastapi import APIRouter, Body, Depends, File, Request, Response, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from Controllers.announcement_controller import AnnouncementController

router = APIRouter(prefix="/api/v1/announcements", tags=["Announcements"])

# errors are raised by the service, so a missing header must not short-circuit here
basic_auth = HTTPBasic(auto_error=False)


def get_announcement_controller(request: Request) -> AnnouncementController:
    return request.app.state.announcement_controller


@router.get("")
def list_announcements(
    lat: Optional[str] = None,
    lng: Optional[str] = None,
    range: Optional[str] = None,
    controller: AnnouncementController = Depends(get_announcement_controller),
):
    return controller.list_announcements(lat, lng, range)


@router.get("/{announcement_id}")
def get_announcement(announcement_id: str, controller: AnnouncementController = Depends(get_announcement_controller)):
    return controller.get_announcement(announcement_id)


@router.post("", status_code=status.HTTP_201_CREATED)
def create_announcement(
    payload: dict = Body(...),
    controller: AnnouncementController = Depends(get_announcement_controller),
):
    return controller.create_announcement(payload)


@router.post("/{announcement_id}/photos", status_code=status.HTTP_201_CREATED)
async def upload_photo(
    announcement_id: str,
    photo: UploadFile = File(...),
    credentials: Optional[HTTPBasicCredentials] = Depends(basic_auth),
    controller: AnnouncementController = Depends(get_announcement_controller),
):
    photo_bytes = await photo.read()
    await run_in_threadpool(controller.upload_photo, announcement_id, credentials, photo_bytes)
    return {}


@router.delete("/{announcement_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_announcement(announcement_id: str, controller: AnnouncementController = Depends(get_announcement_controller)):
    controller.delete_announcement(announcement_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
