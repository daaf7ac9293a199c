import pytest

from core.errors import (
    ConflictError,
    InvalidCredentialsError,
    NotFoundError,
    UnauthenticatedError,
    UnauthorizedError,
)
from core.security import verify_password
from core.validation import (
    AnnouncementValidator,
    ImageFormatValidator,
    LocationValidator,
    TextSanitizer,
    UserValidator,
)
from database.database import TransactionRunner
from repository.announcement_repository import AnnouncementRepository
from repository.user_repository import UserRepository
from services.announcement_service import AnnouncementService
from services.photo_upload_service import PhotoUploadService
from services.token_service import TokenManager
from services.user_service import UserService


@pytest.fixture
def announcement_service(session_factory, tmp_path):
    repository = AnnouncementRepository(session_factory)
    photos = PhotoUploadService(repository, ImageFormatValidator(), TransactionRunner(session_factory), str(tmp_path))
    return AnnouncementService(repository, AnnouncementValidator(), LocationValidator(), TextSanitizer(), photos)


@pytest.fixture
def user_service(session_factory):
    return UserService(UserRepository(session_factory), UserValidator(), TokenManager("secret"))


def test_management_password_matches_stored_hash(announcement_service, announcement_payload):
    created = announcement_service.create_announcement(announcement_payload)

    assert len(created.management_password) == 12
    assert verify_password(created.management_password, created.announcement.management_password_hash)


def test_duplicate_microchip(announcement_service, announcement_payload):
    announcement_service.create_announcement(announcement_payload)
    with pytest.raises(ConflictError):
        announcement_service.create_announcement(announcement_payload)


def test_verify_management_access(announcement_service, announcement_payload):
    created = announcement_service.create_announcement(announcement_payload)
    announcement_id = created.announcement.id

    assert announcement_service.verify_management_access(
        announcement_id, announcement_id, created.management_password
    ).id == announcement_id

    with pytest.raises(UnauthenticatedError):
        announcement_service.verify_management_access(announcement_id, "", "")
    with pytest.raises(UnauthorizedError):
        announcement_service.verify_management_access(announcement_id, announcement_id, "nope")
    with pytest.raises(NotFoundError):
        announcement_service.verify_management_access("unknown", "unknown", "pw")


def test_delete_unknown_announcement(announcement_service):
    with pytest.raises(NotFoundError):
        announcement_service.delete_announcement("unknown")


def test_register_stores_lowercase_email(user_service, session_factory):
    result = user_service.register_user({"email": "MixedCase@Example.COM", "password": "long-enough"})

    user = UserRepository(session_factory).find_by_id(result["userId"])
    assert user.email == "mixedcase@example.com"
    assert user.password_hash != "long-enough"


def test_login_unknown_email(user_service):
    with pytest.raises(InvalidCredentialsError):
        user_service.login_user({"email": "ghost@example.com", "password": "long-enough"})
