import logging
import math
import uuid
from typing import List, Optional

from sqlalchemy import select, update, delete, func
from sqlalchemy.orm import Session, sessionmaker

from core.security import hash_password
from repository.announcement_model import Announcement
from schemas.announcement_schema import LocationFilter

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371
DEG_TO_RAD = math.pi / 180


def _squared(expr):
    return expr * expr


def haversine_distance_km(lat: float, lng: float):
    """SQL expression: great-circle distance from (lat, lng) to each row, in km."""
    half_dlat = (Announcement.location_latitude - lat) * DEG_TO_RAD / 2
    half_dlng = (Announcement.location_longitude - lng) * DEG_TO_RAD / 2
    a = _squared(func.sin(half_dlat)) + (
        func.cos(lat * DEG_TO_RAD)
        * func.cos(Announcement.location_latitude * DEG_TO_RAD)
        * _squared(func.sin(half_dlng))
    )
    return 2 * EARTH_RADIUS_KM * func.asin(func.sqrt(a))


class AnnouncementRepository:
    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def find_all(self, location_filter: Optional[LocationFilter] = None) -> List[Announcement]:
        """Announcements that already have a photo, newest first.

        With a location filter only rows strictly closer than ``range`` km
        to (lat, lng) are returned.
        """
        stmt = select(Announcement).where(Announcement.photo_url.is_not(None))

        if location_filter is not None:
            distances = select(
                Announcement.id.label("id"),
                haversine_distance_km(location_filter.lat, location_filter.lng).label("distance"),
            ).subquery()
            stmt = stmt.join(distances, Announcement.id == distances.c.id).where(
                distances.c.distance < location_filter.range
            )

        stmt = stmt.order_by(Announcement.created_at.desc())
        with self.session_factory() as db:
            return list(db.execute(stmt).scalars().all())

    def find_with_photo(self) -> List[Announcement]:
        stmt = select(Announcement).where(Announcement.photo_url.is_not(None))
        with self.session_factory() as db:
            return list(db.execute(stmt).scalars().all())

    def find_by_id(self, announcement_id: str) -> Optional[Announcement]:
        with self.session_factory() as db:
            return db.get(Announcement, announcement_id)

    def exists_by_microchip(self, microchip_number: str) -> bool:
        stmt = select(Announcement.id).where(Announcement.microchip_number == microchip_number).limit(1)
        with self.session_factory() as db:
            return db.execute(stmt).first() is not None

    def create(self, data: dict, management_password: str) -> Announcement:
        """
        Insert an announcement without a photo
        - data holds column names (pet_name, species, ...)
        - only the hash of management_password is stored
        """
        announcement = Announcement(
            id=str(uuid.uuid4()),
            photo_url=None,
            management_password_hash=hash_password(management_password),
            **data,
        )
        with self.session_factory() as db:
            db.add(announcement)
            db.commit()
            db.refresh(announcement)
        logger.info("announcement created: id=%s", announcement.id)
        return announcement

    def update_photo_url(self, db: Session, announcement_id: str, photo_url: str) -> int:
        # runs on the caller's transaction; commit/rollback belong to the caller
        result = db.execute(
            update(Announcement)
            .where(Announcement.id == announcement_id)
            .values(photo_url=photo_url, updated_at=func.now())
        )
        return result.rowcount

    def delete(self, announcement_id: str) -> bool:
        with self.session_factory() as db:
            result = db.execute(delete(Announcement).where(Announcement.id == announcement_id))
            db.commit()
        return result.rowcount > 0
