from sqlalchemy import Column, Integer, String, CHAR, Text, Float, DateTime
from sqlalchemy.sql import func

from database.database import Base


class Announcement(Base):
    __tablename__ = "announcement"

    id = Column(CHAR(36), primary_key=True, index=True)
    pet_name = Column(String(100))
    species = Column(String(100), nullable=False)
    breed = Column(String(100))
    sex = Column(String(10), nullable=False)
    age = Column(Integer)
    description = Column(Text)
    microchip_number = Column(String(50), unique=True)
    location_latitude = Column(Float, nullable=False)
    location_longitude = Column(Float, nullable=False)
    last_seen_date = Column(String(10), nullable=False)
    email = Column(String(254))
    phone = Column(String(50))
    # null until the second step (photo upload) completes
    photo_url = Column(String(255))
    status = Column(String(10), nullable=False, default="MISSING")
    reward = Column(String(255))
    management_password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Announcement(id={self.id}, species='{self.species}', status='{self.status}')>"
