from sqlalchemy import Column, String, CHAR, DateTime
from sqlalchemy.sql import func

from database.database import Base


class User(Base):
    __tablename__ = "user"

    id = Column(CHAR(36), primary_key=True, index=True)
    email = Column(String(254), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}')>"
