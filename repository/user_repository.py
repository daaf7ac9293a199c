import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import sessionmaker

from repository.user_model import User


class UserRepository:
    def __init__(self, session_factory: sessionmaker):
        # one short-lived session per call
        self.session_factory = session_factory

    def find_by_id(self, user_id: str) -> Optional[User]:
        """
        Look a user up by primary key
        - returns the User, or None when absent
        - SQL: SELECT * FROM "user" WHERE id = :user_id
        """
        with self.session_factory() as db:
            return db.get(User, user_id)

    def find_by_email(self, email: str) -> Optional[User]:
        """
        Look a user up by (already normalized) email
        - SQL: SELECT * FROM "user" WHERE email = :email
        """
        stmt = select(User).where(User.email == email)
        with self.session_factory() as db:
            return db.execute(stmt).scalars().first()

    def create(self, email: str, password_hash: str) -> User:
        """
        Insert a new user and return the refreshed row
        - raises IntegrityError if the email is already taken
        """
        user = User(id=str(uuid.uuid4()), email=email, password_hash=password_hash)
        with self.session_factory() as db:
            db.add(user)
            db.commit()
            db.refresh(user)
        return user
