# services/user_service.py
import logging

from sqlalchemy.exc import IntegrityError

from core.errors import ConflictError, InvalidCredentialsError
from core.security import DUMMY_PASSWORD_HASH, hash_password, verify_password
from core.validation import UserValidator
from repository.user_repository import UserRepository
from services.token_service import TokenManager

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, repository: UserRepository, validator: UserValidator, token_manager: TokenManager):
        self.repository = repository
        self.validator = validator
        self.token_manager = token_manager

    def register_user(self, data) -> dict:
        credentials = self.validator.validate(data)
        email = credentials.email.lower()

        # 1) duplicate email
        if self.repository.find_by_email(email):
            raise ConflictError("User with this email already exists")

        # 2) hash + store
        try:
            user = self.repository.create(email=email, password_hash=hash_password(credentials.password))
        except IntegrityError:
            raise ConflictError("User with this email already exists") from None
        logger.info("user registered: id=%s", user.id)

        # 3) registration logs the new user straight in
        return self.login_user({"email": email, "password": credentials.password})

    def login_user(self, data) -> dict:
        credentials = self.validator.validate(data)
        user = self.repository.find_by_email(credentials.email.lower())

        # always pay for one hash check so unknown emails and wrong passwords take equally long
        password_hash = user.password_hash if user else DUMMY_PASSWORD_HASH
        password_ok = verify_password(credentials.password, password_hash)

        if user is None or not password_ok:
            raise InvalidCredentialsError()

        return {"userId": user.id, "accessToken": self.token_manager.create_token(user.id)}
