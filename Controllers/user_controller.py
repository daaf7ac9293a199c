from schemas.user_schema import AuthResponse
from services.user_service import UserService


class UserController:
    def __init__(self, user_service: UserService):
        self.user_service = user_service

    # -----------------------
    # registration (logs the user in)
    # -----------------------
    def create_user(self, payload) -> dict:
        result = self.user_service.register_user(payload)
        return AuthResponse.model_validate(result).model_dump(by_alias=True)

    # -----------------------
    # login
    # -----------------------
    def login(self, payload) -> dict:
        result = self.user_service.login_user(payload)
        return AuthResponse.model_validate(result).model_dump(by_alias=True)
