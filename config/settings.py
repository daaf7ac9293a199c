"""
Application settings
Centralized configuration from environment variables
"""
import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    # Database
    DB_URL: str = os.getenv("DB_URL", "sqlite:///./petspot.db")

    # Auth
    JWT_SECRET: str = os.getenv("JWT_SECRET", "dev-jwt-secret-change-me")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_TTL_SECONDS: int = int(os.getenv("ACCESS_TOKEN_TTL_SECONDS", 3600))
    MANAGEMENT_PASSWORD_LENGTH: int = int(os.getenv("MANAGEMENT_PASSWORD_LENGTH", 12))

    # Photos are served from PUBLIC_DIR/images under the /images URL prefix
    PUBLIC_DIR: str = os.getenv("PUBLIC_DIR", "public")
    MAX_PHOTO_SIZE_BYTES: int = int(os.getenv("MAX_PHOTO_SIZE_BYTES", 20 * 1024 * 1024))

    DEFAULT_RANGE_KM: int = int(os.getenv("DEFAULT_RANGE_KM", 5))

    # CORS - web client
    CORS_ORIGINS: list = [
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", "http://localhost:5173,http://localhost:3000").split(",")
        if origin.strip()
    ]

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Application
    APP_NAME: str = "PetSpot API"
    APP_VERSION: str = "1.0.0"

    @property
    def IMAGES_DIR(self) -> str:
        return os.path.join(self.PUBLIC_DIR, "images")


settings = Settings()
