import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.engine import Engine
from starlette.exceptions import HTTPException as StarletteHTTPException

from config.settings import Settings, settings as default_settings
from Controllers.announcement_controller import AnnouncementController
from Controllers.user_controller import UserController
from core.errors import ApiError
from core.logging_config import configure_logging
from core.middleware import RequestContextMiddleware, RequestLoggingMiddleware
from core.request_context import get_request_id
from core.validation import (
    AnnouncementValidator,
    ImageFormatValidator,
    LocationValidator,
    TextSanitizer,
    UserValidator,
)
from database.database import Base, TransactionRunner, build_session_factory, engine as default_engine
from repository import announcement_model, user_model  # noqa: F401  (register tables on Base)
from repository.announcement_repository import AnnouncementRepository
from repository.user_repository import UserRepository
from routers import announcement_router, user_router
from services.announcement_service import AnnouncementService
from services.photo_upload_service import PhotoUploadService
from services.token_service import TokenManager
from services.user_service import UserService

logger = logging.getLogger(__name__)

# status codes Starlette raises on its own (unknown route, wrong method, ...)
HTTP_STATUS_CODES = {
    400: "INVALID_FORMAT",
    401: "UNAUTHENTICATED",
    403: "UNAUTHORIZED",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    413: "PAYLOAD_TOO_LARGE",
}

VALIDATION_ERROR_CODES = {
    "missing": "MISSING_VALUE",
    "extra_forbidden": "INVALID_FIELD",
}


def _error_response(request: Request, status_code: int, body: dict) -> JSONResponse:
    request_id = getattr(request.state, "request_id", None) or get_request_id()
    return JSONResponse(status_code=status_code, content={"error": {"requestId": request_id, **body}})


def _field_from_loc(loc) -> Optional[str]:
    # json_invalid errors carry the character offset as an int
    parts = [p for p in loc if isinstance(p, str) and p not in ("body", "query", "path", "header")]
    return parts[-1] if parts else None


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        if exc.status_code >= 500:
            logger.error("api error: %s", exc.message)
        else:
            logger.info("api error: %s %s", exc.code, exc.message)
        return _error_response(request, exc.status_code, exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        first = exc.errors()[0] if exc.errors() else {}
        body = {
            "code": VALIDATION_ERROR_CODES.get(first.get("type"), "INVALID_FORMAT"),
            "message": first.get("msg", "Invalid request"),
        }
        field = _field_from_loc(first.get("loc", ()))
        if field:
            body["field"] = field
        return _error_response(request, 400, body)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        code = HTTP_STATUS_CODES.get(exc.status_code, "INTERNAL_SERVER_ERROR" if exc.status_code >= 500 else "BAD_REQUEST")
        return _error_response(request, exc.status_code, {"code": code, "message": str(exc.detail)})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("unhandled error on %s %s", request.method, request.url.path)
        return _error_response(
            request, 500, {"code": "INTERNAL_SERVER_ERROR", "message": "Internal server error"}
        )


def create_app(settings: Optional[Settings] = None, engine: Optional[Engine] = None) -> FastAPI:
    settings = settings or default_settings
    engine = engine or default_engine

    configure_logging(settings.LOG_LEVEL)

    # create tables
    Base.metadata.create_all(bind=engine)

    session_factory = build_session_factory(engine)
    os.makedirs(settings.IMAGES_DIR, exist_ok=True)

    # repositories / services / controllers, built once per app
    announcement_repository = AnnouncementRepository(session_factory)
    user_repository = UserRepository(session_factory)

    photo_upload_service = PhotoUploadService(
        repository=announcement_repository,
        image_validator=ImageFormatValidator(),
        transaction=TransactionRunner(session_factory),
        public_directory=settings.PUBLIC_DIR,
        max_size_bytes=settings.MAX_PHOTO_SIZE_BYTES,
    )
    announcement_service = AnnouncementService(
        repository=announcement_repository,
        validator=AnnouncementValidator(),
        location_validator=LocationValidator(default_range_km=settings.DEFAULT_RANGE_KM),
        sanitizer=TextSanitizer(),
        photo_upload_service=photo_upload_service,
        management_password_length=settings.MANAGEMENT_PASSWORD_LENGTH,
    )
    user_service = UserService(
        repository=user_repository,
        validator=UserValidator(),
        token_manager=TokenManager(
            secret=settings.JWT_SECRET,
            ttl=settings.ACCESS_TOKEN_TTL_SECONDS,
            algorithm=settings.JWT_ALGORITHM,
        ),
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        missing = photo_upload_service.find_missing_photo_files()
        if missing:
            logger.warning("announcements with missing photo files: %s", ", ".join(missing))
        yield

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        docs_url="/api/docs",          # Swagger UI
        redoc_url="/api/redoc",        # Redoc
        openapi_url="/api/openapi.json",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.announcement_controller = AnnouncementController(
        announcement_service, photo_upload_service, settings.IMAGES_DIR
    )
    app.state.user_controller = UserController(user_service)

    register_exception_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["x-request-id"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    # added last so it wraps everything else and the id is set before logging
    app.add_middleware(RequestContextMiddleware)

    # routers
    app.include_router(user_router.router)
    app.include_router(announcement_router.router)
    app.mount("/images", StaticFiles(directory=settings.IMAGES_DIR), name="images")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", 8000)),
        reload=True,
    )
