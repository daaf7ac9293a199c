"""
Input validation and sanitizing

One class per concern. Services receive instances through their
constructors, so tests can swap any of them out.
"""
import html
import io
from typing import Any, Optional

from PIL import Image
from pillow_heif import register_heif_opener
from pydantic import ValidationError as PydanticValidationError

from core.errors import ValidationError
from schemas.announcement_schema import AnnouncementCreate, LocationFilter, LocationQuery
from schemas.user_schema import UserCredentials

register_heif_opener()


def _to_api_error(exc: PydanticValidationError, too_short_code: str = "INVALID_FORMAT") -> ValidationError:
    """Turn the first pydantic error into a ValidationError(code, message, field)."""
    error = exc.errors()[0]
    loc = error.get("loc") or ()
    field = str(loc[0]) if loc else None
    error_type = error["type"]

    if error_type == "missing":
        return ValidationError("MISSING_VALUE", f"{field} is required", field)
    if error_type == "extra_forbidden":
        return ValidationError("INVALID_FIELD", f"{field} is not a valid field", field)
    if error_type == "string_too_short":
        code = too_short_code
        message = "cannot be empty" if code == "MISSING_VALUE" else error["msg"]
        return ValidationError(code, message, field)
    if error_type == "value_error":
        return ValidationError("INVALID_FORMAT", str(error["ctx"]["error"]), field)
    return ValidationError("INVALID_FORMAT", error["msg"], field)


class UserValidator:
    def validate(self, data: Any) -> UserCredentials:
        try:
            return UserCredentials.model_validate(data)
        except PydanticValidationError as exc:
            raise _to_api_error(exc) from None


class AnnouncementValidator:
    def validate(self, data: Any) -> AnnouncementCreate:
        try:
            announcement = AnnouncementCreate.model_validate(data)
        except PydanticValidationError as exc:
            raise _to_api_error(exc, too_short_code="MISSING_VALUE") from None

        if not announcement.email and not announcement.phone:
            raise ValidationError(
                "MISSING_CONTACT",
                "at least one contact method (email or phone) is required",
                "contact",
            )
        return announcement


class LocationValidator:
    """Checks ?lat=&lng=&range= and pairs them into a LocationFilter.

    lat and lng must come together; range falls back to the default.
    Returns None when no coordinates were given.
    """

    def __init__(self, default_range_km: int = 5):
        self.default_range_km = default_range_km

    def validate(self, lat: Any = None, lng: Any = None, range: Any = None) -> Optional[LocationFilter]:
        if isinstance(range, str) and not range.strip():
            # an empty ?range= counts as zero
            range = "0"
        try:
            query = LocationQuery.model_validate({"lat": lat, "lng": lng, "range": range})
        except PydanticValidationError as exc:
            error = exc.errors()[0]
            field = str(error["loc"][0])
            raise ValidationError("INVALID_PARAMETER", self._message(field, error), field) from None

        if query.lat is not None and query.lng is None:
            raise ValidationError("INVALID_PARAMETER", "Parameter 'lng' is required when 'lat' is provided", "lng")
        if query.lng is not None and query.lat is None:
            raise ValidationError("INVALID_PARAMETER", "Parameter 'lat' is required when 'lng' is provided", "lat")
        if query.lat is None:
            return None

        return LocationFilter(
            lat=query.lat,
            lng=query.lng,
            range=query.range if query.range is not None else self.default_range_km,
        )

    @staticmethod
    def _message(field: str, error: dict) -> str:
        error_type = error["type"]
        if error_type == "value_error":
            return str(error["ctx"]["error"])
        if error_type in ("greater_than_equal", "less_than_equal"):
            bound = 90 if field == "lat" else 180
            return f"Parameter '{field}' must be between -{bound} and {bound}"
        return f"Parameter '{field}' must be a valid number"


class TextSanitizer:
    def sanitize(self, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return html.escape(value.strip(), quote=True)


class ImageFormatValidator:
    """Identifies an image from its bytes, ignoring any client-declared type."""

    # Pillow format name -> (mime type, file extension)
    SUPPORTED_FORMATS = {
        "JPEG": ("image/jpeg", "jpeg"),
        "MPO": ("image/jpeg", "jpeg"),
        "PNG": ("image/png", "png"),
        "GIF": ("image/gif", "gif"),
        "WEBP": ("image/webp", "webp"),
        "BMP": ("image/bmp", "bmp"),
        "TIFF": ("image/tiff", "tiff"),
        "HEIF": ("image/heif", "heif"),
    }
    EXTENSIONS = {mime: ext for mime, ext in SUPPORTED_FORMATS.values()}

    def detect_mime_type(self, data: bytes) -> Optional[str]:
        try:
            with Image.open(io.BytesIO(data)) as image:
                image_format = image.format
        except (OSError, Image.DecompressionBombError):
            return None

        supported = self.SUPPORTED_FORMATS.get(image_format)
        return supported[0] if supported else None

    def extension_for(self, mime_type: str) -> str:
        return self.EXTENSIONS[mime_type]
