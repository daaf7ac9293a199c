import re
from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from schemas.user_schema import EMAIL_MAX_LENGTH, EMAIL_PATTERN

SEX_VALUES = ("MALE", "FEMALE", "UNKNOWN")

# client vocabulary -> server vocabulary
STATUS_ALIASES = {"ACTIVE": "MISSING"}


class AnnouncementCreate(BaseModel):
    """CreateAnnouncementDto. Keys arrive in camelCase."""

    model_config = ConfigDict(
        strict=True,
        extra="forbid",
        str_strip_whitespace=True,
        alias_generator=to_camel,
    )

    pet_name: Optional[str] = None
    species: str = Field(min_length=1)
    breed: Optional[str] = None
    sex: str = Field(min_length=1)
    age: Optional[int] = Field(default=None, gt=0)
    description: Optional[str] = None
    microchip_number: Optional[str] = Field(default=None, pattern=r"^\d+$")
    location_latitude: float = Field(ge=-90, le=90, allow_inf_nan=False)
    location_longitude: float = Field(ge=-180, le=180, allow_inf_nan=False)
    email: Optional[str] = Field(default=None, max_length=EMAIL_MAX_LENGTH, pattern=EMAIL_PATTERN)
    phone: Optional[str] = None
    last_seen_date: str = Field(pattern=r"^\d{4}-\d{2}-\d{2}$")
    status: Literal["MISSING", "FOUND"]
    reward: Optional[str] = None

    @field_validator("sex")
    @classmethod
    def check_sex(cls, value: str) -> str:
        value = value.upper()
        if value not in SEX_VALUES:
            raise ValueError("sex must be one of MALE, FEMALE or UNKNOWN")
        return value

    @field_validator("phone")
    @classmethod
    def check_phone(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not re.search(r"\d", value):
            raise ValueError("invalid phone format")
        return value

    @field_validator("last_seen_date")
    @classmethod
    def check_last_seen_date(cls, value: str) -> str:
        try:
            seen = date.fromisoformat(value)
        except ValueError:
            raise ValueError("invalid date format (expected YYYY-MM-DD)") from None
        if seen > date.today():
            raise ValueError("lastSeenDate cannot be in the future")
        return value

    @field_validator("status", mode="before")
    @classmethod
    def map_status_alias(cls, value):
        if isinstance(value, str):
            return STATUS_ALIASES.get(value.strip().upper(), value.strip().upper())
        return value


class AnnouncementResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    pet_name: Optional[str] = None
    species: str
    breed: Optional[str] = None
    sex: str
    age: Optional[int] = None
    description: Optional[str] = None
    microchip_number: Optional[str] = None
    location_latitude: float
    location_longitude: float
    last_seen_date: str
    email: Optional[str] = None
    phone: Optional[str] = None
    photo_url: Optional[str] = None
    status: str
    reward: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AnnouncementCreatedResponse(AnnouncementResponse):
    # the only response that ever carries the plaintext management password
    management_password: str


class LocationFilter(BaseModel):
    lat: float
    lng: float
    range: int


class LocationQuery(BaseModel):
    """Raw ?lat=&lng=&range= query values, still unpaired."""

    lat: Optional[float] = Field(default=None, ge=-90, le=90, allow_inf_nan=False)
    lng: Optional[float] = Field(default=None, ge=-180, le=180, allow_inf_nan=False)
    # parsed as a number first so "1.5" and "abc" get different messages
    range: Optional[float] = Field(default=None, allow_inf_nan=False)

    @field_validator("range")
    @classmethod
    def check_range(cls, value: Optional[float]) -> Optional[int]:
        if value is None:
            return None
        if not value.is_integer():
            raise ValueError("Parameter 'range' must be an integer")
        if value == 0:
            raise ValueError("Parameter 'range' must be greater than zero")
        if value < 0:
            raise ValueError("Parameter 'range' must be a positive number")
        return int(value)
