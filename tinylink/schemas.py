import re
from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

CODE_PATTERN = re.compile(r"[A-Za-z0-9]{6,8}")
AVAILABLE_MESSAGE = "This code is not used yet. You can use it."


def is_valid_code(code: str) -> bool:
    return CODE_PATTERN.fullmatch(code) is not None


def as_utc(value: datetime | None) -> datetime | None:
    """Normalize to an aware UTC datetime; naive values are taken as UTC.

    SQLite hands timestamps back without an offset, so everything is stored
    and reported in UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class CamelModel(BaseModel):
    """Base for everything on the wire: snake_case in Python, camelCase in JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class LinkCreate(CamelModel):
    code: str
    original_url: str
    last_accessed_at: datetime | None = None

    @field_validator("code")
    @classmethod
    def check_code(cls, value: str) -> str:
        value = value.strip()
        if not is_valid_code(value):
            raise PydanticCustomError(
                "code_format",
                "must be 6-8 characters long and contain only letters and numbers (A-Z, a-z, 0-9)",
            )
        return value

    @field_validator("original_url")
    @classmethod
    def check_original_url(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise PydanticCustomError("url_empty", "is required and must be a non-empty string")
        return value

    @field_validator("last_accessed_at")
    @classmethod
    def check_last_accessed_at(cls, value: datetime | None) -> datetime | None:
        return as_utc(value)


class LinkOut(CamelModel):
    id: int
    code: str
    original_url: str
    created_at: datetime
    clicks: int
    last_accessed_at: datetime | None = None
    is_active: bool

    @field_validator("created_at", "last_accessed_at")
    @classmethod
    def attach_utc(cls, value: datetime | None) -> datetime | None:
        return as_utc(value)


class LinkStats(LinkOut):
    exists: Literal[True] = True


class CodeAvailable(CamelModel):
    exists: Literal[False] = False
    message: str = AVAILABLE_MESSAGE


class Availability(CamelModel):
    available: bool


class QRCodeOut(CamelModel):
    qr_base64: str


class Health(CamelModel):
    status: str
    version: str
    timestamp: datetime
    environment: str
    database: str
    uptime: float
