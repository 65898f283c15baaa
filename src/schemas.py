from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from src.services.sanitize import sanitize_text

REQUIRED_FIELDS = ("firstname", "lastname", "email")
OPTIONAL_FIELDS = ("homephone", "mobile", "address", "birthday")


class ContactFields(BaseModel):
    """POST/PUT body. Every field is sanitized before anything else sees it."""

    firstname: Optional[str] = None
    lastname: Optional[str] = None
    email: Optional[str] = None
    homephone: Optional[str] = None
    mobile: Optional[str] = None
    address: Optional[str] = None
    birthday: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def sanitize(cls, value):
        if isinstance(value, str):
            return sanitize_text(value)
        return value

    def missing_required(self) -> list[str]:
        return [name for name in REQUIRED_FIELDS if not getattr(self, name)]

    def to_params(self) -> dict:
        params = {name: getattr(self, name) for name in REQUIRED_FIELDS}
        # Empty optional values are stored as NULL.
        params.update({name: getattr(self, name) or None for name in OPTIONAL_FIELDS})
        return params


class ContactResponse(BaseModel):
    id: int
    firstname: str
    lastname: str
    email: str
    homephone: Optional[str] = None
    mobile: Optional[str] = None
    address: Optional[str] = None
    birthday: Optional[str] = None
    created_at: datetime = Field(serialization_alias="createdAt")
    updated_at: datetime = Field(serialization_alias="updatedAt")


class DeleteResponse(BaseModel):
    success: bool = True
    message: str = "Contact deleted successfully"


class HealthResponse(BaseModel):
    status: str = "ok"
    timestamp: datetime


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    error: Optional[str] = None
