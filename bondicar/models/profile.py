"""User profile models."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from bondicar.models.common import ContactInfo
from bondicar.utils.contact import digits_only


class Profile(BaseModel):
    """Public profile of a marketplace user."""

    user_id: str
    name: str = Field(..., min_length=1)
    phone: str = ""
    picture_url: str | None = None
    updated_at: datetime = Field(default_factory=datetime.now)

    @field_validator("phone")
    @classmethod
    def _normalize_phone(cls, value: str) -> str:
        return digits_only(value)

    def contact(self) -> ContactInfo:
        """Contact details copied onto the user's trips, bookings and offers."""
        return ContactInfo(name=self.name, phone=self.phone)


class ProfileUpdate(BaseModel):
    """Request body for creating or editing the caller's profile."""

    name: str = Field(..., min_length=1, max_length=80)
    phone: str = ""
    picture_url: str | None = Field(None, max_length=500)
