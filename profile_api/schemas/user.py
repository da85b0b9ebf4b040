"""User schemas."""
from pydantic import BaseModel, ConfigDict, field_validator


class UserOut(BaseModel):
    """Full user shape; columns missing from the database come back as null."""

    id: int | str | None = None
    email: str | None = None
    name: str | None = None
    picture: str | None = None
    google_sub: str | None = None
    username: str | None = None
    bio: str | None = None
    phone: str | None = None
    address_line1: str | None = None
    address_line2: str | None = None
    address_city: str | None = None
    address_state: str | None = None
    address_postal: str | None = None
    address_country: str | None = None
    role: str | None = None


class UserEnvelope(BaseModel):
    user: UserOut


class ProfileUpdate(BaseModel):
    """Editable profile fields. Omitted and null fields are left unchanged."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    username: str | None = None
    bio: str | None = None
    phone: str | None = None
    address_line1: str | None = None
    address_line2: str | None = None
    address_city: str | None = None
    address_state: str | None = None
    address_postal: str | None = None
    address_country: str | None = None

    @field_validator("address_country")
    @classmethod
    def upper_country(cls, v: str | None) -> str | None:
        return v.upper() if v else v
