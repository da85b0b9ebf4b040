"""Auth schemas."""
from pydantic import BaseModel, ConfigDict, Field


class GoogleLoginRequest(BaseModel):
    """Tokens handed over by the Google Identity Services widget."""

    model_config = ConfigDict(populate_by_name=True)

    id_token: str | None = Field(default=None, alias="idToken")
    access_token: str | None = Field(default=None, alias="accessToken")


class LogoutResponse(BaseModel):
    ok: bool = True
