"""Database models."""
from profile_api.models.base import Base
from profile_api.models.user import AppUser

__all__ = [
    "Base",
    "AppUser",
]
