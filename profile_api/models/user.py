"""App user model.

Describes the fully migrated users table. Deployed databases may lag behind it,
so the user store only relies on the columns it finds at runtime.
"""
from sqlalchemy import Column, Integer, String, Text

from profile_api.config import settings
from profile_api.models.base import Base


class AppUser(Base):
    __tablename__ = settings.users_table

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=True)
    picture = Column(String(1024), nullable=True)
    google_sub = Column(String(64), unique=True, nullable=True, index=True)
    username = Column(String(64), nullable=True)
    bio = Column(Text, nullable=True)
    phone = Column(String(32), nullable=True)
    address_line1 = Column(String(255), nullable=True)
    address_line2 = Column(String(255), nullable=True)
    address_city = Column(String(128), nullable=True)
    address_state = Column(String(128), nullable=True)
    address_postal = Column(String(32), nullable=True)
    address_country = Column(String(8), nullable=True)
    role = Column(String(16), nullable=False, default="user", server_default="user")
