import pytz

from datetime import datetime

from pydantic import Field, EmailStr
from typing import Annotated, Optional

from beanie import Document, Indexed

from .helpers import UserRole


class User(Document):
    """User account stored in the `users` collection.
    """
    user_name: Annotated[str, Indexed(unique=True), Field(min_length=1, max_length=50)]
    first_name: Annotated[Optional[str], Field(default=None, max_length=50)]
    last_name: Annotated[Optional[str], Field(default=None, max_length=50)]
    email: Annotated[EmailStr, Indexed(unique=True), Field(max_length=254)]
    password: Annotated[str, Field()]  # bcrypt hash, never the plain text password
    is_email_verified: Annotated[bool, Field(default=False)]
    role: Annotated[UserRole, Field(default=UserRole.CUSTOMER)]
    bio: Annotated[Optional[str], Field(default=None, max_length=500)]
    avatar: Annotated[Optional[str], Field(default=None)]  # Avatar image URL
    refresh_token: Annotated[Optional[str], Field(default=None)]  # Only currently valid refresh token
    created_at: Annotated[datetime, Field(default_factory=lambda: datetime.now(pytz.utc))]
    updated_at: Annotated[datetime, Field(default_factory=lambda: datetime.now(pytz.utc))]

    class Settings:
        """Beanie document settings."""
        name = "users"
        use_revision = False
