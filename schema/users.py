"""Contains the schema definition of user records and authenticated identities
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from typing import Annotated, Optional

from models.helpers import UserRole


class UserRecord(BaseModel):
    """Store-facing view of a user document."""

    model_config = ConfigDict(extra="ignore")

    id: Annotated[str, Field(description="Unique identifier for the user")]
    user_name: str
    email: str
    password: str  # bcrypt hash
    role: Annotated[UserRole, Field(default=UserRole.CUSTOMER)]
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    bio: Optional[str] = None
    avatar: Optional[str] = None
    is_email_verified: bool = False
    refresh_token: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Identity(BaseModel):
    """Authenticated user attached to a request. Never carries secrets."""

    id: str
    user_name: str
    email: str
    role: UserRole
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    @classmethod
    def from_record(cls, record: UserRecord) -> "Identity":
        """Build an identity from a user record, dropping the password hash and refresh token.

        Args:
            record (UserRecord): The stored user.

        Returns:
            Identity: The public identity of the user.
        """
        return cls(**record.model_dump(include=set(cls.model_fields)))
