"""Contains the schema definition for requests and responses of the auth endpoints
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from typing import Annotated, Optional


class RegisterRequest(BaseModel):
    """Describes the structure of the register request.

    Required fields are checked by the auth controller so that a missing field
    is reported as a 400 with a single message.
    """

    model_config = ConfigDict(extra="ignore")

    email: Optional[EmailStr] = None
    user_name: Annotated[Optional[str], Field(default=None, max_length=50)]
    password: Optional[str] = None
    first_name: Annotated[Optional[str], Field(default=None, max_length=50)]
    last_name: Annotated[Optional[str], Field(default=None, max_length=50)]
    bio: Annotated[Optional[str], Field(default=None, max_length=500)]
    avatar: Optional[str] = None


class LoginRequest(BaseModel):
    """Describes the structure of the login request. Either `email` or `user_name` identifies the user."""

    model_config = ConfigDict(extra="ignore")

    email: Optional[str] = None
    user_name: Optional[str] = None
    password: Optional[str] = None


class RegisterResponse(BaseModel):
    """Describes the structure of the register response."""

    message: str
    token: str


class AuthTokensResponse(BaseModel):
    """Describes the structure of the login and refresh responses."""

    message: str
    access_token: Annotated[str, Field(serialization_alias="accessToken")]
    refresh_token: Annotated[str, Field(serialization_alias="refreshToken")]


class MessageResponse(BaseModel):
    """Describes the structure of a response carrying only a message."""

    message: str
