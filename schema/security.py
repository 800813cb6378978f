"""Defines schema of tokens and of token related requests"""

from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from typing import Annotated, Optional


class TokenPayload(BaseModel):
    """Model representing the claims carried by an access or refresh token."""

    model_config = ConfigDict(extra="allow")

    uid: Annotated[str, Field(min_length=1, description="ID of the user the token was issued to")]
    exp: Annotated[Optional[int], Field(default=None)]  # Expiry as a unix timestamp
    iat: Annotated[Optional[int], Field(default=None)]  # Issue time as a unix timestamp
    jti: Annotated[Optional[str], Field(default=None)]  # Unique token identifier


class TokenPair(BaseModel):
    """Model representing an access token and a refresh token issued together."""

    access_token: str
    refresh_token: str
    access_expires_at: Optional[datetime] = None
    refresh_expires_at: Optional[datetime] = None


class RefreshTokenRequest(BaseModel):
    """Model for refresh token request."""

    refresh_token: Annotated[
        Optional[str],
        Field(default=None, validation_alias=AliasChoices("refreshToken", "refresh_token")),
    ]
