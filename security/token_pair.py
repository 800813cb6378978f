"""Issues an access token and a refresh token together."""

import asyncio

import logfire

from datetime import datetime, timedelta, timezone
from typing import Any, Mapping

from schema.security import TokenPair
from security.tokens import TokenCodec
from utils.errors import AppError, ConfigError, InternalError


class TokenPairIssuer:
    """Builds access/refresh token pairs from one payload.

    The two tokens are signed with independent secrets and lifetimes. Nothing
    is persisted here; storing the refresh token is the caller's job.
    """

    def __init__(self, codec: TokenCodec):
        self.codec = codec

    async def issue(
        self,
        payload: Mapping[str, Any],
        access_secret: str | None,
        refresh_secret: str | None,
        access_expires_in: str | int | float | timedelta | None = "15m",
        refresh_expires_in: str | int | float | timedelta | None = "7d",
    ) -> TokenPair:
        """Sign an access token and a refresh token concurrently.

        Args:
            payload (Mapping[str, Any]): Claims embedded in both tokens. Keep it minimal, e.g. `{"uid": ...}`.
            access_secret (str | None): Secret for the access token.
            refresh_secret (str | None): Secret for the refresh token.
            access_expires_in (str | int | float | timedelta | None, optional): Access token lifetime. Defaults to "15m".
            refresh_expires_in (str | int | float | timedelta | None, optional): Refresh token lifetime. Defaults to "7d".

        Raises:
            ConfigError: When either secret is missing.
            InternalError: When signing fails for any other reason.

        Returns:
            TokenPair: Both tokens and their expiry timestamps (None when no `exp` was embedded).
        """
        if not access_secret:
            raise ConfigError("Access token secret is not defined")
        if not refresh_secret:
            raise ConfigError("Refresh token secret is not defined")

        try:
            access_token, refresh_token = await asyncio.gather(
                self.codec.sign(payload, access_secret, access_expires_in),
                self.codec.sign(payload, refresh_secret, refresh_expires_in),
            )
        except AppError:
            raise
        except Exception as e:
            logfire.error(f"Failed to generate auth tokens: {e}")
            raise InternalError("Failed to generate auth tokens")

        return TokenPair(
            access_token=access_token,
            refresh_token=refresh_token,
            access_expires_at=self._expires_at(access_token),
            refresh_expires_at=self._expires_at(refresh_token),
        )

    def _expires_at(self, token: str) -> datetime | None:
        """Read the expiry of a freshly issued token without verifying it.

        Args:
            token (str): A token produced by `self.codec`.

        Returns:
            datetime | None: The UTC expiry, or None when the token carries no `exp`.
        """
        claims = self.codec.decode(token) or {}
        exp = claims.get("exp")

        if exp is None:
            return None

        return datetime.fromtimestamp(exp, tz=timezone.utc)
