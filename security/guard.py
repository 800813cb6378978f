"""Bearer token authentication for protected routes"""

import logfire

from typing import Mapping, Protocol

from pydantic import ValidationError as PayloadValidationError

from schema.security import TokenPayload
from schema.users import Identity
from security.tokens import TokenCodec
from services.users import UserStore
from utils.errors import AppError, AuthError


class IdentityResolver(Protocol):
    """Looks up the identity a verified token refers to."""

    async def resolve(self, uid: str) -> Identity | None: ...


class UserIdentityResolver:
    """Resolves identities from the user-record store."""

    def __init__(self, store: UserStore):
        self.store = store

    async def resolve(self, uid: str) -> Identity | None:
        """Find the user with id `uid`.

        Args:
            uid (str): User ID taken from a verified token.

        Returns:
            Identity | None: The user's identity, None when no such user exists.
        """
        record = await self.store.find_user({"_id": uid})
        return Identity.from_record(record) if record else None


def extract_bearer_token(headers: Mapping[str, str]) -> str | None:
    """Get the token from an `Authorization: Bearer <token>` header.

    Args:
        headers (Mapping[str, str]): Request headers. Lookup is case-insensitive
            when the mapping is (as Starlette's `Headers` is).

    Returns:
        str | None: The token, None when the header is absent or malformed.
    """
    header = headers.get("authorization") or headers.get("Authorization")

    if not header or not header.startswith("Bearer "):
        return None

    token = header[len("Bearer "):]

    if not token or any(char.isspace() for char in token):
        return None

    return token


class RouteGuard:
    """Authenticates requests carrying an access token.

    Args:
        codec (TokenCodec): Codec used to verify access tokens.
        resolver (IdentityResolver): Lookup of the identity a token refers to.
        access_secret (str | None): Secret access tokens are signed with.
    """

    def __init__(self, codec: TokenCodec, resolver: IdentityResolver, access_secret: str | None):
        self.codec = codec
        self.resolver = resolver
        self.access_secret = access_secret

    async def authenticate(self, headers: Mapping[str, str]) -> Identity:
        """Authenticate a request from its headers.

        Args:
            headers (Mapping[str, str]): Request headers.

        Raises:
            AuthError: On a missing/malformed header, a token that fails verification,
                a payload without `uid`, or a `uid` that resolves to no user.

        Returns:
            Identity: The authenticated identity.
        """
        token = extract_bearer_token(headers)

        if token is None:
            raise AuthError("Authorization header missing or malformed")

        try:
            claims = await self.codec.verify(token, self.access_secret)
        except AppError as e:
            logfire.warning(f"Auth guard rejected token: {e.message}")
            raise AuthError("Authentication failed")

        try:
            payload = TokenPayload.model_validate(claims)
        except PayloadValidationError:
            raise AuthError("Invalid token payload")

        try:
            identity = await self.resolver.resolve(payload.uid)
        except Exception as e:
            logfire.error(f"Identity lookup failed for user {payload.uid}: {e}")
            raise AuthError("Authentication failed")

        if identity is None:
            raise AuthError("User not found")

        return identity
