"""Signing, verification and unverified decoding of compact JWTs.

Tokens are HS256 (by default) JWTs carrying the caller's payload plus the
registered claims `iat`, `jti` and, when a lifetime is given, `exp`.
"""

import re
import time
import uuid

import logfire

from datetime import timedelta
from typing import Any, Mapping

from jose import JWTError, jwt
from starlette.concurrency import run_in_threadpool

from utils.errors import ConfigError, InternalError, InvalidTokenError


_DURATION_PATTERN = re.compile(
    r"^(?P<value>-?(?:\d+)?\.?\d+) *"
    r"(?P<unit>milliseconds?|msecs?|ms|seconds?|secs?|s|minutes?|mins?|m"
    r"|hours?|hrs?|h|days?|d|weeks?|w|years?|yrs?|y)?$",
    re.IGNORECASE,
)

_UNIT_SECONDS = {
    "ms": 0.001,
    "s": 1,
    "m": 60,
    "h": 60 * 60,
    "d": 60 * 60 * 24,
    "w": 60 * 60 * 24 * 7,
    "y": 60 * 60 * 24 * 365.25,
}


def _unit_key(unit: str) -> str:
    unit = unit.lower()
    if unit.startswith(("ms", "msec", "millisecond")):
        return "ms"
    if unit.startswith("mi"):
        return "m"  # min, mins, minute, minutes
    if unit.startswith(("hr", "hour")):
        return "h"
    if unit.startswith(("yr", "year")):
        return "y"
    return unit[0]


def parse_expires_in(value: str | int | float | timedelta) -> float:
    """Convert a token lifetime into seconds.

    Accepts plain numbers (seconds), `timedelta` objects and duration strings
    such as `"15m"`, `"7d"`, `"2 hours"` or `"500ms"`. A string without a unit
    is read as seconds.

    Args:
        value (str | int | float | timedelta): The lifetime to convert.

    Raises:
        ValueError: If the value cannot be read as a duration.

    Returns:
        float: The lifetime in seconds. May be zero or negative.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid token lifetime: {value!r}")
    if isinstance(value, timedelta):
        return value.total_seconds()
    if isinstance(value, (int, float)):
        return float(value)
    if not isinstance(value, str):
        raise ValueError(f"Invalid token lifetime: {value!r}")

    match = _DURATION_PATTERN.match(value.strip())
    if not match:
        raise ValueError(f"Invalid token lifetime: {value!r}")

    amount = float(match.group("value"))
    unit = match.group("unit")

    if unit is None:
        return amount

    return amount * _UNIT_SECONDS[_unit_key(unit)]


class TokenCodec:
    """Signs and verifies tokens with a secret chosen by the caller.

    Args:
        algorithm (str, optional): JWS algorithm. Defaults to "HS256".
    """

    def __init__(self, algorithm: str = "HS256"):
        self.algorithm = algorithm

    async def sign(
        self,
        payload: Mapping[str, Any],
        secret: str | None,
        expires_in: str | int | float | timedelta | None = None,
    ) -> str:
        """Create a signed token embedding `payload`.

        Args:
            payload (Mapping[str, Any]): JSON serializable claims to embed.
            secret (str | None): Signing secret.
            expires_in (str | int | float | timedelta | None, optional): Lifetime relative to now.
                No `exp` claim is embedded when omitted. Defaults to None.

        Raises:
            ConfigError: When the secret is missing or the lifetime cannot be parsed.
            InternalError: When the payload cannot be encoded.

        Returns:
            str: The compact signed token.
        """
        if not secret:
            raise ConfigError("JWT secret is not defined")

        issued_at = int(time.time())
        claims: dict[str, Any] = {"iat": issued_at, "jti": uuid.uuid4().hex}
        claims.update(payload)

        if expires_in is not None:
            if "exp" in payload:
                raise InternalError("Failed to generate token")
            try:
                lifetime = parse_expires_in(expires_in)
            except ValueError as e:
                raise ConfigError(str(e))
            claims["exp"] = int(issued_at + lifetime)

        try:
            return await run_in_threadpool(
                jwt.encode, claims, secret, algorithm=self.algorithm
            )
        except (JWTError, TypeError, ValueError) as e:
            logfire.error(f"Token generation failed: {e}")
            raise InternalError("Failed to generate token")

    async def verify(
        self, token: str | None, secret: str | None, ignore_expiration: bool = False
    ) -> dict[str, Any]:
        """Verify a token's signature and expiry and return its claims.

        Args:
            token (str | None): The token to verify.
            secret (str | None): Secret the token is expected to be signed with.
            ignore_expiration (bool, optional): Accept expired tokens. Defaults to False.

        Raises:
            ConfigError: When the secret is missing.
            InvalidTokenError: When the token is missing, malformed, badly signed or expired.

        Returns:
            dict[str, Any]: The verified claims.
        """
        if not secret:
            raise ConfigError("JWT secret is not defined")

        if not token or not isinstance(token, str):
            raise InvalidTokenError("Token is required")

        try:
            claims = await run_in_threadpool(
                jwt.decode,
                token,
                secret,
                algorithms=[self.algorithm],
                options={
                    "verify_exp": False,
                    "verify_aud": False,
                    "verify_sub": False,
                    "verify_jti": False,
                },
            )
        except JWTError as e:
            logfire.warning(f"Token verification failed: {e}")
            raise InvalidTokenError("Invalid or expired token")

        if not ignore_expiration and "exp" in claims:
            exp = claims["exp"]
            if isinstance(exp, bool) or not isinstance(exp, (int, float)):
                raise InvalidTokenError("Invalid or expired token")
            #* A token is expired from the second its `exp` is reached
            if time.time() >= exp:
                logfire.warning("Token verification failed: token expired")
                raise InvalidTokenError("Invalid or expired token")

        return claims

    def decode(self, token: str | None) -> dict[str, Any] | None:
        """Read a token's claims WITHOUT verifying its signature.

        Only for reading metadata such as `exp`; never use the result to
        authenticate anyone.

        Args:
            token (str | None): The token to read.

        Returns:
            dict[str, Any] | None: The claims, or None when the token is malformed.
        """
        if not token or not isinstance(token, str):
            return None

        try:
            claims = jwt.get_unverified_claims(token)
        except JWTError:
            return None

        return claims if isinstance(claims, dict) else None
