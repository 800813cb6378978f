"""Process-wide configuration, read once from the environment at start-up."""

import os

from functools import lru_cache
from typing import Annotated, List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field


class Settings(BaseModel):
    """Configuration consumed by the auth core and the HTTP layer.

    Secrets are optional here on purpose: the token codec raises `ConfigError`
    when it is asked to sign or verify without one.
    """

    jwt_secret: Annotated[Optional[str], Field(default=None)]
    jwt_refresh_secret: Annotated[Optional[str], Field(default=None)]
    jwt_access_expires_in: Annotated[str, Field(default="15m")]
    jwt_expires_in: Annotated[str, Field(default="1d")]  # Lifetime of the single token issued on registration
    jwt_refresh_expires_in: Annotated[str, Field(default="7d")]
    jwt_algorithm: Annotated[str, Field(default="HS256")]

    salt_rounds: Annotated[int, Field(default=10, ge=4, le=31)]

    # Persist rotated refresh tokens with a conditional update instead of read-then-write
    strict_refresh_rotation: Annotated[bool, Field(default=False)]

    database_connection_string: Annotated[str, Field(default="mongodb://localhost:27017/backend-temp-db")]
    database_name: Annotated[str, Field(default="backend-temp-db")]

    allowed_origins: Annotated[List[str], Field(default=["http://localhost:3000"])]
    host: Annotated[str, Field(default="localhost")]
    port: Annotated[int, Field(default=5000)]

    logfire_token: Annotated[Optional[str], Field(default=None)]
    logfire_instrument: Annotated[bool, Field(default=False)]

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables (and `.env` when present).

        Unset or empty variables fall back to the field defaults.

        Returns:
            Settings: The validated settings.
        """
        load_dotenv()

        env = {
            "jwt_secret": os.getenv("JWT_SECRET"),
            "jwt_refresh_secret": os.getenv("JWT_REFRESH_SECRET"),
            "jwt_access_expires_in": os.getenv("JWT_ACCESS_EXPIRES_IN"),
            "jwt_expires_in": os.getenv("JWT_EXPIRES_IN"),
            "jwt_refresh_expires_in": os.getenv("JWT_REFRESH_EXPIRES_IN"),
            "jwt_algorithm": os.getenv("JWT_ALGORITHM"),
            "salt_rounds": os.getenv("SALT_ROUNDS"),
            "strict_refresh_rotation": os.getenv("STRICT_REFRESH_ROTATION"),
            "database_connection_string": os.getenv("MONGODB_URI"),
            "database_name": os.getenv("DATABASE_NAME"),
            "host": os.getenv("HOST"),
            "port": os.getenv("PORT"),
            "logfire_token": os.getenv("LOGFIRE_WRITE_TOKEN"),
            "logfire_instrument": os.getenv("LOGFIRE_INSTRUMENT"),
        }

        allowed_origins = os.getenv("ALLOWED_ORIGINS")
        if allowed_origins:
            env["allowed_origins"] = [
                origin.strip() for origin in allowed_origins.split(",") if origin.strip()
            ]

        return cls(**{key: value for key, value in env.items() if value not in (None, "")})


@lru_cache
def get_settings() -> Settings:
    """Get the process-wide settings instance.

    Returns:
        Settings: Settings built from the environment on first call.
    """
    return Settings.from_env()
