"""
Pytest configuration for the auth API tests.
Provides fixed secrets, an in-memory user store and an HTTP client over the app.
"""

import os

import pytest
import pytest_asyncio

from datetime import datetime
from typing import Any, Mapping

import pytz

from bson import ObjectId
from httpx import ASGITransport, AsyncClient
from pymongo.errors import DuplicateKeyError

# Set up test environment variables before the app reads them
os.environ.setdefault("JWT_SECRET", "test-access-secret")
os.environ.setdefault("JWT_REFRESH_SECRET", "test-refresh-secret")
os.environ.setdefault("SALT_ROUNDS", "4")

from controllers.auth import AuthController  # noqa: E402
from schema.users import UserRecord  # noqa: E402
from security.password import PasswordHasher  # noqa: E402
from security.token_pair import TokenPairIssuer  # noqa: E402
from security.tokens import TokenCodec  # noqa: E402
from utils.config import Settings  # noqa: E402


ACCESS_SECRET = "test-access-secret"
REFRESH_SECRET = "test-refresh-secret"

UNIQUE_FIELDS = ("user_name", "email")


class InMemoryUserStore:
    """`UserStore` keeping users in a dict, with the same filter semantics as the Mongo store."""

    def __init__(self):
        self.users: dict[str, dict[str, Any]] = {}

    def _matches(self, user: Mapping[str, Any], filter: Mapping[str, Any]) -> bool:
        for key, value in filter.items():
            if key == "$or":
                if not any(self._matches(user, branch) for branch in value):
                    return False
            elif key == "$and":
                if not all(self._matches(user, branch) for branch in value):
                    return False
            elif key in ("id", "_id"):
                if user["id"] != str(value):
                    return False
            elif user.get(key) != value:
                return False
        return True

    def _first(self, filter: Mapping[str, Any]) -> dict[str, Any] | None:
        return next((user for user in self.users.values() if self._matches(user, filter)), None)

    async def find_user(self, filter: Mapping[str, Any]) -> UserRecord | None:
        user = self._first(filter)
        return UserRecord(**user) if user else None

    async def create_user(self, data: Mapping[str, Any]) -> UserRecord:
        for field in UNIQUE_FIELDS:
            if any(user.get(field) == data.get(field) for user in self.users.values()):
                raise DuplicateKeyError(
                    f"E11000 duplicate key error collection: users index: {field}_1",
                    11000,
                    {"keyPattern": {field: 1}, "keyValue": {field: data.get(field)}},
                )

        now = datetime.now(pytz.utc)
        user = {
            "role": "CUSTOMER",
            "refresh_token": None,
            **data,
            "id": str(ObjectId()),
            "created_at": now,
            "updated_at": now,
        }
        self.users[user["id"]] = user
        return UserRecord(**user)

    async def update_user(self, id: str, patch: Mapping[str, Any]) -> UserRecord | None:
        return await self.update_user_where({"_id": id}, patch)

    async def update_user_where(
        self, filter: Mapping[str, Any], patch: Mapping[str, Any]
    ) -> UserRecord | None:
        user = self._first(filter)
        if user is None:
            return None
        user.update(patch, updated_at=datetime.now(pytz.utc))
        return UserRecord(**user)

    def get(self, id: str) -> dict[str, Any]:
        return self.users[id]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        jwt_secret=ACCESS_SECRET,
        jwt_refresh_secret=REFRESH_SECRET,
        jwt_access_expires_in="15m",
        jwt_expires_in="1d",
        jwt_refresh_expires_in="7d",
        salt_rounds=4,
    )


@pytest.fixture
def codec() -> TokenCodec:
    return TokenCodec()


@pytest.fixture(scope="session")
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest.fixture
def issuer(codec: TokenCodec) -> TokenPairIssuer:
    return TokenPairIssuer(codec)


@pytest.fixture
def store() -> InMemoryUserStore:
    return InMemoryUserStore()


@pytest.fixture
def controller(store, codec, issuer, hasher, settings) -> AuthController:
    return AuthController(store, codec, issuer, hasher, settings)


@pytest.fixture
def app(store, hasher, settings):
    """The FastAPI app with the user store, settings and hasher overridden."""
    from main import app
    from security.helpers import get_password_hasher, get_user_store
    from utils.config import get_settings

    app.dependency_overrides[get_user_store] = lambda: store
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_password_hasher] = lambda: hasher

    yield app

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(app):
    """HTTP client over the app. The lifespan (MongoDB connection) is not run."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
