"""User-record store backed by the `User` Beanie document."""

from datetime import datetime
from typing import Any, Mapping, Protocol

import pytz

from beanie import PydanticObjectId, UpdateResponse
from bson.errors import InvalidId

from models.users import User
from schema.users import UserRecord


class UserStore(Protocol):
    """Persistence operations the auth flow needs from a user-record store.

    Filters are Mongo-style mappings: field equality plus `$or` lists.
    """

    async def find_user(self, filter: Mapping[str, Any]) -> UserRecord | None: ...

    async def create_user(self, data: Mapping[str, Any]) -> UserRecord: ...

    async def update_user(self, id: str, patch: Mapping[str, Any]) -> UserRecord | None: ...

    async def update_user_where(
        self, filter: Mapping[str, Any], patch: Mapping[str, Any]
    ) -> UserRecord | None: ...


def to_mongo_filter(filter: Mapping[str, Any]) -> dict[str, Any]:
    """Translate a store filter into a MongoDB query.

    `id` is renamed to `_id` and string ids are converted to ObjectIds,
    including inside `$or` / `$and` branches.

    Args:
        filter (Mapping[str, Any]): The store filter.

    Raises:
        InvalidId: When an id value is not a valid ObjectId.

    Returns:
        dict[str, Any]: The MongoDB query.
    """
    query: dict[str, Any] = {}

    for key, value in filter.items():
        if key in ("$or", "$and"):
            query[key] = [to_mongo_filter(branch) for branch in value]
        elif key in ("id", "_id"):
            query["_id"] = value if isinstance(value, PydanticObjectId) else PydanticObjectId(str(value))
        else:
            query[key] = value

    return query


def to_record(user: User) -> UserRecord:
    """Convert a user document into a `UserRecord`.

    Args:
        user (User): The document to convert.

    Returns:
        UserRecord: The record.
    """
    return UserRecord(id=str(user.id), **user.model_dump(exclude={"id", "revision_id"}))


class BeanieUserStore:
    """`UserStore` implementation over MongoDB."""

    async def find_user(self, filter: Mapping[str, Any]) -> UserRecord | None:
        """Find a single user matching `filter`.

        Args:
            filter (Mapping[str, Any]): The store filter.

        Returns:
            UserRecord | None: The matching user, None if there is none or an id is malformed.
        """
        try:
            query = to_mongo_filter(filter)
        except (InvalidId, TypeError):
            return None

        user = await User.find_one(query)
        return to_record(user) if user else None

    async def create_user(self, data: Mapping[str, Any]) -> UserRecord:
        """Insert a new user.

        Args:
            data (Mapping[str, Any]): Field values of the new user.

        Raises:
            DuplicateKeyError: When the email or user name is already taken.

        Returns:
            UserRecord: The inserted user.
        """
        user = User(**data)
        await user.insert()
        return to_record(user)

    async def update_user(self, id: str, patch: Mapping[str, Any]) -> UserRecord | None:
        """Set fields on the user with the given id.

        Args:
            id (str): ID of the user to update.
            patch (Mapping[str, Any]): Field values to set.

        Returns:
            UserRecord | None: The updated user, None if no user has that id.
        """
        return await self.update_user_where({"_id": id}, patch)

    async def update_user_where(
        self, filter: Mapping[str, Any], patch: Mapping[str, Any]
    ) -> UserRecord | None:
        """Atomically set fields on the first user matching `filter`.

        Args:
            filter (Mapping[str, Any]): The store filter.
            patch (Mapping[str, Any]): Field values to set.

        Returns:
            UserRecord | None: The updated user, None if nothing matched.
        """
        try:
            query = to_mongo_filter(filter)
        except (InvalidId, TypeError):
            return None

        update = {**patch, "updated_at": datetime.now(pytz.utc)}

        user = await User.find_one(query).update(
            {"$set": update}, response_type=UpdateResponse.NEW_DOCUMENT
        )
        return to_record(user) if user else None
