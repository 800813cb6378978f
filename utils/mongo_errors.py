"""Turns MongoDB errors into client-facing status codes and messages."""

from fastapi import status

from bson.errors import InvalidId
from pymongo.errors import DuplicateKeyError


# Display names of unique fields in duplicate-key messages
FRIENDLY_FIELD_NAMES = {
    "user_name": "Username",
    "email": "Email address",
}


def format_mongo_error(error: Exception) -> tuple[int, str]:
    """Map a database error to a status code and message.

    Args:
        error (Exception): Error raised by pymongo, bson or Beanie.

    Returns:
        tuple[int, str]: The HTTP status code and the message to return.
    """
    if isinstance(error, DuplicateKeyError):
        details = error.details or {}
        key_pattern = details.get("keyPattern") or {}
        key_value = details.get("keyValue") or {}

        field = next(iter(key_pattern), "field")
        value = key_value.get(field, "")
        friendly_name = FRIENDLY_FIELD_NAMES.get(field, field)

        return status.HTTP_400_BAD_REQUEST, f'{friendly_name} "{value}" already exists.'

    if isinstance(error, InvalidId):
        return status.HTTP_400_BAD_REQUEST, "Invalid id format."

    return status.HTTP_500_INTERNAL_SERVER_ERROR, "An unexpected database error occurred."
