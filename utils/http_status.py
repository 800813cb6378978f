"""Standard messages for the HTTP status codes the API responds with."""

from fastapi import status


STATUS_MESSAGES: dict[int, str] = {
    status.HTTP_200_OK: "Request completed successfully.",
    status.HTTP_201_CREATED: "Resource created successfully.",
    status.HTTP_400_BAD_REQUEST: "Invalid request. Please check your input.",
    status.HTTP_401_UNAUTHORIZED: "Authentication required or session expired.",
    status.HTTP_403_FORBIDDEN: "You do not have permission to access this resource.",
    status.HTTP_404_NOT_FOUND: "Requested resource not found.",
    status.HTTP_409_CONFLICT: "Request could not be completed due to a conflict.",
    status.HTTP_500_INTERNAL_SERVER_ERROR: "An unexpected server error occurred.",
    status.HTTP_503_SERVICE_UNAVAILABLE: "The server is not ready to handle the request.",
}


def status_message(status_code: int) -> str:
    """Get the standard message for `status_code`.

    Args:
        status_code (int): HTTP status code.

    Returns:
        str: The standard message, or an empty string for codes the API never uses.
    """
    return STATUS_MESSAGES.get(status_code, "")
