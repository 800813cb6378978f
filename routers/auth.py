"""
Auth router for registration, login, logout and access token refresh.
"""

from fastapi import APIRouter, Depends, status

from typing import Annotated, Optional

from controllers.auth import AuthController
from schema.auth import (
    AuthTokensResponse,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
)
from schema.security import RefreshTokenRequest
from schema.users import Identity
from security.helpers import get_auth_controller, get_current_user


router = APIRouter(
    prefix="/api/auth",
    tags=["Auth"],
)


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=RegisterResponse,
)
async def register(
    controller: Annotated[AuthController, Depends(get_auth_controller)],
    payload: Optional[RegisterRequest] = None,
):
    """Create a new user account.

    Returns a single token for the new user. Call `/login` to obtain an
    access/refresh token pair.

    ## Possible Errors
    - 400 Bad Request: email, user_name or password missing, or invalid email.
    - 409 Conflict: A user with this email or user name already exists.
    - 500 Internal Server Error: The user or the token could not be created.

    ## Error response structure
    ```json
    {
        "success": false,
        "message": "Sample error message"
    }
    ```
    """
    return await controller.register(payload or RegisterRequest())


@router.post(
    "/login",
    status_code=status.HTTP_200_OK,
    response_model=AuthTokensResponse,
)
async def login(
    controller: Annotated[AuthController, Depends(get_auth_controller)],
    payload: Optional[LoginRequest] = None,
):
    """Log in with an email or user name and a password.

    ## Possible Errors
    - 400 Bad Request: Password, or both email and user_name, missing.
    - 401 Unauthorized: Unknown user or wrong password.
    """
    return await controller.login(payload or LoginRequest())


@router.post(
    "/logout",
    status_code=status.HTTP_200_OK,
    response_model=MessageResponse,
)
async def logout(
    controller: Annotated[AuthController, Depends(get_auth_controller)],
    current_user: Annotated[Identity, Depends(get_current_user)],
):
    """Log out the current user. Requires `Authorization: Bearer <access token>`.

    The stored refresh token is cleared; access tokens already issued stay
    valid until they expire.
    """
    return await controller.logout(current_user)


@router.post(
    "/refresh-token",
    status_code=status.HTTP_200_OK,
    response_model=AuthTokensResponse,
)
async def refresh_token(
    controller: Annotated[AuthController, Depends(get_auth_controller)],
    payload: Optional[RefreshTokenRequest] = None,
):
    """Exchange a refresh token for a new access/refresh token pair.

    The presented refresh token is invalidated by the exchange.

    ## Possible Errors
    - 400 Bad Request: No refresh token sent.
    - 401 Unauthorized: Refresh token invalid or expired.
    - 403 Forbidden: Refresh token was superseded or revoked.
    """
    return await controller.refresh(payload or RefreshTokenRequest())
