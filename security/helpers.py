"""FastAPI dependencies wiring the auth core together, plus request authentication helpers
"""
from functools import lru_cache

from fastapi import Depends, Request, status

from typing import Annotated, Callable

from controllers.auth import AuthController
from models.helpers import UserRole
from schema.users import Identity
from security.guard import RouteGuard, UserIdentityResolver
from security.password import PasswordHasher
from security.token_pair import TokenPairIssuer
from security.tokens import TokenCodec
from services.users import BeanieUserStore, UserStore
from utils.config import Settings, get_settings
from utils.errors import AuthError
from utils.http_status import status_message


@lru_cache
def get_token_codec() -> TokenCodec:
    return TokenCodec(algorithm=get_settings().jwt_algorithm)


@lru_cache
def get_password_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=get_settings().salt_rounds)


def get_token_pair_issuer(
    codec: Annotated[TokenCodec, Depends(get_token_codec)],
) -> TokenPairIssuer:
    return TokenPairIssuer(codec)


def get_user_store() -> UserStore:
    return BeanieUserStore()


def get_route_guard(
    codec: Annotated[TokenCodec, Depends(get_token_codec)],
    store: Annotated[UserStore, Depends(get_user_store)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> RouteGuard:
    """Build the guard protecting routes with access tokens.

    Returns:
        RouteGuard: Guard verifying against `JWT_SECRET` and resolving users from the store.
    """
    return RouteGuard(codec, UserIdentityResolver(store), settings.jwt_secret)


def get_auth_controller(
    store: Annotated[UserStore, Depends(get_user_store)],
    codec: Annotated[TokenCodec, Depends(get_token_codec)],
    issuer: Annotated[TokenPairIssuer, Depends(get_token_pair_issuer)],
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> AuthController:
    return AuthController(store, codec, issuer, hasher, settings)


async def get_current_user(
    request: Request,
    guard: Annotated[RouteGuard, Depends(get_route_guard)],
) -> Identity:
    """Authenticate the request and attach the identity to `request.state.user`.

    Args:
        request (Request): The incoming request.
        guard (RouteGuard): The route guard.

    Raises:
        AuthError: When the request carries no valid access token for an existing user.

    Returns:
        Identity: The authenticated user.
    """
    identity = await guard.authenticate(request.headers)
    request.state.user = identity
    return identity


def authorize_roles(*roles: UserRole | str) -> Callable:
    """Create a dependency allowing only users with one of `roles`.

    Must run after `get_current_user`, e.g.
    `dependencies=[Depends(get_current_user), Depends(authorize_roles(UserRole.ADMIN))]`.

    Args:
        *roles (UserRole | str): Allowed roles.

    Returns:
        Callable: The dependency.
    """
    allowed_roles = {UserRole(role) for role in roles}

    async def role_checker(request: Request) -> Identity:
        identity: Identity | None = getattr(request.state, "user", None)

        if identity is None:
            raise AuthError(status_message(status.HTTP_401_UNAUTHORIZED))

        if identity.role not in allowed_roles:
            raise AuthError(
                f'Access denied for role "{identity.role.value}". Insufficient permissions.',
                status.HTTP_403_FORBIDDEN,
            )

        return identity

    return role_checker
