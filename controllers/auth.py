"""Controller for registration, login, logout and refresh-token rotation"""

import hmac

import logfire

from fastapi import status

from pymongo.errors import DuplicateKeyError
from pydantic import ValidationError as PayloadValidationError

from schema.auth import (
    AuthTokensResponse,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
)
from schema.security import RefreshTokenRequest, TokenPair, TokenPayload
from schema.users import Identity
from security.password import PasswordHasher
from security.token_pair import TokenPairIssuer
from security.tokens import TokenCodec
from services.users import UserStore
from utils.config import Settings
from utils.errors import (
    AppError,
    AuthError,
    ConflictError,
    InternalError,
    ValidationError,
)
from utils.http_status import status_message


INVALID_CREDENTIALS = "Invalid email, username or password credentials."
INVALID_REFRESH_TOKEN = "Invalid refresh token."
EXPIRED_REFRESH_TOKEN = "Invalid or expired refresh token."

# Fields a caller may set on their own account at registration
PROFILE_FIELDS = {"first_name", "last_name", "bio", "avatar"}


class AuthController:
    """Orchestrates the authentication lifecycle of a user.

    The stored `refresh_token` of a user is the only state this controller
    changes: it is set on login, overwritten on every refresh (rotation) and
    cleared on logout. Only one refresh token per user is valid at a time.
    """

    def __init__(
        self,
        store: UserStore,
        codec: TokenCodec,
        issuer: TokenPairIssuer,
        hasher: PasswordHasher,
        settings: Settings,
    ):
        self.store = store
        self.codec = codec
        self.issuer = issuer
        self.hasher = hasher
        self.settings = settings

    async def register(self, body: RegisterRequest) -> RegisterResponse:
        """Create a new user and return a single short-lived token.

        The token is not a pair; clients call login to start a session.

        Args:
            body (RegisterRequest): Registration details.

        Raises:
            ValidationError: When email, user_name or password is missing.
            ConflictError: When a user with the same email or user name exists.
            InternalError: When the user cannot be created or the token cannot be generated.

        Returns:
            RegisterResponse: Success message and the token.
        """
        if not body.email or not body.user_name or not body.password:
            raise ValidationError("email, user_name and password are required.")

        with logfire.span(f"Registering new user: {body.user_name}"):
            try:
                existing_user = await self.store.find_user(
                    {"$or": [{"email": body.email}, {"user_name": body.user_name}]}
                )
            except Exception as e:
                logfire.error(f"User lookup failed during registration of {body.user_name}: {e}")
                raise InternalError(f"{status_message(500)} Failed to create user.")

            if existing_user:
                logfire.warning(f"Attempt to register duplicate user: {body.user_name}")
                raise ConflictError("A user with this email or user name already exists.")

            hashed_password = await self.hasher.hash(body.password)

            new_user_data = {
                **body.model_dump(include=PROFILE_FIELDS, exclude_none=True),
                "email": body.email,
                "user_name": body.user_name,
                "password": hashed_password,
            }

            try:
                new_user = await self.store.create_user(new_user_data)
            except DuplicateKeyError:
                logfire.warning(f"Duplicate key when creating user: {body.user_name}")
                raise ConflictError("A user with this email or user name already exists.")
            except Exception as e:
                logfire.error(f"Failed to create user {body.user_name}: {e}")
                raise InternalError(f"{status_message(500)} Failed to create user.")

            logfire.info(f"Saved new user to database with ID: {new_user.id}")

            try:
                token = await self.codec.sign(
                    {"uid": new_user.id},
                    self.settings.jwt_secret,
                    self.settings.jwt_expires_in,
                )
            except AppError as e:
                logfire.error(f"Token generation failed for new user {new_user.id}: {e.message}")
                raise InternalError(f"{status_message(500)} Failed to generate token.")

            return RegisterResponse(message=status_message(201), token=token)

    async def login(self, body: LoginRequest) -> AuthTokensResponse:
        """Check credentials, issue a token pair and store the refresh token.

        Args:
            body (LoginRequest): Email or user name, and password.

        Raises:
            ValidationError: When the password, or both email and user name, are missing.
            AuthError: When no user matches or the password is wrong (same message for both).
            InternalError: When the lookup, token generation or persistence fails.

        Returns:
            AuthTokensResponse: Success message, access token and refresh token.
        """
        if not body.password:
            raise ValidationError("Password is required.")
        if not body.email and not body.user_name:
            raise ValidationError("Email or username is required.")

        conditions = []
        if body.email:
            conditions.append({"email": body.email})
        if body.user_name:
            conditions.append({"user_name": body.user_name})

        try:
            user = await self.store.find_user({"$or": conditions})
        except Exception as e:
            logfire.error(f"User lookup failed during login: {e}")
            raise InternalError(status_message(500))

        if user is None:
            await self.hasher.compare_dummy(body.password)
            raise AuthError(INVALID_CREDENTIALS)

        if not await self.hasher.compare(body.password, user.password):
            logfire.warning(f"Failed login attempt for user {user.id}")
            raise AuthError(INVALID_CREDENTIALS)

        tokens = await self._issue_tokens(user.id)

        try:
            await self.store.update_user(user.id, {"refresh_token": tokens.refresh_token})
        except Exception as e:
            logfire.error(f"Failed to store refresh token for user {user.id}: {e}")
            raise InternalError(f"{status_message(500)} Failed to start session.")

        logfire.info(f"User {user.id} logged in successfully")

        return AuthTokensResponse(
            message=f"{status_message(200)} Login successful.",
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
        )

    async def logout(self, identity: Identity | None) -> MessageResponse:
        """Clear the stored refresh token of the authenticated user.

        Args:
            identity (Identity | None): Identity attached by the route guard.

        Raises:
            AuthError: When there is no authenticated identity.
            InternalError: When the record cannot be updated.

        Returns:
            MessageResponse: Success message.
        """
        if identity is None:
            raise AuthError("Not authenticated.")

        try:
            await self.store.update_user(identity.id, {"refresh_token": None})
        except Exception as e:
            logfire.error(f"Failed to clear refresh token for user {identity.id}: {e}")
            raise InternalError(status_message(500))

        logfire.info(f"User {identity.id} logged out")

        return MessageResponse(message=f"{status_message(200)} Logout successful.")

    async def refresh(self, body: RefreshTokenRequest) -> AuthTokensResponse:
        """Exchange the current refresh token for a new token pair (rotation).

        Any failure while verifying the token or looking up its user is a 401.
        A verified token that is not the one stored on the user is a 403: it
        was superseded by a later login/refresh or cleared by logout.

        Args:
            body (RefreshTokenRequest): The refresh token.

        Raises:
            ValidationError: When no refresh token was sent.
            AuthError: 401 when verification fails, 403 when the token is stale.
            InternalError: When the new pair cannot be generated or stored.

        Returns:
            AuthTokensResponse: Success message, new access token and new refresh token.
        """
        refresh_token = body.refresh_token

        if not refresh_token:
            raise ValidationError("Refresh token required.")

        try:
            claims = await self.codec.verify(refresh_token, self.settings.jwt_refresh_secret)
            payload = TokenPayload.model_validate(claims)
            user = await self.store.find_user({"_id": payload.uid})
        except (AppError, PayloadValidationError) as e:
            logfire.warning(f"Refresh token rejected: {e}")
            raise AuthError(EXPIRED_REFRESH_TOKEN)
        except Exception as e:
            logfire.error(f"Refresh token verification failed unexpectedly: {e}")
            raise AuthError(EXPIRED_REFRESH_TOKEN)

        if user is None or not user.refresh_token or not hmac.compare_digest(
            user.refresh_token.encode(), refresh_token.encode()
        ):
            logfire.warning(f"Stale refresh token presented for user {payload.uid}")
            raise AuthError(INVALID_REFRESH_TOKEN, status.HTTP_403_FORBIDDEN)

        tokens = await self._issue_tokens(user.id)

        if self.settings.strict_refresh_rotation:
            try:
                updated_user = await self.store.update_user_where(
                    {"_id": user.id, "refresh_token": refresh_token},
                    {"refresh_token": tokens.refresh_token},
                )
            except Exception as e:
                logfire.error(f"Failed to rotate refresh token for user {user.id}: {e}")
                raise InternalError(status_message(500))

            if updated_user is None:
                logfire.warning(f"Concurrent refresh lost the rotation race for user {user.id}")
                raise AuthError(INVALID_REFRESH_TOKEN, status.HTTP_403_FORBIDDEN)
        else:
            try:
                await self.store.update_user(user.id, {"refresh_token": tokens.refresh_token})
            except Exception as e:
                logfire.error(f"Failed to rotate refresh token for user {user.id}: {e}")
                raise InternalError(status_message(500))

        logfire.info(f"Tokens refreshed for user {user.id}")

        return AuthTokensResponse(
            message="Access token refreshed successfully.",
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
        )

    async def _issue_tokens(self, user_id: str) -> TokenPair:
        """Issue an access/refresh pair for a user.

        Args:
            user_id (str): ID of the user.

        Raises:
            InternalError: When the pair cannot be generated.

        Returns:
            TokenPair: The new tokens.
        """
        try:
            return await self.issuer.issue(
                {"uid": user_id},
                self.settings.jwt_secret,
                self.settings.jwt_refresh_secret,
                self.settings.jwt_access_expires_in,
                self.settings.jwt_refresh_expires_in,
            )
        except AppError as e:
            logfire.error(f"Token pair generation failed for user {user_id}: {e.message}")
            raise InternalError(f"{status_message(500)} Failed to generate token.")
