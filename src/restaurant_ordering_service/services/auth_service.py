"""Account registration and login."""

import asyncio
import logging
import uuid
from datetime import UTC, datetime

import bcrypt

from restaurant_ordering_service.auth.token_validator import TokenValidator
from restaurant_ordering_service.exceptions import AuthenticationError, ConflictError, NotFoundError
from restaurant_ordering_service.models.user_models import (
    AuthResponse,
    PublicUser,
    RegisterRequest,
    User,
    normalize_email,
)
from restaurant_ordering_service.observability import traced
from restaurant_ordering_service.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


class AuthService:
    """Service backing the credential store.

    Passwords are stored as bcrypt hashes. Successful registration and login
    both return an access token issued by the shared TokenValidator.
    """

    def __init__(self, user_repository: UserRepository, token_validator: TokenValidator) -> None:
        self.user_repository = user_repository
        self.token_validator = token_validator

    @traced("auth.register")
    async def register(self, payload: RegisterRequest) -> AuthResponse:
        """Create an account and sign it in.

        Raises:
            ConflictError: If the email is already registered
        """
        password_hash = await asyncio.to_thread(
            bcrypt.hashpw, payload.password.encode("utf-8"), bcrypt.gensalt()
        )
        user = User(
            id=f"usr_{uuid.uuid4().hex[:12]}",
            email=payload.email,
            password_hash=password_hash.decode("utf-8"),
            full_name=payload.full_name,
            created_at=datetime.now(UTC),
        )

        if not self.user_repository.create_user(user):
            raise ConflictError("User already exists")

        logger.info(f"Registered user {user.id}")
        return self._authenticated(user)

    @traced("auth.login")
    async def login(self, email: str, password: str) -> AuthResponse:
        """Check credentials and issue a token.

        Raises:
            AuthenticationError: If the email is unknown or the password is wrong
        """
        if len(password.encode("utf-8")) > 72:
            raise AuthenticationError(INVALID_CREDENTIALS)

        user = self.user_repository.get_by_email(normalize_email(email))
        if user is None or not await asyncio.to_thread(
            bcrypt.checkpw, password.encode("utf-8"), user.password_hash.encode("utf-8")
        ):
            logger.info("Failed login attempt")
            raise AuthenticationError(INVALID_CREDENTIALS)

        return self._authenticated(user)

    async def get_user(self, user_id: str) -> PublicUser:
        """Look up the account behind an access token.

        Raises:
            NotFoundError: If the account no longer exists
        """
        user = self.user_repository.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user.to_public()

    def _authenticated(self, user: User) -> AuthResponse:
        return AuthResponse(
            user=user.to_public(),
            token=self.token_validator.issue(user.id, user.email),
        )
