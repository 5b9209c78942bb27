"""Unit tests for account registration, login and token validation."""

import threading
from datetime import UTC, datetime, timedelta
from unittest.mock import patch

import bcrypt
import jwt
import pytest
from pydantic import ValidationError

from restaurant_ordering_service.auth.token_validator import TokenValidator
from restaurant_ordering_service.exceptions import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
)
from restaurant_ordering_service.models.user_models import RegisterRequest
from restaurant_ordering_service.services.auth_service import AuthService
from tests.fakes import TEST_SECRET, InMemoryUserRepository


@pytest.fixture
def service(user_repository: InMemoryUserRepository, token_validator: TokenValidator) -> AuthService:
    return AuthService(user_repository=user_repository, token_validator=token_validator)


def _register_request(email: str = "Ana@Example.com") -> RegisterRequest:
    return RegisterRequest(email=email, password="secret123", full_name=" Ana Lima ")


@pytest.mark.unit
class TestTokenValidator:
    """Test suite for TokenValidator."""

    def test_empty_secret_rejected(self) -> None:
        with pytest.raises(ValueError, match="secret must be provided"):
            TokenValidator(secret="")

    def test_issue_and_decode(self, token_validator: TokenValidator) -> None:
        token = token_validator.issue("usr_1", "ana@example.com")

        assert token_validator.decode(token) == "usr_1"

    def test_token_signed_with_other_secret_rejected(self, token_validator: TokenValidator) -> None:
        other = TokenValidator(secret="another-secret")

        assert token_validator.decode(other.issue("usr_1")) is None

    def test_expired_token_rejected(self) -> None:
        past = datetime.now(UTC) - timedelta(hours=2)
        token = jwt.encode(
            {"sub": "usr_1", "iat": past, "exp": past + timedelta(minutes=5)},
            TEST_SECRET,
            algorithm="HS256",
        )

        assert TokenValidator(secret=TEST_SECRET).decode(token) is None

    def test_token_without_subject_rejected(self) -> None:
        token = jwt.encode(
            {"exp": datetime.now(UTC) + timedelta(minutes=5)}, TEST_SECRET, algorithm="HS256"
        )

        assert TokenValidator(secret=TEST_SECRET).decode(token) is None

    def test_garbage_token_rejected(self, token_validator: TokenValidator) -> None:
        assert token_validator.decode("not-a-jwt") is None


@pytest.mark.unit
class TestRegisterRequest:
    def test_email_is_normalized(self) -> None:
        assert _register_request().email == "ana@example.com"

    @pytest.mark.parametrize(
        "body",
        [
            {"email": "no-at-sign", "password": "secret123", "fullName": "Ana"},
            {"email": "ana@example.com", "password": "short", "fullName": "Ana"},
            {"email": "ana@example.com", "password": "secret123", "fullName": "   "},
            {"email": "ana@example.com", "password": "é" * 40, "fullName": "Ana"},
        ],
    )
    def test_invalid_registration(self, body: dict) -> None:
        with pytest.raises(ValidationError):
            RegisterRequest.model_validate(body)


@pytest.mark.unit
class TestAuthService:
    """Test suite for AuthService."""

    @pytest.mark.asyncio
    async def test_register_stores_hash_and_returns_token(
        self,
        service: AuthService,
        user_repository: InMemoryUserRepository,
        token_validator: TokenValidator,
    ) -> None:
        result = await service.register(_register_request())

        assert result.user.email == "ana@example.com"
        assert result.user.full_name == "Ana Lima"
        assert token_validator.decode(result.token) == result.user.id

        stored = user_repository.get_by_email("ana@example.com")
        assert stored is not None
        assert stored.password_hash != "secret123"
        assert stored.password_hash.startswith("$2")

    @pytest.mark.asyncio
    async def test_register_duplicate_email(self, service: AuthService) -> None:
        await service.register(_register_request())

        with pytest.raises(ConflictError, match="User already exists"):
            await service.register(_register_request("ana@example.com"))

    @pytest.mark.asyncio
    async def test_login_success_is_case_insensitive_on_email(self, service: AuthService) -> None:
        registered = await service.register(_register_request())

        result = await service.login("  ANA@example.com ", "secret123")

        assert result.user.id == registered.user.id

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, service: AuthService) -> None:
        await service.register(_register_request())

        with pytest.raises(AuthenticationError, match="Invalid email or password"):
            await service.login("ana@example.com", "wrong-password")

    @pytest.mark.asyncio
    async def test_login_unknown_email(self, service: AuthService) -> None:
        with pytest.raises(AuthenticationError):
            await service.login("nobody@example.com", "secret123")

    @pytest.mark.asyncio
    async def test_login_overlong_password(self, service: AuthService) -> None:
        with pytest.raises(AuthenticationError):
            await service.login("ana@example.com", "x" * 100)

    @pytest.mark.asyncio
    async def test_get_user(self, service: AuthService) -> None:
        registered = await service.register(_register_request())

        user = await service.get_user(registered.user.id)

        assert user.email == "ana@example.com"

    @pytest.mark.asyncio
    async def test_get_unknown_user(self, service: AuthService) -> None:
        with pytest.raises(NotFoundError, match="User not found"):
            await service.get_user("usr_missing")

    @pytest.mark.asyncio
    async def test_password_hashing_runs_off_the_event_loop(self, service: AuthService) -> None:
        """Test that bcrypt work happens in a worker thread, not the loop thread."""
        loop_thread = threading.get_ident()
        seen_threads: list[int] = []
        real_hashpw, real_checkpw = bcrypt.hashpw, bcrypt.checkpw

        def recording_hashpw(password: bytes, salt: bytes) -> bytes:
            seen_threads.append(threading.get_ident())
            return real_hashpw(password, salt)

        def recording_checkpw(password: bytes, hashed: bytes) -> bool:
            seen_threads.append(threading.get_ident())
            return real_checkpw(password, hashed)

        with (
            patch.object(bcrypt, "hashpw", side_effect=recording_hashpw),
            patch.object(bcrypt, "checkpw", side_effect=recording_checkpw),
        ):
            await service.register(_register_request())
            await service.login("ana@example.com", "secret123")

        assert len(seen_threads) == 2
        assert loop_thread not in seen_threads
