"""Unit tests for FastAPI authentication dependencies."""

import pytest
from fastapi import HTTPException

from restaurant_ordering_service.auth.api_dependencies import get_user_id_from_header
from restaurant_ordering_service.auth.token_validator import TokenValidator


@pytest.mark.unit
class TestGetUserIdFromHeader:
    """Test suite for get_user_id_from_header dependency."""

    def test_returns_user_id_when_valid(self, token_validator: TokenValidator) -> None:
        """Test that dependency returns the token subject when valid."""
        token = token_validator.issue("usr_1")

        user_id = get_user_id_from_header(authorization=f"Bearer {token}", validator=token_validator)

        assert user_id == "usr_1"

    def test_scheme_is_case_insensitive(self, token_validator: TokenValidator) -> None:
        token = token_validator.issue("usr_1")

        assert get_user_id_from_header(f"bearer {token}", token_validator) == "usr_1"

    @pytest.mark.parametrize("header", [None, "", "Bearer", "Bearer   ", "Basic abc123"])
    def test_raises_401_when_token_missing(
        self, token_validator: TokenValidator, header: str | None
    ) -> None:
        """Test that a missing or non-bearer header is rejected with 401."""
        with pytest.raises(HTTPException) as exc_info:
            get_user_id_from_header(authorization=header, validator=token_validator)

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Access token required"

    def test_raises_403_when_token_invalid(self, token_validator: TokenValidator) -> None:
        """Test that a malformed or forged token is rejected with 403."""
        forged = TokenValidator(secret="someone-else").issue("usr_1")

        with pytest.raises(HTTPException) as exc_info:
            get_user_id_from_header(authorization=f"Bearer {forged}", validator=token_validator)

        assert exc_info.value.status_code == 403
        assert exc_info.value.detail == "Invalid or expired token"

    def test_raises_403_when_no_validator(self) -> None:
        with pytest.raises(HTTPException) as exc_info:
            get_user_id_from_header(authorization="Bearer abc", validator=None)

        assert exc_info.value.status_code == 403
