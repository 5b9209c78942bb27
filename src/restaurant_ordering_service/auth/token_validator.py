"""Bearer token issuing and validation.

Access tokens are HS256 JWTs whose ``sub`` claim is the user id. Validation
returns simple values (None on any failure) and leaves the HTTP response to
the FastAPI dependency.
"""

import logging
from datetime import UTC, datetime, timedelta

import jwt

logger = logging.getLogger(__name__)


class TokenValidator:
    """Issues and validates access tokens with a shared secret."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        expires_minutes: int = 60 * 24 * 7,
    ) -> None:
        """Initialize validator.

        Args:
            secret: Signing secret
            algorithm: JWT signing algorithm
            expires_minutes: Lifetime of issued tokens

        Raises:
            ValueError: If secret is empty
        """
        if not secret:
            raise ValueError("A token signing secret must be provided")

        self.secret = secret
        self.algorithm = algorithm
        self.expires_minutes = expires_minutes

    def issue(self, user_id: str, email: str | None = None) -> str:
        """Create a signed access token for a user.

        Args:
            user_id: Subject of the token
            email: Optional email claim for clients

        Returns:
            str: Encoded JWT
        """
        now = datetime.now(UTC)
        claims: dict = {
            "sub": user_id,
            "iat": now,
            "exp": now + timedelta(minutes=self.expires_minutes),
        }
        if email:
            claims["email"] = email

        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def decode(self, token: str) -> str | None:
        """Validate a token and extract the user id.

        Args:
            token: Encoded JWT

        Returns:
            str: The user id, or None if the token is invalid or expired
        """
        try:
            claims = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.PyJWTError as e:
            logger.info(f"Rejected access token: {e}")
            return None

        user_id = claims.get("sub")
        if not isinstance(user_id, str) or not user_id:
            return None
        return user_id
