"""User account models for the credential store."""

from datetime import datetime
from typing import Any

from pydantic import Field, field_validator

from restaurant_ordering_service.models.menu_models import CamelModel


def normalize_email(value: str) -> str:
    return value.strip().lower()


class User(CamelModel):
    """User record.

    Stored in DynamoDB with email as partition key, which makes email
    uniqueness a conditional put rather than a query.
    """

    id: str = Field(..., description="Opaque user identifier")
    email: str = Field(..., description="Unique login email, lower-cased")
    password_hash: str = Field(..., description="bcrypt hash of the password")
    full_name: str = Field(..., description="Display name")
    created_at: datetime = Field(..., description="Registration timestamp")

    def to_public(self) -> "PublicUser":
        return PublicUser(id=self.id, email=self.email, full_name=self.full_name)

    def to_dynamodb_item(self) -> dict[str, Any]:
        return {
            "email": self.email,
            "user_id": self.id,
            "password_hash": self.password_hash,
            "full_name": self.full_name,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dynamodb_item(cls, item: dict[str, Any]) -> "User":
        return cls(
            id=item["user_id"],
            email=item["email"],
            password_hash=item["password_hash"],
            full_name=item.get("full_name", ""),
            created_at=datetime.fromisoformat(item["created_at"]),
        )


class PublicUser(CamelModel):
    """User fields safe to return to clients."""

    id: str
    email: str
    full_name: str


class RegisterRequest(CamelModel):
    """Body of POST /auth/register."""

    email: str = Field(..., min_length=3)
    # bcrypt only hashes the first 72 bytes
    password: str = Field(..., min_length=6, max_length=72)
    full_name: str = Field(..., min_length=1)

    @field_validator("password")
    @classmethod
    def check_password_bytes(cls, v: str) -> str:
        if len(v.encode("utf-8")) > 72:
            raise ValueError("password must be at most 72 bytes")
        return v

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        v = normalize_email(v)
        if "@" not in v or v.startswith("@") or v.endswith("@"):
            raise ValueError("email must be a valid address")
        return v

    @field_validator("full_name")
    @classmethod
    def strip_full_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("full name must not be blank")
        return v


class LoginRequest(CamelModel):
    """Body of POST /auth/login."""

    email: str
    password: str


class AuthResponse(CamelModel):
    user: PublicUser
    token: str
