"""FastAPI dependencies for bearer authentication."""

from typing import Annotated

from fastapi import Header, HTTPException

from restaurant_ordering_service.auth.token_validator import TokenValidator


def get_user_id_from_header(
    authorization: Annotated[str | None, Header()] = None,
    validator: TokenValidator | None = None,
) -> str:
    """Extract and validate the bearer token from the Authorization header.

    Args:
        authorization: Raw Authorization header (injected by FastAPI)
        validator: TokenValidator instance

    Returns:
        str: The authenticated user id

    Raises:
        HTTPException: 401 if the token is missing, 403 if it is invalid
    """
    if not authorization:
        raise HTTPException(status_code=401, detail="Access token required")

    scheme, _, token = authorization.partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise HTTPException(status_code=401, detail="Access token required")

    if validator is None:
        raise HTTPException(status_code=403, detail="Invalid or expired token")

    user_id = validator.decode(token)
    if user_id is None:
        raise HTTPException(status_code=403, detail="Invalid or expired token")

    return user_id
