"""Security utilities for API authentication."""

from typing import Annotated, Optional

from fastapi import Header, HTTPException, status

from content_migration.core.config import settings


async def verify_bearer_token(authorization: Annotated[Optional[str], Header()] = None) -> str:
    """Verify the ``Authorization: Bearer <token>`` header and return the token."""
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )

    token = authorization[len("Bearer "):].strip()
    if token != settings.api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
        )
    return token
