"""Shared request dependencies."""

from fastapi import Header, HTTPException, status


async def require_user(x_user_id: str | None = Header(default=None)) -> str:
    """Return the opaque user id supplied by the auth provider."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    return x_user_id.strip()
