"""API key authentication.

Results are readable only by holders of an issued API key; assignment,
exposure and event endpoints stay public.

API keys use SHA256 (not bcrypt) because they are high-entropy random
strings, not user-chosen passwords, and the api_key_hash column is indexed
for a direct lookup on every authenticated request.
"""
import hashlib
import hmac
import secrets
from fastapi import HTTPException, Security, Depends
from fastapi.security import APIKeyHeader
from sqlalchemy.orm import Session
from typing import Optional

from splitlab.config import Settings, get_settings
from splitlab.database import get_db
from splitlab.models.user import User

# API key header
api_key_header = APIKeyHeader(name="x-api-key", auto_error=False)
admin_key_header = APIKeyHeader(name="x-admin-key", auto_error=False)


def hash_api_key(api_key: str) -> str:
    """
    Hash an API key for storage using SHA256.

    Args:
        api_key: Plain text API key

    Returns:
        SHA256 hex digest of the API key
    """
    return hashlib.sha256(api_key.encode()).hexdigest()


def generate_api_key() -> str:
    """New random API key (43 url-safe characters)."""
    return secrets.token_urlsafe(32)


async def get_current_user(
    api_key: Optional[str] = Security(api_key_header),
    db: Session = Depends(get_db)
) -> User:
    """
    Dependency to validate API key and get current user.

    Usage:
        @router.get("/results")
        def results(user: User = Depends(get_current_user)):
            ...

    Raises:
        HTTPException: 401 if API key is invalid or missing
    """
    if not api_key:
        raise HTTPException(
            status_code=401,
            detail="Missing API key",
            headers={"WWW-Authenticate": "ApiKey"}
        )

    user = db.query(User).filter(
        User.api_key_hash == hash_api_key(api_key)
    ).first()

    if not user:
        raise HTTPException(
            status_code=401,
            detail="Invalid API key",
            headers={"WWW-Authenticate": "ApiKey"}
        )

    return user


async def require_admin_key(
    admin_key: Optional[str] = Security(admin_key_header),
    settings: Settings = Depends(get_settings)
) -> None:
    """Dependency guarding setup endpoints with the configured admin key."""
    if not admin_key or not hmac.compare_digest(admin_key, settings.admin_api_key):
        raise HTTPException(
            status_code=401,
            detail="Invalid admin key",
            headers={"WWW-Authenticate": "ApiKey"}
        )


def create_user_with_api_key(db: Session, api_key: str, label: Optional[str] = None) -> User:
    """
    Helper to create a new user with an API key.

    Args:
        db: Database session
        api_key: Plain text API key (will be hashed with SHA256)
        label: Who the key is issued to

    Returns:
        Created User instance
    """
    user = User(
        api_key_hash=hash_api_key(api_key),
        label=label
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user
