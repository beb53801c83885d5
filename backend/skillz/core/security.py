"""
Security module for authentication and authorization.

Provides JWT token handling and password hashing using
bcrypt and python-jose.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any, List

import bcrypt
from jose import JWTError, jwt
from pydantic import BaseModel, Field

from skillz.core.config import settings

# JWT Algorithm
ALGORITHM = "HS256"

# Role names stored in user_roles
ADMIN_ROLE = "Admin"
MANAGER_ROLE = "Manager"


class TokenData(BaseModel):
    """
    JWT token payload data model.

    ``user_id`` comes from the ``sub`` claim.
    """
    user_id: int
    exp: Optional[datetime] = None


class CurrentUser(BaseModel):
    """
    Authenticated caller, resolved from the bearer token.

    Never carries the password hash.
    """
    id: int
    name: str
    email: str
    roles: List[str] = Field(default_factory=list)

    @property
    def is_admin(self) -> bool:
        return ADMIN_ROLE in self.roles


class Token(BaseModel):
    """
    Access token response model.

    Returned by the login and signup endpoints.
    """
    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type (always 'bearer')")


def _password_bytes(password: str) -> bytes:
    # bcrypt only looks at the first 72 bytes
    return password.encode("utf-8")[:72]


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """
    Verify a plain password against a hashed password.

    Args:
        plain_password: The plain text password to verify
        hashed_password: The stored bcrypt hash (None never matches)

    Returns:
        True if password matches, False otherwise
    """
    if not hashed_password:
        return False
    try:
        return bcrypt.checkpw(
            _password_bytes(plain_password),
            hashed_password.encode("utf-8"),
        )
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def get_password_hash(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: Plain text password to hash

    Returns:
        Hashed password string
    """
    salt = bcrypt.gensalt(rounds=12)
    return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token.

    Args:
        data: Dictionary of claims to encode in the token
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string

    Example:
        >>> token = create_access_token({"sub": "12"})
        >>> # Use token in Authorization header: Bearer <token>
    """
    to_encode = data.copy()

    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    to_encode["exp"] = datetime.now(timezone.utc) + expires_delta

    return jwt.encode(to_encode, settings.secret_key, algorithm=ALGORITHM)


def create_user_token(user_id: int) -> Token:
    """Issue a bearer token whose subject is the user id."""
    return Token(access_token=create_access_token({"sub": str(user_id)}))


def decode_access_token(token: str) -> Optional[TokenData]:
    """
    Decode and validate a JWT access token.

    Args:
        token: JWT token string to decode

    Returns:
        TokenData if valid, None if invalid, expired or malformed
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except JWTError:
        return None

    subject = payload.get("sub")
    if subject is None:
        return None

    try:
        user_id = int(subject)
    except (TypeError, ValueError):
        return None

    return TokenData(user_id=user_id, exp=payload.get("exp"))
