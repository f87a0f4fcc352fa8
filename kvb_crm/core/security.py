"""
Security utilities for the KVB API.
JWT cookies per role, password hashing and reset tokens.
"""
from datetime import datetime, timedelta
from typing import Optional, Literal, Tuple
import hashlib
import uuid
import secrets

import jwt
import bcrypt

from kvb_crm.config import settings


Role = Literal["admin", "sales", "worker", "customer"]

# Cookie namespace for each role
ROLE_COOKIES = {
    "admin": "jwt_admin",
    "sales": "jwt_sales",
    "worker": "jwt_worker",
    "customer": "jwt_customer",
}


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return bcrypt.checkpw(
        plain_password.encode('utf-8'),
        hashed_password.encode('utf-8')
    )


def get_password_hash(password: str) -> str:
    """Hash a password."""
    salt = bcrypt.gensalt()
    return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')


def get_unusable_password_hash() -> str:
    """Hash of a random secret, for accounts created without a password."""
    return get_password_hash(secrets.token_urlsafe(32))


def create_access_token(
    user_id: uuid.UUID,
    role: Role,
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create a JWT for a principal.

    Args:
        user_id: Principal id
        role: Principal type, checked again when the cookie is read
        expires_delta: Custom expiration time

    Returns:
        Encoded JWT string
    """
    expire = datetime.utcnow() + (expires_delta or timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS))
    to_encode = {
        "user_id": str(user_id),
        "role": role,
        "exp": expire,
        "iat": datetime.utcnow(),
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> Optional[dict]:
    """
    Decode and validate a JWT token.

    Returns:
        Decoded payload dict or None if invalid
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        return payload
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None


def verify_token(token: str, role: Role) -> Optional[dict]:
    """Decode a token and check it was issued for the given role."""
    payload = decode_token(token)
    if payload and payload.get("role") == role:
        return payload
    return None


def cookie_max_age() -> int:
    return settings.ACCESS_TOKEN_EXPIRE_DAYS * 24 * 60 * 60


def hash_reset_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def generate_reset_token() -> Tuple[str, str, datetime]:
    """Return (raw token, stored hash, expiry) for a password reset."""
    raw = secrets.token_hex(20)
    expires = datetime.utcnow() + timedelta(minutes=settings.PASSWORD_RESET_TOKEN_EXPIRE_MINUTES)
    return raw, hash_reset_token(raw), expires
