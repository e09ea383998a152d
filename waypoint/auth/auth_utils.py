import logging
from datetime import datetime, timedelta
from typing import Optional

from jose import jwt, JWTError
from passlib.context import CryptContext
from passlib.exc import UnknownHashError

from waypoint.config.settings import settings

# Reduce passlib noise
logging.getLogger("passlib").setLevel(logging.ERROR)

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto"
)

# ---------------- PASSWORD HASHING ---------------- #

def hash_password(password: str) -> str:
    """
    Hashes a password using the configured context.

    Args:
        password: The plain text password

    Returns:
        str: The hashed password
    """
    return pwd_context.hash(password)

def verify_password(password: str, hashed_password: str) -> bool:
    """
    Verifies a plain password against a hash.
    An unknown hash format counts as a mismatch.
    """
    try:
        return pwd_context.verify(password, hashed_password)
    except UnknownHashError:
        return False

# ---------------- JWT TOKENS ---------------- #

def _encode(username: str, role: str, secret: str, lifetime: timedelta) -> str:
    to_encode = {
        "user": username,
        "role": role,
        "exp": datetime.utcnow() + lifetime,
    }
    return jwt.encode(to_encode, secret, algorithm=settings.ALGORITHM)

def create_access_token(username: str, role: str) -> str:
    """
    Creates a short-lived access token carrying the verified (user, role) pair.
    """
    return _encode(
        username,
        role,
        settings.ACCESS_SECRET_KEY,
        timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )

def create_refresh_token(username: str, role: str) -> str:
    return _encode(
        username,
        role,
        settings.REFRESH_SECRET_KEY,
        timedelta(hours=settings.REFRESH_TOKEN_EXPIRE_HOURS)
    )

def decode_token(token: str, secret: str) -> Optional[dict]:
    """
    Decodes and verifies a token.

    Returns:
        dict: The claims, or None when the token is invalid or expired
    """
    try:
        return jwt.decode(token, secret, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
