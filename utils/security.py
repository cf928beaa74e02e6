from passlib.context import CryptContext
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from datetime import datetime, timedelta
from typing import Optional
import logging
import secrets
import jwt
import pytz

from utils.config import (
    JWT_SECRET,
    JWT_ALGORITHM,
    JWT_EXPIRATION_MINUTES,
    DEMO_USER_ID,
    DEMO_USER_EMAIL,
    DEMO_USER_PASSWORD,
    DEMO_USER_PASSWORD_HASH,
)
from utils.response import unauthorized_exception

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")

bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    """
    Hashes a password with the scheme configured in CryptContext.

    Args:
        password (str): Plain text password.

    Returns:
        str: The argon2 hash.
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Checks a plain text password against a hash.

    Args:
        plain_password (str): Plain text password.
        hashed_password (str): Stored hash.

    Returns:
        bool: True when they match.
    """
    return pwd_context.verify(plain_password, hashed_password)


_demo_password_hash = None


def get_demo_password_hash() -> str:
    global _demo_password_hash
    if _demo_password_hash is None:
        _demo_password_hash = DEMO_USER_PASSWORD_HASH or hash_password(DEMO_USER_PASSWORD)
    return _demo_password_hash


def verify_demo_credentials(email: str, password: str) -> bool:
    """
    Validates a login attempt against the single demo account.

    The email is compared case-insensitively; the password goes through argon2.
    """
    if not secrets.compare_digest(email.strip().lower().encode(), DEMO_USER_EMAIL.lower().encode()):
        return False
    return verify_password(password, get_demo_password_hash())


def create_access_token(subject: str, email: str, expires_minutes: Optional[int] = None) -> str:
    """
    Issues a signed JWT for the given user.

    Args:
        subject (str): User identifier, stored in the "sub" claim.
        email (str): User email, stored in the "email" claim.
        expires_minutes (Optional[int]): Lifetime; defaults to JWT_EXPIRATION_MINUTES.

    Returns:
        str: The encoded token.
    """
    now = datetime.now(pytz.utc)
    minutes = JWT_EXPIRATION_MINUTES if expires_minutes is None else expires_minutes
    payload = {
        "sub": subject,
        "email": email,
        "iat": now,
        "exp": now + timedelta(minutes=minutes),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[dict]:
    """
    Decodes and verifies a JWT.

    Returns:
        Optional[dict]: The payload, or None when the token is expired, tampered or malformed.
    """
    try:
        return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        logger.warning("Expired access token")
        return None
    except jwt.InvalidTokenError as e:
        logger.warning("Invalid access token: %s", e)
        return None


def get_current_user(credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)) -> dict:
    """
    FastAPI dependency guarding the protected routers.

    Returns:
        dict: {"id": ..., "email": ...} of the authenticated user.

    Raises:
        HTTPException: 401 when the bearer token is missing, expired or invalid.
    """
    if credentials is None or credentials.scheme.lower() != "bearer":
        logger.warning("Request without bearer token")
        raise unauthorized_exception("Missing bearer token")

    payload = decode_access_token(credentials.credentials)
    if not payload or not payload.get("sub"):
        raise unauthorized_exception("Invalid or expired token")

    return {"id": payload["sub"], "email": payload.get("email")}


def login_demo_user(email: str, password: str) -> Optional[str]:
    """
    Returns an access token for the demo user, or None when the credentials are wrong.
    """
    if not verify_demo_credentials(email, password):
        return None
    return create_access_token(DEMO_USER_ID, DEMO_USER_EMAIL)
