from datetime import datetime, timedelta, timezone
import logging
from typing import Optional, Dict, Any
import jwt
from passlib.context import CryptContext
from portal.config import settings

logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Claims managed by the codec itself, never copied from caller input
RESERVED_CLAIMS = ("exp", "iat")


def create_access_token(
    claims: Dict[str, Any],
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Sign ``claims`` into a time-bounded JWT.

    Expiry defaults to ``ACCESS_TOKEN_EXPIRE_DAYS``. ``None`` values are dropped.
    """
    to_encode = {k: v for k, v in claims.items() if v is not None and k not in RESERVED_CLAIMS}

    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS))
    to_encode.update({"exp": expire, "iat": now})

    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_token(token: Optional[str]) -> Optional[Dict[str, Any]]:
    """
    Return the token's claims, or ``None`` if it is malformed, tampered or expired.

    Callers get no hint of which check failed.
    """
    if not token:
        return None
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.PyJWTError as e:
        logger.debug(f"Token verification failed: {type(e).__name__}")
        return None


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        # Unrecognised or corrupt hash in the accounts table
        logger.warning("Stored password hash could not be parsed")
        return False
