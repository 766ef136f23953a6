from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext
from passlib.exc import MissingBackendError

from schoolms.core.config import ACCESS_TOKEN_EXPIRE, ALGORITHM, SECRET_KEY
from schoolms.core.errors import HashingUnavailable

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    """Hashes a plain-text password."""
    try:
        return pwd_context.hash(password)
    except MissingBackendError as exc:
        raise HashingUnavailable("password hashing backend unavailable") from exc


def verify_password(password: str, hashed_password: str) -> bool:
    """Verifies a plain-text password against a stored hash."""
    try:
        return pwd_context.verify(password, hashed_password)
    except MissingBackendError as exc:
        raise HashingUnavailable("password hashing backend unavailable") from exc
    except ValueError:
        # stored value is not a recognised hash
        return False


def dummy_verify() -> None:
    """Spend the same time as a real verification (unknown usernames)."""
    pwd_context.dummy_verify()


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or ACCESS_TOKEN_EXPIRE)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any] | None:
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None
