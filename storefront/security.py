from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from jose import JWTError, jwt
from passlib.context import CryptContext

from storefront.db import settings

# bcrypt_sha256 avoids the 72 byte bcrypt limit and still verifies plain bcrypt hashes.
pwd_context = CryptContext(
    schemes=["bcrypt_sha256", "bcrypt"],
    deprecated="auto",
)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: Dict[str, Any], expires_minutes: int | None = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(
        minutes=expires_minutes or settings.access_token_expire_minutes
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.auth_secret, algorithm=settings.auth_algorithm)


def decode_access_token(token: str) -> Dict[str, Any] | None:
    for secret in settings.AUTH_SECRETS_LIST:
        try:
            return jwt.decode(token, secret, algorithms=[settings.auth_algorithm])
        except JWTError:
            continue
    return None
