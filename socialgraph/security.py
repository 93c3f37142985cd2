"""
Password hashing (argon2) and bearer tokens (HS256 JWT).
"""
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

from socialgraph.config import settings
from socialgraph.errors import InvalidToken

# one hasher instance is reused process-wide
pwd_hasher = PasswordHasher()

ALGORITHM = "HS256"


def hash_password(plain_password: str) -> str:
    return pwd_hasher.hash(plain_password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_hasher.verify(hashed_password, plain_password)
    except (VerificationError, InvalidHashError):
        return False


def create_token(username: str, uid: str, email: str | None = None) -> str:
    now = datetime.now(timezone.utc)
    claims = {
        "sub": username,
        "uid": uid,
        "email": email,
        "iss": settings.jwt_issuer,
        "iat": now,
        "exp": now + timedelta(seconds=settings.jwt_expiration_seconds),
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=ALGORITHM)


def decode_token(token: str) -> dict[str, Any]:
    """Validate signature, issuer and expiry; return the claims."""
    try:
        return jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[ALGORITHM],
            issuer=settings.jwt_issuer,
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise InvalidToken("Token expired") from exc
    except jwt.InvalidTokenError as exc:
        raise InvalidToken() from exc


def seconds_until_expiry(claims: dict[str, Any]) -> int:
    exp = int(claims.get("exp", 0))
    return max(exp - int(datetime.now(timezone.utc).timestamp()), 0)
