"""
Credential service: password hashing, bearer tokens and caller identity.

Tokens are HS256 JWTs signed with ``settings.secret_key`` and carry the
caller's id, email and role:

    {"sub": "42", "email": "sam@example.com", "role": "job_seeker", "exp": ...}

Routes depend on one of two resolvers:
    - get_optional_identity: anonymous callers get None (read-only listings)
    - get_current_identity: no identity -> 401 Unauthenticated
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from hirely.config import Settings, get_settings
from hirely.errors import Unauthenticated

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"

# auto_error=False so a missing header resolves to an anonymous caller
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Identity:
    id: int
    email: str
    role: str


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    rounds = rounds or get_settings().bcrypt_rounds
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=rounds)).decode()


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode(), password_hash.encode())
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def create_access_token(identity: Identity, settings: Optional[Settings] = None) -> str:
    settings = settings or get_settings()
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.token_expire_minutes)
    to_encode = {
        "sub": str(identity.id),
        "email": identity.email,
        "role": identity.role,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.secret_key, algorithm=ALGORITHM)


def authenticate(token: Optional[str], settings: Optional[Settings] = None) -> Optional[Identity]:
    """
    Resolve a bearer token to the caller's Identity.

    Returns None for a missing, malformed, expired or forged token; the
    caller decides whether anonymity is acceptable.
    """
    if not token:
        return None
    settings = settings or get_settings()
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
        return Identity(
            id=int(payload["sub"]),
            email=payload.get("email", ""),
            role=payload.get("role", "job_seeker"),
        )
    except (JWTError, KeyError, ValueError) as e:
        logger.info(f"Rejected bearer token: {e}")
        return None


async def get_optional_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[Identity]:
    if credentials is None:
        return None
    return authenticate(credentials.credentials)


async def get_current_identity(
    identity: Optional[Identity] = Depends(get_optional_identity),
) -> Identity:
    if identity is None:
        raise Unauthenticated()
    return identity
