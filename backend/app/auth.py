"""
Auth module: JWT creation/validation, password hashing and the
get_current_user FastAPI dependency.

Every protected route depends on get_current_user. A request without a
bearer token is rejected with 401; a token that fails signature or expiry
checks is rejected with 403.
"""

import time
from dataclasses import dataclass
from typing import Optional
from jose import jwt, JWTError
from passlib.context import CryptContext
from fastapi import HTTPException, Request
from app.config import get_settings
from app.logging_config import get_logger

ALGORITHM = "HS256"

logger = get_logger(__name__)
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


@dataclass
class TokenPrincipal:
    """Decoded identity attached to each authenticated request."""
    id: int
    employee_id: str


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # stored value is not a recognised hash
        return False


def create_token(user) -> str:
    """Create a signed JWT for the given User model instance."""
    settings = get_settings()
    payload = {
        "id": user.id,
        "employeeId": user.employee_id,
        "exp": int(time.time()) + settings.jwt_expire_hours * 3600,
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=ALGORITHM)


def decode_token(token: str) -> Optional[TokenPrincipal]:
    """Decode and validate a JWT. Returns None if invalid/expired."""
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[ALGORITHM])
        return TokenPrincipal(id=int(payload["id"]), employee_id=payload["employeeId"])
    except (JWTError, KeyError, TypeError, ValueError) as e:
        logger.warning("token_rejected", error=str(e))
        return None


async def get_current_user(request: Request) -> TokenPrincipal:
    """
    FastAPI dependency. Extracts the JWT from the Authorization header.
    Raises 401 when no token is sent and 403 when it does not verify.
    """
    auth_header = request.headers.get("Authorization", "")
    parts = auth_header.split(" ", 1)
    token = parts[1].strip() if len(parts) == 2 else ""
    if not token:
        raise HTTPException(status_code=401, detail="Access token required")

    principal = decode_token(token)
    if principal is None:
        raise HTTPException(status_code=403, detail="Invalid or expired token")
    return principal
