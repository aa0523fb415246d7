import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
from jose import jwt
from jose.exceptions import JWTError
from fastapi.security import HTTPBearer
from pydantic import BaseModel

from dealership.core.config import settings
from dealership.core.result import Err, ErrorKind, Ok, Result
from dealership.db.session import Database
from dealership.models.user import User

logger = logging.getLogger(__name__)

# Security scheme for Swagger UI; missing credentials are reported by the gate itself
security = HTTPBearer(auto_error=False)

UNAUTHORIZED = Err(ErrorKind.UNAUTHORIZED, "Unauthorized")

class TokenPayload(BaseModel):
    """Model representing JWT token payload."""
    sub: Optional[str] = None
    exp: Optional[int] = None
    email: Optional[str] = None
    role: Optional[str] = None

class CurrentUser(BaseModel):
    """Identity resolved from a bearer token."""
    id: str
    email: str
    name: str
    role: str
    phone: Optional[str] = None

    model_config = {
        "from_attributes": True
    }

def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=10)).decode("utf-8")

def verify_password(password: str, password_hash: Optional[str]) -> bool:
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is malformed")
        return False

def create_access_token(user: Any, expires_delta: Optional[timedelta] = None) -> str:
    """Sign a token whose subject is the user id."""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode: Dict[str, Any] = {
        "sub": str(user.id),
        "email": user.email,
        "role": user.role,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)

def verify_token(token: str) -> Optional[TokenPayload]:
    """Verify and decode JWT token; None when invalid or expired."""
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM]
        )
    except JWTError as e:
        logger.info(f"Rejected bearer token: {e}")
        return None
    return TokenPayload(**payload)

def authenticate(database: Database, token: Optional[str]) -> Result:
    """
    Authentication gate: resolve a bearer token to the user it names.

    Args:
        database: Database handle used to look the user up
        token: Raw bearer credential, or None when the header was absent

    Returns:
        ``Ok(CurrentUser)``, or an UNAUTHORIZED ``Err`` for a missing, invalid
        or expired token or an unknown user
    """
    if not token:
        return UNAUTHORIZED

    payload = verify_token(token)
    if payload is None or not payload.sub:
        return UNAUTHORIZED

    with database.session() as session:
        user = session.get(User, payload.sub)
        if user is None:
            logger.info(f"Token subject {payload.sub} does not resolve to a user")
            return UNAUTHORIZED
        return Ok(CurrentUser.model_validate(user))
