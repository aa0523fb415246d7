"""
Account registration, login and logout.
"""

import logging
from typing import Any

from sqlalchemy.orm import Session

from dealership.core.context import RequestContext
from dealership.core.permissions import ROLE_NAMES
from dealership.core.result import Err, ErrorKind, Ok, Result
from dealership.core.security import CurrentUser, create_access_token, hash_password, verify_password
from dealership.models.user import User
from dealership.schemas.auth import LoginRequest, RegisterRequest
from dealership.schemas.common import parse_payload
from dealership.services.validation import sanitize_input, validate_email, validate_phone, validate_role

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
INVALID_CREDENTIALS = Err(ErrorKind.UNAUTHORIZED, "Invalid email or password")


def register(ctx: RequestContext, body: Any) -> Result:
    """
    Create a staff account and sign a token for it.

    Returns:
        ``Ok({"user", "token"})``; VALIDATION for bad fields, CONFLICT when the
        email is taken
    """
    parsed = parse_payload(RegisterRequest, body, ["email", "password", "name", "role"])
    if isinstance(parsed, Err):
        return parsed
    payload = parsed.value

    email = payload.email.strip().lower()
    if not validate_email(email):
        return Err(ErrorKind.VALIDATION, "Invalid email format")
    if len(payload.password) < MIN_PASSWORD_LENGTH:
        return Err(ErrorKind.VALIDATION, f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    if not validate_role(payload.role):
        return Err(ErrorKind.VALIDATION, f"Invalid role. Must be one of: {', '.join(sorted(ROLE_NAMES))}")
    if payload.phone and not validate_phone(payload.phone):
        return Err(ErrorKind.VALIDATION, "Invalid phone number format")

    password_hash = hash_password(payload.password)

    def create(session: Session) -> Result:
        if session.query(User.id).filter(User.email == email).first() is not None:
            return Err(ErrorKind.CONFLICT, "User with this email already exists")
        user = User(
            email=email,
            password_hash=password_hash,
            name=sanitize_input(payload.name),
            role=payload.role,
            phone=payload.phone,
        )
        session.add(user)
        session.flush()
        return Ok(user)

    result = ctx.database.transaction(create)
    if isinstance(result, Err):
        return result

    user = result.value
    logger.info(f"Registered user {user.id} with role {user.role}")
    ctx.audit.log_create(user.id, "USER", user.id, user.to_dict(), ctx.client_ip)
    return Ok({"user": user.to_dict(), "token": create_access_token(user)})


def login(ctx: RequestContext, body: Any) -> Result:
    """Exchange email and password for a bearer token."""
    if not isinstance(body, dict) or not body.get("email") or not body.get("password"):
        return Err(ErrorKind.VALIDATION, "Email and password are required")
    parsed = parse_payload(LoginRequest, body)
    if isinstance(parsed, Err):
        return parsed
    payload = parsed.value

    with ctx.database.session() as session:
        user = session.query(User).filter(User.email == payload.email.strip().lower()).first()

    if user is None or not verify_password(payload.password, user.password_hash):
        logger.info(f"Failed login attempt for {payload.email}")
        return INVALID_CREDENTIALS

    ctx.audit.log_login(user.id, ctx.client_ip)
    return Ok({"user": user.to_dict(), "token": create_access_token(user)})


def logout(ctx: RequestContext, user: CurrentUser) -> Result:
    # Tokens are stateless; logout only leaves a trail
    ctx.audit.log_logout(user.id, ctx.client_ip)
    return Ok(None)
