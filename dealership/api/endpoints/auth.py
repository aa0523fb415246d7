from typing import Any

from fastapi import APIRouter, Body, Depends, status

from dealership.api.pipeline import get_request_context, respond, run_guarded
from dealership.core.context import RequestContext
from dealership.core.result import Ok
from dealership.services import users

router = APIRouter()

@router.post("/register")
def register(body: Any = Body(None), ctx: RequestContext = Depends(get_request_context)):
    """
    Register a staff account and return it with a bearer token.

    Open endpoint; the role is taken from the request.
    """
    return respond(users.register(ctx, body), status.HTTP_201_CREATED, "User registered successfully")

@router.post("/login")
def login(body: Any = Body(None), ctx: RequestContext = Depends(get_request_context)):
    """Exchange email and password for a bearer token."""
    return respond(users.login(ctx, body), message="Login successful")

@router.post("/logout")
def logout(ctx: RequestContext = Depends(get_request_context)):
    """Record a logout for the authenticated user."""
    result = run_guarded(ctx, None, lambda user: users.logout(ctx, user))
    return respond(result, message="Logout successful")

@router.get("/me")
def get_user_info(ctx: RequestContext = Depends(get_request_context)):
    """
    Return the identity behind the bearer token.

    This endpoint requires a valid JWT token in the Authorization header.
    """
    result = run_guarded(ctx, None, lambda user: Ok(user.model_dump()))
    return respond(result)
