"""
Request pipeline shared by every protected endpoint:
authentication gate, then permission gate, then the operation, then the JSON envelope.
"""

import logging
from typing import Any, Callable, Optional

from fastapi import Depends, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials

from dealership.core.context import RequestContext
from dealership.core.permissions import check_permission
from dealership.core.result import Err, ErrorKind, Ok, Result
from dealership.core.security import CurrentUser, authenticate, security
from dealership.services.audit import get_client_ip

logger = logging.getLogger(__name__)


def get_request_context(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> RequestContext:
    """Collect the app-scoped collaborators and the caller's credentials."""
    state = request.app.state
    return RequestContext(
        database=state.database,
        audit=state.audit,
        notifier=state.notifier,
        token=credentials.credentials if credentials else None,
        client_ip=get_client_ip(request.headers),
    )


def run_guarded(
    ctx: RequestContext,
    permission: Optional[str],
    operation: Callable[[CurrentUser], Result],
) -> Result:
    """
    Authenticate, check ``permission`` (None for any signed-in user), then run the operation.

    The operation is never invoked when either gate fails, so no protected data
    is read for an unauthorized caller.
    """
    auth = authenticate(ctx.database, ctx.token)
    if isinstance(auth, Err):
        return auth
    user = auth.value

    if permission is not None:
        allowed = check_permission(user, permission)
        if isinstance(allowed, Err):
            return allowed

    try:
        return operation(user)
    except Exception as e:
        logger.exception(f"Unhandled error in {getattr(operation, '__name__', 'operation')}: {e}")
        return Err(ErrorKind.INTERNAL, "Internal server error")


def respond(result: Result, success_status: int = status.HTTP_200_OK, message: Optional[str] = None) -> JSONResponse:
    """Map a Result onto the response envelope and its HTTP status."""
    if isinstance(result, Ok):
        content: dict = {"success": True, "data": jsonable_encoder(result.value)}
        if message:
            content["message"] = message
        return JSONResponse(status_code=success_status, content=content)

    return error_response(result.status_code, result.detail)


def error_response(status_code: int, detail: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": detail})
