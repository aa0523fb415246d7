from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, status

from dealership.api.pipeline import get_request_context, respond, run_guarded
from dealership.core.context import RequestContext
from dealership.services import communications

router = APIRouter()

@router.get("")
def list_communications(
    customer_id: Optional[str] = Query(None, description="Only messages to this customer"),
    ctx: RequestContext = Depends(get_request_context),
):
    result = run_guarded(
        ctx, "VIEW_COMMUNICATIONS", lambda user: communications.list_communications(ctx, customer_id)
    )
    return respond(result, message="Communications retrieved successfully")

@router.post("")
def send_communication(body: Any = Body(None), ctx: RequestContext = Depends(get_request_context)):
    """Send an email or SMS and record it as Sent or Failed."""
    result = run_guarded(
        ctx, "SEND_COMMUNICATIONS", lambda user: communications.send_communication(ctx, user, body)
    )
    return respond(result, status.HTTP_201_CREATED, "Communication sent successfully")
