from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, status

from dealership.api.pipeline import get_request_context, respond, run_guarded
from dealership.core.context import RequestContext
from dealership.services import leads

router = APIRouter()

@router.get("")
def list_leads(
    status_filter: Optional[str] = Query(None, alias="status", description="Lead status"),
    assigned_to: Optional[str] = Query(None, description="Assignee user id"),
    ctx: RequestContext = Depends(get_request_context),
):
    """
    List the leads visible to the caller, each with its score and priority.

    Admins see every lead; other roles see only leads assigned to them.
    """
    result = run_guarded(
        ctx, "VIEW_LEADS", lambda user: leads.list_leads(ctx, user, status_filter, assigned_to)
    )
    return respond(result, message="Leads retrieved successfully")

@router.post("")
def create_lead(body: Any = Body(None), ctx: RequestContext = Depends(get_request_context)):
    result = run_guarded(ctx, "CREATE_LEADS", lambda user: leads.create_lead(ctx, user, body))
    return respond(result, status.HTTP_201_CREATED, "Lead created successfully")

@router.get("/{lead_id}")
def get_lead(lead_id: str, ctx: RequestContext = Depends(get_request_context)):
    result = run_guarded(ctx, "VIEW_LEADS", lambda user: leads.get_lead(ctx, user, lead_id))
    return respond(result, message="Lead retrieved successfully")

@router.put("/{lead_id}")
def update_lead(lead_id: str, body: Any = Body(None), ctx: RequestContext = Depends(get_request_context)):
    result = run_guarded(ctx, "EDIT_LEADS", lambda user: leads.update_lead(ctx, user, lead_id, body))
    return respond(result, message="Lead updated successfully")

@router.delete("/{lead_id}")
def delete_lead(lead_id: str, ctx: RequestContext = Depends(get_request_context)):
    result = run_guarded(ctx, "DELETE_LEADS", lambda user: leads.delete_lead(ctx, user, lead_id))
    return respond(result, message="Lead deleted successfully")
