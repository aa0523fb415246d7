from typing import Optional

from fastapi import APIRouter, Depends, Query

from dealership.api.pipeline import get_request_context, respond, run_guarded
from dealership.core.context import RequestContext
from dealership.services.audit import list_audit_logs

router = APIRouter()

@router.get("")
def read_audit_logs(
    entity_type: Optional[str] = Query(None, description="e.g., 'SALE', 'VEHICLE'"),
    entity_id: Optional[str] = Query(None, description="Entity id"),
    user_id: Optional[str] = Query(None, description="Acting user id"),
    ctx: RequestContext = Depends(get_request_context),
):
    """
    Read the audit trail, newest first.

    Returns at most 1000 entries.
    """
    result = run_guarded(
        ctx,
        "VIEW_AUDIT_LOGS",
        lambda user: list_audit_logs(ctx.database, entity_type, entity_id, user_id),
    )
    return respond(result, message="Audit logs retrieved successfully")
