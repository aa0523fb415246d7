from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, status

from dealership.api.pipeline import get_request_context, respond, run_guarded
from dealership.core.context import RequestContext
from dealership.services import parts

router = APIRouter()

@router.get("")
def list_parts(
    search: Optional[str] = Query(None, description="Match on part number or description"),
    category: Optional[str] = Query(None, description="Category"),
    low_stock: bool = Query(False, description="Only parts at or below their reorder level"),
    ctx: RequestContext = Depends(get_request_context),
):
    result = run_guarded(ctx, "VIEW_PARTS", lambda user: parts.list_parts(ctx, search, category, low_stock))
    return respond(result, message="Parts retrieved successfully")

@router.post("")
def create_part(body: Any = Body(None), ctx: RequestContext = Depends(get_request_context)):
    result = run_guarded(ctx, "CREATE_PARTS", lambda user: parts.create_part(ctx, user, body))
    return respond(result, status.HTTP_201_CREATED, "Part added successfully")

@router.put("/{part_id}")
def update_part(part_id: str, body: Any = Body(None), ctx: RequestContext = Depends(get_request_context)):
    """Edit a part; restocking is done by setting quantity_on_hand."""
    result = run_guarded(ctx, "EDIT_PARTS", lambda user: parts.update_part(ctx, user, part_id, body))
    return respond(result, message="Part updated successfully")
