from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, status

from dealership.api.pipeline import get_request_context, respond, run_guarded
from dealership.core.context import RequestContext
from dealership.services import sales

router = APIRouter()

@router.get("")
def list_sales(
    status_filter: Optional[str] = Query(None, alias="status", description="Sale status"),
    salesperson_id: Optional[str] = Query(None, description="Salesperson user id"),
    ctx: RequestContext = Depends(get_request_context),
):
    result = run_guarded(ctx, "VIEW_SALES", lambda user: sales.list_sales(ctx, status_filter, salesperson_id))
    return respond(result, message="Sales retrieved successfully")

@router.post("")
def create_sale(body: Any = Body(None), ctx: RequestContext = Depends(get_request_context)):
    """
    Record a sale for the authenticated salesperson.

    The vehicle must be Available; it is marked Sold in the same transaction.
    """
    result = run_guarded(ctx, "CREATE_SALES", lambda user: sales.create_sale(ctx, user, body))
    return respond(result, status.HTTP_201_CREATED, "Sale created successfully")

@router.post("/quote")
def quote_sale(body: Any = Body(None), ctx: RequestContext = Depends(get_request_context)):
    """Price a deal with tax, fees and financing without recording anything."""
    result = run_guarded(ctx, "VIEW_SALES", lambda user: sales.quote_sale(body))
    return respond(result, message="Sale quote calculated successfully")

@router.get("/{sale_id}")
def get_sale(sale_id: str, ctx: RequestContext = Depends(get_request_context)):
    result = run_guarded(ctx, "VIEW_SALES", lambda user: sales.get_sale(ctx, sale_id))
    return respond(result, message="Sale details retrieved successfully")

@router.put("/{sale_id}")
def update_sale(sale_id: str, body: Any = Body(None), ctx: RequestContext = Depends(get_request_context)):
    result = run_guarded(ctx, "EDIT_SALES", lambda user: sales.update_sale(ctx, user, sale_id, body))
    return respond(result, message="Sale updated successfully")
