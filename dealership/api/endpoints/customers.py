from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, status

from dealership.api.pipeline import get_request_context, respond, run_guarded
from dealership.core.context import RequestContext
from dealership.services import customers

router = APIRouter()

@router.get("")
def list_customers(
    search: Optional[str] = Query(None, description="Match on name, email or phone"),
    ctx: RequestContext = Depends(get_request_context),
):
    """List customers, newest first."""
    result = run_guarded(ctx, "VIEW_CUSTOMERS", lambda user: customers.list_customers(ctx, search))
    return respond(result, message="Customers retrieved successfully")

@router.post("")
def create_customer(body: Any = Body(None), ctx: RequestContext = Depends(get_request_context)):
    result = run_guarded(ctx, "CREATE_CUSTOMERS", lambda user: customers.create_customer(ctx, user, body))
    return respond(result, status.HTTP_201_CREATED, "Customer created successfully")

@router.get("/{customer_id}")
def get_customer(customer_id: str, ctx: RequestContext = Depends(get_request_context)):
    """Customer with purchases, recent services and recent communications."""
    result = run_guarded(ctx, "VIEW_CUSTOMERS", lambda user: customers.get_customer(ctx, customer_id))
    return respond(result, message="Customer details retrieved successfully")

@router.put("/{customer_id}")
def update_customer(customer_id: str, body: Any = Body(None), ctx: RequestContext = Depends(get_request_context)):
    result = run_guarded(
        ctx, "EDIT_CUSTOMERS", lambda user: customers.update_customer(ctx, user, customer_id, body)
    )
    return respond(result, message="Customer updated successfully")
