from fastapi import APIRouter, Depends

from dealership.api.pipeline import get_request_context, respond, run_guarded
from dealership.core.context import RequestContext
from dealership.services import analytics

router = APIRouter()

@router.get("/dashboard")
def dashboard(ctx: RequestContext = Depends(get_request_context)):
    """Headline sales, lead, inventory and service figures. Open to any signed-in user."""
    result = run_guarded(ctx, None, lambda user: analytics.dashboard_metrics(ctx))
    return respond(result, message="Dashboard metrics retrieved successfully")

@router.get("/sales")
def sales(ctx: RequestContext = Depends(get_request_context)):
    result = run_guarded(ctx, "VIEW_SALES", lambda user: analytics.sales_analytics(ctx))
    return respond(result, message="Sales analytics retrieved successfully")

@router.get("/inventory")
def inventory(ctx: RequestContext = Depends(get_request_context)):
    result = run_guarded(ctx, "VIEW_VEHICLES", lambda user: analytics.inventory_analytics(ctx))
    return respond(result, message="Inventory analytics retrieved successfully")
