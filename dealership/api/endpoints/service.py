from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, status

from dealership.api.pipeline import get_request_context, respond, run_guarded
from dealership.core.context import RequestContext
from dealership.services import service_department

router = APIRouter()

@router.get("/appointments")
def list_appointments(
    status_filter: Optional[str] = Query(None, alias="status", description="Appointment status"),
    technician_id: Optional[str] = Query(None, description="Assigned technician"),
    ctx: RequestContext = Depends(get_request_context),
):
    """List appointments, earliest first."""
    result = run_guarded(
        ctx,
        "VIEW_APPOINTMENTS",
        lambda user: service_department.list_appointments(ctx, status_filter, technician_id),
    )
    return respond(result, message="Appointments retrieved successfully")

@router.post("/appointments")
def create_appointment(body: Any = Body(None), ctx: RequestContext = Depends(get_request_context)):
    result = run_guarded(
        ctx, "CREATE_APPOINTMENTS", lambda user: service_department.create_appointment(ctx, user, body)
    )
    return respond(result, status.HTTP_201_CREATED, "Appointment scheduled successfully")

@router.put("/appointments/{appointment_id}")
def update_appointment(appointment_id: str, body: Any = Body(None), ctx: RequestContext = Depends(get_request_context)):
    result = run_guarded(
        ctx,
        "EDIT_APPOINTMENTS",
        lambda user: service_department.update_appointment(ctx, user, appointment_id, body),
    )
    return respond(result, message="Appointment updated successfully")

@router.get("/repair-orders")
def list_repair_orders(
    status_filter: Optional[str] = Query(None, alias="status", description="Open or Completed"),
    ctx: RequestContext = Depends(get_request_context),
):
    result = run_guarded(
        ctx, "VIEW_REPAIR_ORDERS", lambda user: service_department.list_repair_orders(ctx, status_filter)
    )
    return respond(result, message="Repair orders retrieved successfully")

@router.post("/repair-orders")
def create_repair_order(body: Any = Body(None), ctx: RequestContext = Depends(get_request_context)):
    result = run_guarded(
        ctx, "CREATE_REPAIR_ORDERS", lambda user: service_department.create_repair_order(ctx, user, body)
    )
    return respond(result, status.HTTP_201_CREATED, "Repair order created successfully")

@router.get("/repair-orders/{order_id}")
def get_repair_order(order_id: str, ctx: RequestContext = Depends(get_request_context)):
    """Repair order with its line items."""
    result = run_guarded(
        ctx, "VIEW_REPAIR_ORDERS", lambda user: service_department.get_repair_order(ctx, order_id)
    )
    return respond(result, message="Repair order retrieved successfully")

@router.put("/repair-orders/{order_id}")
def update_repair_order(order_id: str, body: Any = Body(None), ctx: RequestContext = Depends(get_request_context)):
    """
    Update a repair order.

    Setting the status to Completed also records a service-history entry.
    """
    result = run_guarded(
        ctx,
        "EDIT_REPAIR_ORDERS",
        lambda user: service_department.update_repair_order(ctx, user, order_id, body),
    )
    return respond(result, message="Repair order updated successfully")

@router.post("/repair-orders/{order_id}/items")
def add_repair_order_item(order_id: str, body: Any = Body(None), ctx: RequestContext = Depends(get_request_context)):
    """
    Add a labor or part line.

    Part lines draw the part's stock down, and the order totals are recomputed.
    """
    result = run_guarded(
        ctx,
        "EDIT_REPAIR_ORDERS",
        lambda user: service_department.add_repair_order_item(ctx, user, order_id, body),
    )
    return respond(result, status.HTTP_201_CREATED, "Item added successfully")

@router.get("/history/{vehicle_id}")
def get_service_history(vehicle_id: str, ctx: RequestContext = Depends(get_request_context)):
    result = run_guarded(
        ctx, "VIEW_REPAIR_ORDERS", lambda user: service_department.get_service_history(ctx, vehicle_id)
    )
    return respond(result, message="Service history retrieved successfully")
