from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, status

from dealership.api.pipeline import get_request_context, respond, run_guarded
from dealership.core.context import RequestContext
from dealership.services import vehicles

router = APIRouter()

@router.get("")
def list_vehicles(
    status_filter: Optional[str] = Query(None, alias="status", description="Vehicle status"),
    vehicle_type: Optional[str] = Query(None, alias="type", description="e.g., 'new', 'used'"),
    make: Optional[str] = Query(None, description="Partial, case-insensitive make"),
    ctx: RequestContext = Depends(get_request_context),
):
    """List inventory vehicles, newest first."""
    result = run_guarded(
        ctx, "VIEW_VEHICLES", lambda user: vehicles.list_vehicles(ctx, status_filter, vehicle_type, make)
    )
    return respond(result, message="Vehicles retrieved successfully")

@router.post("")
def create_vehicle(body: Any = Body(None), ctx: RequestContext = Depends(get_request_context)):
    result = run_guarded(ctx, "CREATE_VEHICLES", lambda user: vehicles.create_vehicle(ctx, user, body))
    return respond(result, status.HTTP_201_CREATED, "Vehicle added successfully")

@router.get("/{vehicle_id}")
def get_vehicle(vehicle_id: str, ctx: RequestContext = Depends(get_request_context)):
    result = run_guarded(ctx, "VIEW_VEHICLES", lambda user: vehicles.get_vehicle(ctx, vehicle_id))
    return respond(result, message="Vehicle details retrieved successfully")

@router.put("/{vehicle_id}")
def update_vehicle(vehicle_id: str, body: Any = Body(None), ctx: RequestContext = Depends(get_request_context)):
    result = run_guarded(ctx, "EDIT_VEHICLES", lambda user: vehicles.update_vehicle(ctx, user, vehicle_id, body))
    return respond(result, message="Vehicle updated successfully")

@router.delete("/{vehicle_id}")
def delete_vehicle(vehicle_id: str, ctx: RequestContext = Depends(get_request_context)):
    """Remove a vehicle that has never been sold."""
    result = run_guarded(ctx, "DELETE_VEHICLES", lambda user: vehicles.delete_vehicle(ctx, user, vehicle_id))
    return respond(result, message="Vehicle removed successfully")

@router.get("/{vehicle_id}/trade-in-estimate")
def trade_in_estimate(
    vehicle_id: str,
    base_value: Optional[float] = Query(None, ge=0, description="Value before depreciation, defaults to the listed price"),
    ctx: RequestContext = Depends(get_request_context),
):
    result = run_guarded(
        ctx, "VIEW_VEHICLES", lambda user: vehicles.estimate_trade_in(ctx, vehicle_id, base_value)
    )
    return respond(result, message="Trade-in estimate calculated successfully")
