"""
Vehicle inventory. The Sold status is owned by the sales service: it is set
by sale creation and cleared by sale cancellation, never by a vehicle edit.
"""

import logging
from typing import Any, Optional

from sqlalchemy.orm import Session

from dealership.core.context import RequestContext
from dealership.core.result import Err, ErrorKind, Ok, Result, not_found
from dealership.core.security import CurrentUser
from dealership.models.sale import Sale
from dealership.models.service import RepairOrder, ServiceAppointment, ServiceHistory
from dealership.models.vehicle import Vehicle, VehicleStatus
from dealership.schemas.common import changed_fields, parse_payload
from dealership.schemas.vehicle import VehicleCreate, VehicleUpdate
from dealership.services.calculations import calculate_trade_in_value
from dealership.services.validation import sanitize_fields, validate_vin

logger = logging.getLogger(__name__)

ENTITY = "VEHICLE"
VEHICLE_STATUSES = {s.value for s in VehicleStatus}
SOLD_IS_MANAGED = Err(ErrorKind.BUSINESS_RULE, "Vehicle status Sold is managed through sales")


def list_vehicles(
    ctx: RequestContext,
    status: Optional[str] = None,
    vehicle_type: Optional[str] = None,
    make: Optional[str] = None,
) -> Result:
    with ctx.database.session() as session:
        query = session.query(Vehicle)
        if status:
            query = query.filter(Vehicle.status == status)
        if vehicle_type:
            query = query.filter(Vehicle.type == vehicle_type)
        if make:
            query = query.filter(Vehicle.make.ilike(f"%{make}%"))
        vehicles = query.order_by(Vehicle.created_at.desc()).all()
        return Ok([vehicle.to_dict() for vehicle in vehicles])


def create_vehicle(ctx: RequestContext, user: CurrentUser, body: Any) -> Result:
    parsed = parse_payload(VehicleCreate, body, ["vin", "make", "model", "year"])
    if isinstance(parsed, Err):
        return parsed
    fields = sanitize_fields(changed_fields(parsed.value))

    if not validate_vin(fields["vin"]):
        return Err(ErrorKind.VALIDATION, "Invalid VIN format")
    fields["vin"] = fields["vin"].upper()

    status = fields.setdefault("status", VehicleStatus.AVAILABLE.value)
    if status not in VEHICLE_STATUSES:
        return Err(ErrorKind.VALIDATION, "Invalid vehicle status")
    if status == VehicleStatus.SOLD.value:
        return SOLD_IS_MANAGED

    def create(session: Session) -> Result:
        if session.query(Vehicle.id).filter(Vehicle.vin == fields["vin"]).first() is not None:
            return Err(ErrorKind.CONFLICT, "Vehicle with this VIN already exists")
        vehicle = Vehicle(**fields)
        session.add(vehicle)
        session.flush()
        return Ok(vehicle.to_dict())

    result = ctx.database.transaction(create)
    if isinstance(result, Ok):
        ctx.audit.log_create(user.id, ENTITY, result.value["id"], result.value, ctx.client_ip)
    return result


def get_vehicle(ctx: RequestContext, vehicle_id: str) -> Result:
    with ctx.database.session() as session:
        vehicle = session.get(Vehicle, vehicle_id)
        if vehicle is None:
            return not_found("Vehicle")
        return Ok(vehicle.to_dict())


def update_vehicle(ctx: RequestContext, user: CurrentUser, vehicle_id: str, body: Any) -> Result:
    """
    Partial update of descriptive fields and non-Sold statuses.

    Moving a vehicle into or out of Sold is rejected with BUSINESS_RULE.
    """
    parsed = parse_payload(VehicleUpdate, body)
    if isinstance(parsed, Err):
        return parsed
    changes = sanitize_fields(changed_fields(parsed.value))
    if not changes:
        return Err(ErrorKind.VALIDATION, "No valid fields to update")

    new_status = changes.get("status")
    if new_status is not None and new_status not in VEHICLE_STATUSES:
        return Err(ErrorKind.VALIDATION, "Invalid vehicle status")

    def update(session: Session) -> Result:
        vehicle = session.get(Vehicle, vehicle_id)
        if vehicle is None:
            return not_found("Vehicle")

        if new_status is not None and new_status != vehicle.status:
            if VehicleStatus.SOLD.value in (new_status, vehicle.status):
                return SOLD_IS_MANAGED

        old_values = vehicle.to_dict()
        for name, value in changes.items():
            setattr(vehicle, name, value)
        session.flush()
        return Ok((old_values, vehicle.to_dict()))

    result = ctx.database.transaction(update)
    if isinstance(result, Err):
        return result

    old_values, new_values = result.value
    ctx.audit.log_update(user.id, ENTITY, vehicle_id, old_values, new_values, ctx.client_ip)
    return Ok(new_values)


def _has_service_records(session: Session, vehicle_id: str) -> bool:
    return any(
        session.query(model.id).filter(model.vehicle_id == vehicle_id).first() is not None
        for model in (ServiceAppointment, RepairOrder, ServiceHistory)
    )


def delete_vehicle(ctx: RequestContext, user: CurrentUser, vehicle_id: str) -> Result:
    def delete(session: Session) -> Result:
        vehicle = session.get(Vehicle, vehicle_id)
        if vehicle is None:
            return not_found("Vehicle")
        if session.query(Sale.id).filter(Sale.vehicle_id == vehicle_id).first() is not None:
            return Err(ErrorKind.BUSINESS_RULE, "Cannot delete vehicle with associated sales")
        if _has_service_records(session, vehicle_id):
            return Err(ErrorKind.BUSINESS_RULE, "Cannot delete vehicle with associated records")

        old_values = vehicle.to_dict()
        session.delete(vehicle)
        return Ok(old_values)

    result = ctx.database.transaction(delete)
    if isinstance(result, Ok):
        ctx.audit.log_delete(user.id, ENTITY, vehicle_id, result.value, ctx.client_ip)
    return result


def estimate_trade_in(ctx: RequestContext, vehicle_id: str, base_value: Optional[float] = None) -> Result:
    """Depreciated trade-in value, from ``base_value`` or else the vehicle's listed price."""
    with ctx.database.session() as session:
        vehicle = session.get(Vehicle, vehicle_id)
        if vehicle is None:
            return not_found("Vehicle")

        base = base_value if base_value is not None else (vehicle.sale_price or vehicle.purchase_price or 0)
        return Ok({
            "vehicle_id": vehicle.id,
            "base_value": base,
            "year": vehicle.year,
            "mileage": vehicle.mileage,
            "estimated_value": calculate_trade_in_value(base, vehicle.year, vehicle.mileage),
        })
