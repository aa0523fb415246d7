"""
Service department: appointments, repair orders and vehicle service history.

Two operations here span several rows and run as single transactions:

* adding an item inserts the line, draws part stock down and re-totals the order;
* completing an order writes the status and a service-history record together.
"""

import logging
from typing import Any, Optional

from sqlalchemy.orm import Session

from dealership.core.context import RequestContext
from dealership.core.permissions import Role
from dealership.core.result import Err, ErrorKind, Ok, Result, not_found
from dealership.core.security import CurrentUser
from dealership.db.base_model import utcnow
from dealership.models.customer import Customer
from dealership.models.part import Part
from dealership.models.service import (
    ACTIVE_APPOINTMENT_STATUSES,
    ItemType,
    RepairOrder,
    RepairOrderItem,
    RepairOrderStatus,
    ServiceAppointment,
    ServiceHistory,
)
from dealership.models.user import User
from dealership.models.vehicle import Vehicle
from dealership.schemas.common import changed_fields, parse_payload
from dealership.schemas.service import (
    AppointmentCreate,
    AppointmentUpdate,
    RepairOrderCreate,
    RepairOrderItemCreate,
    RepairOrderUpdate,
)
from dealership.services.calculations import calculate_repair_order_total, round_money
from dealership.services.validation import (
    sanitize_fields,
    validate_item_type,
    validate_repair_order_status,
    validate_service_status,
)

logger = logging.getLogger(__name__)

SLOT_TAKEN = Err(ErrorKind.CONFLICT, "Technician already has an appointment at this time")
COMPLETED = RepairOrderStatus.COMPLETED.value


def _slot_taken(session: Session, technician_id: Optional[str], when, exclude_id: Optional[str] = None) -> bool:
    if not technician_id or when is None:
        return False
    query = session.query(ServiceAppointment.id).filter(
        ServiceAppointment.assigned_technician_id == technician_id,
        ServiceAppointment.appointment_date == when,
        ServiceAppointment.status.in_(ACTIVE_APPOINTMENT_STATUSES),
    )
    if exclude_id:
        query = query.filter(ServiceAppointment.id != exclude_id)
    return query.first() is not None


def _technician_exists(session: Session, technician_id: Optional[str]) -> bool:
    return not technician_id or session.get(User, technician_id) is not None


# Appointments

def list_appointments(ctx: RequestContext, status: Optional[str] = None, technician_id: Optional[str] = None) -> Result:
    with ctx.database.session() as session:
        query = (
            session.query(ServiceAppointment, Customer.name, Vehicle.make, Vehicle.model, Vehicle.year)
            .join(Customer, ServiceAppointment.customer_id == Customer.id)
            .join(Vehicle, ServiceAppointment.vehicle_id == Vehicle.id)
        )
        if status:
            query = query.filter(ServiceAppointment.status == status)
        if technician_id:
            query = query.filter(ServiceAppointment.assigned_technician_id == technician_id)

        appointments = []
        for appointment, customer_name, make, model, year in query.order_by(ServiceAppointment.appointment_date.asc()).all():
            data = appointment.to_dict()
            data.update({"customer_name": customer_name, "make": make, "model": model, "year": year})
            appointments.append(data)
        return Ok(appointments)


def create_appointment(ctx: RequestContext, user: CurrentUser, body: Any) -> Result:
    parsed = parse_payload(
        AppointmentCreate, body, ["customer_id", "vehicle_id", "appointment_date", "service_type"]
    )
    if isinstance(parsed, Err):
        return parsed
    fields = sanitize_fields(changed_fields(parsed.value))

    def create(session: Session) -> Result:
        if session.get(Customer, fields["customer_id"]) is None:
            return not_found("Customer")
        if session.get(Vehicle, fields["vehicle_id"]) is None:
            return not_found("Vehicle")
        if not _technician_exists(session, fields.get("assigned_technician_id")):
            return not_found("Technician")
        if _slot_taken(session, fields.get("assigned_technician_id"), fields["appointment_date"]):
            return SLOT_TAKEN

        appointment = ServiceAppointment(**fields)
        session.add(appointment)
        session.flush()
        return Ok(appointment.to_dict())

    result = ctx.database.transaction(create)
    if isinstance(result, Ok):
        ctx.audit.log_create(user.id, "APPOINTMENT", result.value["id"], result.value, ctx.client_ip)
    return result


def update_appointment(ctx: RequestContext, user: CurrentUser, appointment_id: str, body: Any) -> Result:
    """Partial update; a new technician or time is checked against other active appointments."""
    parsed = parse_payload(AppointmentUpdate, body)
    if isinstance(parsed, Err):
        return parsed
    changes = sanitize_fields(changed_fields(parsed.value))
    if not changes:
        return Err(ErrorKind.VALIDATION, "No valid fields to update")
    if "status" in changes and not validate_service_status(changes["status"]):
        return Err(ErrorKind.VALIDATION, "Invalid appointment status")

    def update(session: Session) -> Result:
        appointment = session.get(ServiceAppointment, appointment_id)
        if appointment is None:
            return not_found("Appointment")

        if not _technician_exists(session, changes.get("assigned_technician_id")):
            return not_found("Technician")
        if "assigned_technician_id" in changes or "appointment_date" in changes:
            technician_id = changes.get("assigned_technician_id", appointment.assigned_technician_id)
            when = changes.get("appointment_date", appointment.appointment_date)
            if _slot_taken(session, technician_id, when, exclude_id=appointment_id):
                return SLOT_TAKEN

        old_values = appointment.to_dict()
        for name, value in changes.items():
            setattr(appointment, name, value)
        session.flush()
        return Ok((old_values, appointment.to_dict()))

    result = ctx.database.transaction(update)
    if isinstance(result, Err):
        return result

    old_values, new_values = result.value
    ctx.audit.log_update(user.id, "APPOINTMENT", appointment_id, old_values, new_values, ctx.client_ip)
    return Ok(new_values)


# Repair orders

def list_repair_orders(ctx: RequestContext, status: Optional[str] = None) -> Result:
    with ctx.database.session() as session:
        query = (
            session.query(RepairOrder, Customer.name, Vehicle.make, Vehicle.model, Vehicle.vin, User.name)
            .join(Customer, RepairOrder.customer_id == Customer.id)
            .join(Vehicle, RepairOrder.vehicle_id == Vehicle.id)
            .outerjoin(User, RepairOrder.technician_id == User.id)
        )
        if status:
            query = query.filter(RepairOrder.status == status)

        orders = []
        for order, customer_name, make, model, vin, technician_name in query.order_by(RepairOrder.open_date.desc()).all():
            data = order.to_dict()
            data.update({
                "customer_name": customer_name,
                "make": make,
                "model": model,
                "vin": vin,
                "technician_name": technician_name,
            })
            orders.append(data)
        return Ok(orders)


def create_repair_order(ctx: RequestContext, user: CurrentUser, body: Any) -> Result:
    parsed = parse_payload(RepairOrderCreate, body, ["customer_id", "vehicle_id", "technician_id"])
    if isinstance(parsed, Err):
        return parsed
    fields = changed_fields(parsed.value)

    def create(session: Session) -> Result:
        if session.get(Customer, fields["customer_id"]) is None:
            return not_found("Customer")
        if session.get(Vehicle, fields["vehicle_id"]) is None:
            return not_found("Vehicle")
        if session.get(User, fields["technician_id"]) is None:
            return not_found("Technician")
        if fields.get("appointment_id") and session.get(ServiceAppointment, fields["appointment_id"]) is None:
            return not_found("Appointment")

        order = RepairOrder(
            **fields,
            open_date=utcnow(),
            status=RepairOrderStatus.OPEN.value,
            labor_total=0.0,
            parts_total=0.0,
            tax=0.0,
            total_amount=0.0,
        )
        session.add(order)
        session.flush()
        return Ok(order.to_dict())

    result = ctx.database.transaction(create)
    if isinstance(result, Ok):
        ctx.audit.log_create(user.id, "REPAIR_ORDER", result.value["id"], result.value, ctx.client_ip)
    return result


def get_repair_order(ctx: RequestContext, order_id: str) -> Result:
    with ctx.database.session() as session:
        order = session.get(RepairOrder, order_id)
        if order is None:
            return not_found("Repair order")

        items = (
            session.query(RepairOrderItem)
            .filter(RepairOrderItem.repair_order_id == order_id)
            .order_by(RepairOrderItem.created_at.asc())
            .all()
        )
        customer = session.get(Customer, order.customer_id)
        vehicle = session.get(Vehicle, order.vehicle_id)

        data = order.to_dict()
        data["items"] = [item.to_dict() for item in items]
        data["customer_name"] = customer.name if customer else None
        data["vehicle"] = vehicle.to_dict() if vehicle else None
        return Ok(data)


def add_repair_order_item(ctx: RequestContext, user: CurrentUser, order_id: str, body: Any) -> Result:
    """
    Add a labor or part line to an open repair order.

    In one transaction: insert the line, decrement the referenced part's stock
    for part lines, and overwrite the order totals with a recomputation over
    all of its lines.

    Returns:
        ``Ok({"item", "repair_order"})``; NOT_FOUND for an unknown order or
        part, BUSINESS_RULE when the order is already completed
    """
    parsed = parse_payload(RepairOrderItemCreate, body, ["type", "description", "quantity", "unit_price"])
    if isinstance(parsed, Err):
        return parsed
    payload = parsed.value
    if not validate_item_type(payload.type):
        return Err(ErrorKind.VALIDATION, "Item type must be 'labor' or 'part'")
    fields = sanitize_fields(changed_fields(payload))

    def add_item(session: Session) -> Result:
        order = session.query(RepairOrder).filter(RepairOrder.id == order_id).with_for_update().one_or_none()
        if order is None:
            return not_found("Repair order")
        if order.status == COMPLETED:
            return Err(ErrorKind.BUSINESS_RULE, "Cannot add items to completed repair orders")
        if payload.part_id and session.get(Part, payload.part_id) is None:
            return not_found("Part")

        item = RepairOrderItem(
            **fields,
            repair_order_id=order_id,
            total_price=round_money(payload.quantity * payload.unit_price),
        )
        session.add(item)

        if payload.type == ItemType.PART.value and payload.part_id:
            updated = (
                session.query(Part)
                .filter(Part.id == payload.part_id)
                .update(
                    {Part.quantity_on_hand: Part.quantity_on_hand - payload.quantity},
                    synchronize_session=False,
                )
            )
            if not updated:
                return not_found("Part")
            part = session.get(Part, payload.part_id, populate_existing=True)
            if part.quantity_on_hand < 0:
                logger.warning(f"Part {part.part_number} stock is negative ({part.quantity_on_hand})")
            elif part.low_stock:
                logger.info(f"Part {part.part_number} at or below reorder level ({part.quantity_on_hand})")

        session.flush()
        items = session.query(RepairOrderItem).filter(RepairOrderItem.repair_order_id == order_id).all()
        totals = calculate_repair_order_total(items)
        order.labor_total = totals["labor_total"]
        order.parts_total = totals["parts_total"]
        order.tax = totals["tax"]
        order.total_amount = totals["total"]
        session.flush()
        return Ok({"item": item.to_dict(), "repair_order": order.to_dict()})

    result = ctx.database.transaction(add_item)
    if isinstance(result, Ok):
        item = result.value["item"]
        ctx.audit.log_create(user.id, "REPAIR_ORDER_ITEM", item["id"], item, ctx.client_ip)
    return result


def update_repair_order(ctx: RequestContext, user: CurrentUser, order_id: str, body: Any) -> Result:
    """
    Status/mileage/close-date update.

    Completing an open order writes a service-history record in the same
    transaction. A completed order can only be edited by an admin.
    """
    parsed = parse_payload(RepairOrderUpdate, body)
    if isinstance(parsed, Err):
        return parsed
    changes = changed_fields(parsed.value)
    if not changes:
        return Err(ErrorKind.VALIDATION, "No valid fields to update")
    if "status" in changes and not validate_repair_order_status(changes["status"]):
        return Err(ErrorKind.VALIDATION, "Invalid repair order status")

    def update(session: Session) -> Result:
        order = session.query(RepairOrder).filter(RepairOrder.id == order_id).with_for_update().one_or_none()
        if order is None:
            return not_found("Repair order")
        if order.status == COMPLETED and user.role != Role.ADMIN.value:
            return Err(ErrorKind.BUSINESS_RULE, "Cannot edit completed repair orders")

        old_values = order.to_dict()
        completing = changes.get("status") == COMPLETED and order.status != COMPLETED
        for name, value in changes.items():
            setattr(order, name, value)

        if completing:
            now = utcnow()
            if order.close_date is None:
                order.close_date = now
            session.add(ServiceHistory(
                vehicle_id=order.vehicle_id,
                customer_id=order.customer_id,
                technician_id=order.technician_id,
                repair_order_id=order.id,
                service_date=now,
                mileage=order.mileage,
                service_type="Repair",
                description=f"Repair order {order.id} completed",
                cost=order.total_amount or 0.0,
            ))
            logger.info(f"Repair order {order_id} completed; service history recorded")

        session.flush()
        return Ok((old_values, order.to_dict()))

    result = ctx.database.transaction(update)
    if isinstance(result, Err):
        return result

    old_values, new_values = result.value
    ctx.audit.log_update(user.id, "REPAIR_ORDER", order_id, old_values, new_values, ctx.client_ip)
    return Ok(new_values)


def get_service_history(ctx: RequestContext, vehicle_id: str) -> Result:
    with ctx.database.session() as session:
        rows = (
            session.query(ServiceHistory, User.name)
            .outerjoin(User, ServiceHistory.technician_id == User.id)
            .filter(ServiceHistory.vehicle_id == vehicle_id)
            .order_by(ServiceHistory.service_date.desc())
            .all()
        )
        history = []
        for record, technician_name in rows:
            data = record.to_dict()
            data["technician_name"] = technician_name
            history.append(data)
        return Ok(history)
