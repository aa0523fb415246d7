"""
Customer records and the customer detail view (purchases, services,
communications).
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from dealership.core.context import RequestContext
from dealership.core.result import Err, ErrorKind, Ok, Result, not_found
from dealership.core.security import CurrentUser
from dealership.models.communication import Communication
from dealership.models.customer import Customer
from dealership.models.sale import Sale
from dealership.models.service import ServiceHistory
from dealership.models.vehicle import Vehicle
from dealership.schemas.common import changed_fields, parse_payload
from dealership.schemas.customer import CustomerCreate, CustomerUpdate
from dealership.services.validation import sanitize_fields, validate_email, validate_phone, validate_zip_code

logger = logging.getLogger(__name__)

ENTITY = "CUSTOMER"
RECENT_LIMIT = 10


def _check_formats(fields: Dict[str, Any]) -> Optional[Err]:
    if "email" in fields and not validate_email(fields["email"]):
        return Err(ErrorKind.VALIDATION, "Invalid email format")
    if "phone" in fields and not validate_phone(fields["phone"]):
        return Err(ErrorKind.VALIDATION, "Invalid phone number format")
    if fields.get("zip") and not validate_zip_code(fields["zip"]):
        return Err(ErrorKind.VALIDATION, "Invalid ZIP code format")
    return None


def _duplicate_exists(session: Session, email: Optional[str], phone: Optional[str], exclude_id: Optional[str] = None) -> bool:
    clauses = []
    if email:
        clauses.append(Customer.email == email)
    if phone:
        clauses.append(Customer.phone == phone)
    if not clauses:
        return False
    query = session.query(Customer.id).filter(or_(*clauses))
    if exclude_id:
        query = query.filter(Customer.id != exclude_id)
    return query.first() is not None


def list_customers(ctx: RequestContext, search: Optional[str] = None) -> Result:
    with ctx.database.session() as session:
        query = session.query(Customer)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                Customer.name.ilike(pattern),
                Customer.email.ilike(pattern),
                Customer.phone.ilike(pattern),
            ))
        customers = query.order_by(Customer.created_at.desc()).all()
        return Ok([customer.to_dict() for customer in customers])


def create_customer(ctx: RequestContext, user: CurrentUser, body: Any) -> Result:
    """
    Create a customer after format and duplicate checks.

    An existing customer with the same email or the same phone is a conflict.
    """
    parsed = parse_payload(CustomerCreate, body, ["name", "email", "phone"])
    if isinstance(parsed, Err):
        return parsed
    fields = sanitize_fields(changed_fields(parsed.value))
    fields["email"] = fields["email"].lower()

    invalid = _check_formats(fields)
    if invalid:
        return invalid

    def create(session: Session) -> Result:
        if _duplicate_exists(session, fields["email"], fields["phone"]):
            return Err(ErrorKind.CONFLICT, "Customer with this email or phone already exists")
        customer = Customer(**fields)
        session.add(customer)
        session.flush()
        return Ok(customer.to_dict())

    result = ctx.database.transaction(create)
    if isinstance(result, Ok):
        ctx.audit.log_create(user.id, ENTITY, result.value["id"], result.value, ctx.client_ip)
    return result


def get_customer(ctx: RequestContext, customer_id: str) -> Result:
    """Customer with every purchase and the ten most recent services and communications."""
    with ctx.database.session() as session:
        customer = session.get(Customer, customer_id)
        if customer is None:
            return not_found("Customer")

        purchases = []
        rows = (
            session.query(Sale, Vehicle)
            .join(Vehicle, Sale.vehicle_id == Vehicle.id)
            .filter(Sale.customer_id == customer_id)
            .order_by(Sale.sale_date.desc())
            .all()
        )
        for sale, vehicle in rows:
            purchase = sale.to_dict()
            purchase.update({"make": vehicle.make, "model": vehicle.model, "year": vehicle.year, "vin": vehicle.vin})
            purchases.append(purchase)

        services = (
            session.query(ServiceHistory)
            .filter(ServiceHistory.customer_id == customer_id)
            .order_by(ServiceHistory.service_date.desc())
            .limit(RECENT_LIMIT)
            .all()
        )
        communications = (
            session.query(Communication)
            .filter(Communication.customer_id == customer_id)
            .order_by(Communication.sent_date.desc())
            .limit(RECENT_LIMIT)
            .all()
        )

        return Ok({
            "customer": customer.to_dict(),
            "purchases": purchases,
            "services": [record.to_dict() for record in services],
            "communications": [message.to_dict() for message in communications],
        })


def update_customer(ctx: RequestContext, user: CurrentUser, customer_id: str, body: Any) -> Result:
    parsed = parse_payload(CustomerUpdate, body)
    if isinstance(parsed, Err):
        return parsed
    changes = sanitize_fields(changed_fields(parsed.value))
    if not changes:
        return Err(ErrorKind.VALIDATION, "No valid fields to update")
    if "email" in changes:
        changes["email"] = changes["email"].lower()

    invalid = _check_formats(changes)
    if invalid:
        return invalid

    def update(session: Session) -> Result:
        customer = session.get(Customer, customer_id)
        if customer is None:
            return not_found("Customer")
        old_values = customer.to_dict()

        if _duplicate_exists(session, changes.get("email"), changes.get("phone"), exclude_id=customer_id):
            return Err(ErrorKind.CONFLICT, "Customer with this email or phone already exists")

        for name, value in changes.items():
            setattr(customer, name, value)
        session.flush()
        return Ok((old_values, customer.to_dict()))

    result = ctx.database.transaction(update)
    if isinstance(result, Err):
        return result

    old_values, new_values = result.value
    ctx.audit.log_update(user.id, ENTITY, customer_id, old_values, new_values, ctx.client_ip)
    return Ok(new_values)
