"""
Vehicle sales.

Creating a sale and marking its vehicle Sold happen in one transaction, with
the vehicle row locked so two sales of the same vehicle cannot both see it
Available. Cancelling a sale returns the vehicle to Available the same way.
"""

import logging
from typing import Any, Optional

from sqlalchemy.orm import Session

from dealership.core.context import RequestContext
from dealership.core.result import Err, ErrorKind, Ok, Result, not_found
from dealership.core.security import CurrentUser
from dealership.db.base_model import utcnow
from dealership.models.customer import Customer
from dealership.models.sale import Sale, SaleStatus
from dealership.models.user import User
from dealership.models.vehicle import Vehicle, VehicleStatus
from dealership.schemas.common import changed_fields, parse_payload
from dealership.schemas.sale import SaleCreate, SaleQuoteRequest, SaleUpdate
from dealership.services.calculations import calculate_monthly_payment, calculate_sale_total, round_money
from dealership.services.validation import sanitize_fields, validate_sale_status

logger = logging.getLogger(__name__)

ENTITY = "SALE"
CLOSED_SALE_ERRORS = {
    SaleStatus.COMPLETED.value: Err(ErrorKind.BUSINESS_RULE, "Cannot edit completed sales"),
    SaleStatus.CANCELLED.value: Err(ErrorKind.BUSINESS_RULE, "Cannot edit cancelled sales"),
}


def list_sales(ctx: RequestContext, status: Optional[str] = None, salesperson_id: Optional[str] = None) -> Result:
    with ctx.database.session() as session:
        query = (
            session.query(Sale, Customer.name, Vehicle.make, Vehicle.model, Vehicle.year)
            .join(Customer, Sale.customer_id == Customer.id)
            .join(Vehicle, Sale.vehicle_id == Vehicle.id)
        )
        if status:
            query = query.filter(Sale.sale_status == status)
        if salesperson_id:
            query = query.filter(Sale.salesperson_id == salesperson_id)

        sales = []
        for sale, customer_name, make, model, year in query.order_by(Sale.sale_date.desc()).all():
            data = sale.to_dict()
            data.update({"customer_name": customer_name, "make": make, "model": model, "year": year})
            sales.append(data)
        return Ok(sales)


def _financing(payload: SaleCreate) -> dict:
    """Amount financed and monthly payment, when the deal carries loan terms."""
    if not payload.term_months:
        return {}
    totals = calculate_sale_total(
        sale_price=payload.sale_price,
        trade_in_value=payload.trade_in_value or 0,
        down_payment=payload.down_payment or 0,
    )
    amount_financed = max(totals["amount_financed"], 0.0)
    return {
        "amount_financed": amount_financed,
        "monthly_payment": calculate_monthly_payment(amount_financed, payload.interest_rate or 0, payload.term_months),
    }


def create_sale(ctx: RequestContext, user: CurrentUser, body: Any) -> Result:
    """
    Record a sale and mark the vehicle Sold, all or nothing.

    Args:
        ctx: Request context
        user: Authenticated salesperson
        body: Raw request body

    Returns:
        ``Ok(sale dict)``; NOT_FOUND for an unknown customer or vehicle,
        BUSINESS_RULE when the vehicle is no longer Available
    """
    parsed = parse_payload(SaleCreate, body, ["customer_id", "vehicle_id", "sale_price"])
    if isinstance(parsed, Err):
        return parsed
    payload = parsed.value

    with ctx.database.session() as session:
        if session.get(Customer, payload.customer_id) is None:
            return not_found("Customer")
        if session.get(Vehicle, payload.vehicle_id) is None:
            return not_found("Vehicle")

    fields = sanitize_fields(changed_fields(payload))
    fields.update(_financing(payload))

    def create(session: Session) -> Result:
        vehicle = (
            session.query(Vehicle)
            .filter(Vehicle.id == payload.vehicle_id)
            .with_for_update()
            .one_or_none()
        )
        if vehicle is None:
            return not_found("Vehicle")
        if vehicle.status != VehicleStatus.AVAILABLE.value:
            return Err(ErrorKind.BUSINESS_RULE, "Vehicle is not available for sale")

        sale = Sale(
            **fields,
            sale_date=utcnow(),
            salesperson_id=user.id,
            sale_status=SaleStatus.PENDING.value,
        )
        session.add(sale)
        vehicle.status = VehicleStatus.SOLD.value
        session.flush()
        return Ok(sale.to_dict())

    result = ctx.database.transaction(create)
    if isinstance(result, Err):
        return result

    sale = result.value
    logger.info(f"Sale {sale['id']} created; vehicle {payload.vehicle_id} marked Sold")
    ctx.audit.log_create(user.id, ENTITY, sale["id"], sale, ctx.client_ip)
    return result


def get_sale(ctx: RequestContext, sale_id: str) -> Result:
    """Sale with its customer, vehicle and salesperson."""
    with ctx.database.session() as session:
        sale = session.get(Sale, sale_id)
        if sale is None:
            return not_found("Sale")

        customer = session.get(Customer, sale.customer_id)
        vehicle = session.get(Vehicle, sale.vehicle_id)
        salesperson = session.get(User, sale.salesperson_id)

        data = sale.to_dict()
        data["customer"] = customer.to_dict() if customer else None
        data["vehicle"] = vehicle.to_dict() if vehicle else None
        data["salesperson_name"] = salesperson.name if salesperson else None
        return Ok(data)


def update_sale(ctx: RequestContext, user: CurrentUser, sale_id: str, body: Any) -> Result:
    """
    Partial sale update.

    Completed and cancelled sales are frozen. Moving a sale to Cancelled puts
    its vehicle back to Available in the same transaction.
    """
    parsed = parse_payload(SaleUpdate, body)
    if isinstance(parsed, Err):
        return parsed
    changes = sanitize_fields(changed_fields(parsed.value))
    if not changes:
        return Err(ErrorKind.VALIDATION, "No valid fields to update")

    new_status = changes.get("sale_status")
    if new_status is not None and not validate_sale_status(new_status):
        return Err(ErrorKind.VALIDATION, "Invalid sale status")

    def update(session: Session) -> Result:
        sale = session.query(Sale).filter(Sale.id == sale_id).with_for_update().one_or_none()
        if sale is None:
            return not_found("Sale")
        if sale.sale_status in CLOSED_SALE_ERRORS:
            return CLOSED_SALE_ERRORS[sale.sale_status]

        old_values = sale.to_dict()
        for name, value in changes.items():
            setattr(sale, name, value)

        if new_status == SaleStatus.CANCELLED.value:
            vehicle = session.query(Vehicle).filter(Vehicle.id == sale.vehicle_id).with_for_update().one_or_none()
            if vehicle is not None and vehicle.status == VehicleStatus.SOLD.value:
                vehicle.status = VehicleStatus.AVAILABLE.value
                logger.info(f"Sale {sale_id} cancelled; vehicle {vehicle.id} back to Available")

        session.flush()
        return Ok((old_values, sale.to_dict()))

    result = ctx.database.transaction(update)
    if isinstance(result, Err):
        return result

    old_values, new_values = result.value
    ctx.audit.log_update(user.id, ENTITY, sale_id, old_values, new_values, ctx.client_ip)
    return Ok(new_values)


def quote_sale(body: Any) -> Result:
    """Price a deal (tax, fees, financing) without touching the database."""
    parsed = parse_payload(SaleQuoteRequest, body, ["sale_price"])
    if isinstance(parsed, Err):
        return parsed
    payload = parsed.value

    quote = calculate_sale_total(
        sale_price=payload.sale_price,
        trade_in_value=payload.trade_in_value,
        down_payment=payload.down_payment,
        tax_rate=payload.tax_rate,
        fees=payload.fees,
    )
    principal = max(quote["amount_financed"], 0.0)
    quote["interest_rate"] = round_money(payload.interest_rate)
    quote["term_months"] = payload.term_months
    quote["monthly_payment"] = calculate_monthly_payment(principal, payload.interest_rate, payload.term_months or 0)
    return Ok(quote)
