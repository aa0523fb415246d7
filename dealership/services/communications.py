"""
Customer communications: deliver through the notifier, then record the
message with the delivery outcome.
"""

import logging
from typing import Any, Optional

from sqlalchemy.orm import Session

from dealership.core.context import RequestContext
from dealership.core.result import Err, ErrorKind, Ok, Result, not_found
from dealership.core.security import CurrentUser
from dealership.db.base_model import utcnow
from dealership.models.communication import Communication, CommunicationStatus, CommunicationType
from dealership.models.customer import Customer
from dealership.models.user import User
from dealership.schemas.common import parse_payload
from dealership.schemas.communication import CommunicationCreate
from dealership.services.notifications import NotificationResult
from dealership.services.validation import sanitize_input

logger = logging.getLogger(__name__)

DEFAULT_SUBJECT = "Message from Dealership"


def list_communications(ctx: RequestContext, customer_id: Optional[str] = None) -> Result:
    with ctx.database.session() as session:
        query = (
            session.query(Communication, Customer.name, User.name)
            .join(Customer, Communication.customer_id == Customer.id)
            .outerjoin(User, Communication.sent_by == User.id)
        )
        if customer_id:
            query = query.filter(Communication.customer_id == customer_id)

        communications = []
        for communication, customer_name, sender_name in query.order_by(Communication.sent_date.desc()).all():
            data = communication.to_dict()
            data.update({"customer_name": customer_name, "sent_by_name": sender_name})
            communications.append(data)
        return Ok(communications)


def _deliver(ctx: RequestContext, customer: Customer, payload: CommunicationCreate) -> Optional[NotificationResult]:
    if payload.type == CommunicationType.EMAIL.value and customer.email:
        return ctx.notifier.send_email(customer.email, payload.subject or DEFAULT_SUBJECT, payload.message)
    if payload.type == CommunicationType.SMS.value and customer.phone:
        return ctx.notifier.send_sms(customer.phone, payload.message)
    return None


def send_communication(ctx: RequestContext, user: CurrentUser, body: Any) -> Result:
    """
    Send an email or SMS to a customer and record it.

    The record is written whether or not delivery succeeded; its status is
    Sent or Failed accordingly.
    """
    parsed = parse_payload(CommunicationCreate, body, ["customer_id", "type", "message"])
    if isinstance(parsed, Err):
        return parsed
    payload = parsed.value
    if payload.type not in {t.value for t in CommunicationType}:
        return Err(ErrorKind.VALIDATION, "Communication type must be 'email' or 'sms'")

    with ctx.database.session() as session:
        customer = session.get(Customer, payload.customer_id)
    if customer is None:
        return not_found("Customer")

    try:
        delivery = _deliver(ctx, customer, payload)
    except Exception as e:
        logger.exception(f"Notifier failed for customer {customer.id}: {e}")
        delivery = NotificationResult(success=False, error=str(e))

    sent = delivery is not None and delivery.success
    if not sent:
        logger.warning(f"Communication to customer {customer.id} was not delivered")

    def record(session: Session) -> Result:
        communication = Communication(
            customer_id=payload.customer_id,
            type=payload.type,
            subject=sanitize_input(payload.subject),
            message=sanitize_input(payload.message),
            sent_by=user.id,
            sent_date=utcnow(),
            status=CommunicationStatus.SENT.value if sent else CommunicationStatus.FAILED.value,
        )
        session.add(communication)
        session.flush()
        return Ok(communication.to_dict())

    result = ctx.database.transaction(record)
    if isinstance(result, Ok):
        ctx.audit.log_create(user.id, "COMMUNICATION", result.value["id"], result.value, ctx.client_ip)
    return result
