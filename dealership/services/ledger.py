"""
Financial ledger entries.
"""

import logging
from typing import Any, Optional

from sqlalchemy.orm import Session

from dealership.core.context import RequestContext
from dealership.core.result import Err, Ok, Result, not_found
from dealership.core.security import CurrentUser
from dealership.db.base_model import utcnow
from dealership.models.customer import Customer
from dealership.models.ledger import LedgerTransaction
from dealership.models.user import User
from dealership.schemas.common import parse_payload
from dealership.schemas.ledger import TransactionCreate
from dealership.services.validation import sanitize_input

logger = logging.getLogger(__name__)


def list_transactions(ctx: RequestContext, transaction_type: Optional[str] = None, status: Optional[str] = None) -> Result:
    with ctx.database.session() as session:
        query = (
            session.query(LedgerTransaction, Customer.name, User.name)
            .outerjoin(Customer, LedgerTransaction.customer_id == Customer.id)
            .outerjoin(User, LedgerTransaction.created_by == User.id)
        )
        if transaction_type:
            query = query.filter(LedgerTransaction.type == transaction_type)
        if status:
            query = query.filter(LedgerTransaction.status == status)

        transactions = []
        for entry, customer_name, creator_name in query.order_by(LedgerTransaction.transaction_date.desc()).all():
            data = entry.to_dict()
            data.update({"customer_name": customer_name, "created_by_name": creator_name})
            transactions.append(data)
        return Ok(transactions)


def create_transaction(ctx: RequestContext, user: CurrentUser, body: Any) -> Result:
    parsed = parse_payload(TransactionCreate, body, ["type", "amount", "payment_method"])
    if isinstance(parsed, Err):
        return parsed
    payload = parsed.value

    def create(session: Session) -> Result:
        if payload.customer_id and session.get(Customer, payload.customer_id) is None:
            return not_found("Customer")

        entry = LedgerTransaction(
            type=sanitize_input(payload.type),
            reference_id=payload.reference_id,
            customer_id=payload.customer_id,
            amount=payload.amount,
            payment_method=sanitize_input(payload.payment_method),
            transaction_date=utcnow(),
            status="Completed",
            description=sanitize_input(payload.description),
            created_by=user.id,
        )
        session.add(entry)
        session.flush()
        return Ok(entry.to_dict())

    result = ctx.database.transaction(create)
    if isinstance(result, Ok):
        ctx.audit.log_create(user.id, "TRANSACTION", result.value["id"], result.value, ctx.client_ip)
    return result
