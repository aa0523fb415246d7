"""
Parts inventory. Restocking is a plain edit of ``quantity_on_hand``; stock
goes down only through part lines on repair orders.
"""

import logging
from typing import Any, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from dealership.core.context import RequestContext
from dealership.core.result import Err, ErrorKind, Ok, Result, not_found
from dealership.core.security import CurrentUser
from dealership.models.part import Part
from dealership.schemas.common import changed_fields, parse_payload
from dealership.schemas.part import PartCreate, PartUpdate
from dealership.services.validation import sanitize_fields

logger = logging.getLogger(__name__)

ENTITY = "PART"
DUPLICATE_PART = Err(ErrorKind.CONFLICT, "Part with this number already exists")


def list_parts(
    ctx: RequestContext,
    search: Optional[str] = None,
    category: Optional[str] = None,
    low_stock: bool = False,
) -> Result:
    with ctx.database.session() as session:
        query = session.query(Part)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(Part.part_number.ilike(pattern), Part.description.ilike(pattern)))
        if category:
            query = query.filter(Part.category == category)
        if low_stock:
            query = query.filter(Part.quantity_on_hand <= Part.reorder_level)
        parts = query.order_by(Part.part_number.asc()).all()
        return Ok([part.to_dict() for part in parts])


def create_part(ctx: RequestContext, user: CurrentUser, body: Any) -> Result:
    parsed = parse_payload(PartCreate, body, ["part_number", "description", "category"])
    if isinstance(parsed, Err):
        return parsed
    fields = sanitize_fields(parsed.value.model_dump(exclude_none=True))

    def create(session: Session) -> Result:
        if session.query(Part.id).filter(Part.part_number == fields["part_number"]).first() is not None:
            return DUPLICATE_PART
        part = Part(**fields)
        session.add(part)
        session.flush()
        return Ok(part.to_dict())

    result = ctx.database.transaction(create)
    if isinstance(result, Ok):
        ctx.audit.log_create(user.id, ENTITY, result.value["id"], result.value, ctx.client_ip)
    return result


def update_part(ctx: RequestContext, user: CurrentUser, part_id: str, body: Any) -> Result:
    parsed = parse_payload(PartUpdate, body)
    if isinstance(parsed, Err):
        return parsed
    changes = sanitize_fields(changed_fields(parsed.value))
    if not changes:
        return Err(ErrorKind.VALIDATION, "No valid fields to update")

    def update(session: Session) -> Result:
        part = session.get(Part, part_id)
        if part is None:
            return not_found("Part")
        if "part_number" in changes:
            taken = (
                session.query(Part.id)
                .filter(Part.part_number == changes["part_number"], Part.id != part_id)
                .first()
            )
            if taken is not None:
                return DUPLICATE_PART

        old_values = part.to_dict()
        for name, value in changes.items():
            setattr(part, name, value)
        session.flush()
        return Ok((old_values, part.to_dict()))

    result = ctx.database.transaction(update)
    if isinstance(result, Err):
        return result

    old_values, new_values = result.value
    ctx.audit.log_update(user.id, ENTITY, part_id, old_values, new_values, ctx.client_ip)
    return Ok(new_values)
