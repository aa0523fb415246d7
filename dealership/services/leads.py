"""
Sales leads. Non-admin users only ever see the leads assigned to them; an
invisible lead is reported exactly like a missing one.
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from dealership.core.context import RequestContext
from dealership.core.result import Err, ErrorKind, Ok, Result, not_found
from dealership.core.security import CurrentUser
from dealership.db.base_model import utcnow
from dealership.models.lead import Lead
from dealership.models.user import User
from dealership.schemas.common import changed_fields, parse_payload
from dealership.schemas.lead import LeadCreate, LeadUpdate
from dealership.services.calculations import calculate_lead_score, get_lead_priority
from dealership.services.validation import sanitize_fields, validate_email, validate_lead_status, validate_phone
from dealership.services.visibility import can_view_lead, visible_leads

logger = logging.getLogger(__name__)

ENTITY = "LEAD"
LEAD_NOT_FOUND = not_found("Lead")


def _check_formats(fields: Dict[str, Any]) -> Optional[Err]:
    if "lead_status" in fields and not validate_lead_status(fields["lead_status"]):
        return Err(ErrorKind.VALIDATION, "Invalid lead status")
    if fields.get("contact_email") and not validate_email(fields["contact_email"]):
        return Err(ErrorKind.VALIDATION, "Invalid email format")
    if fields.get("contact_phone") and not validate_phone(fields["contact_phone"]):
        return Err(ErrorKind.VALIDATION, "Invalid phone number format")
    return None


def _normalize_contact(fields: Dict[str, Any]) -> Dict[str, Any]:
    if fields.get("contact_email"):
        fields["contact_email"] = fields["contact_email"].lower()
    return fields


def _with_score(lead: Lead) -> Dict[str, Any]:
    data = lead.to_dict()
    score = calculate_lead_score(lead)
    data["score"] = score
    data["priority"] = get_lead_priority(score)
    return data


def list_leads(
    ctx: RequestContext,
    user: CurrentUser,
    status: Optional[str] = None,
    assigned_to: Optional[str] = None,
) -> Result:
    with ctx.database.session() as session:
        query = session.query(Lead)
        if status:
            query = query.filter(Lead.lead_status == status)
        if assigned_to:
            query = query.filter(Lead.assigned_to == assigned_to)
        leads = query.order_by(Lead.created_at.desc()).all()
        return Ok([_with_score(lead) for lead in visible_leads(user, leads)])


def create_lead(ctx: RequestContext, user: CurrentUser, body: Any) -> Result:
    """
    Create a lead, assigned to the creator unless ``assigned_to`` names someone else.

    A lead sharing the contact email or phone of an existing lead is a conflict.
    """
    parsed = parse_payload(LeadCreate, body, ["contact_name", "lead_source"])
    if isinstance(parsed, Err):
        return parsed
    fields = _normalize_contact(sanitize_fields(changed_fields(parsed.value)))
    fields.setdefault("lead_status", parsed.value.lead_status)

    invalid = _check_formats(fields)
    if invalid:
        return invalid

    fields.setdefault("assigned_to", user.id)
    fields.setdefault("inquiry_date", utcnow())

    def create(session: Session) -> Result:
        contact = []
        if fields.get("contact_email"):
            contact.append(func.lower(Lead.contact_email) == fields["contact_email"])
        if fields.get("contact_phone"):
            contact.append(Lead.contact_phone == fields["contact_phone"])
        if contact and session.query(Lead.id).filter(or_(*contact)).first() is not None:
            return Err(ErrorKind.CONFLICT, "A lead with this email or phone already exists")

        if session.get(User, fields["assigned_to"]) is None:
            return not_found("Assigned user")

        lead = Lead(**fields)
        session.add(lead)
        session.flush()
        return Ok(lead)

    result = ctx.database.transaction(create)
    if isinstance(result, Err):
        return result

    lead = result.value
    ctx.audit.log_create(user.id, ENTITY, lead.id, lead.to_dict(), ctx.client_ip)
    return Ok(_with_score(lead))


def get_lead(ctx: RequestContext, user: CurrentUser, lead_id: str) -> Result:
    with ctx.database.session() as session:
        lead = session.get(Lead, lead_id)
        if lead is None or not can_view_lead(user, lead):
            return LEAD_NOT_FOUND

        data = _with_score(lead)
        if lead.assigned_to:
            assignee = session.get(User, lead.assigned_to)
            data["assigned_to_name"] = assignee.name if assignee else None
        return Ok(data)


def update_lead(ctx: RequestContext, user: CurrentUser, lead_id: str, body: Any) -> Result:
    parsed = parse_payload(LeadUpdate, body)
    if isinstance(parsed, Err):
        return parsed
    changes = _normalize_contact(sanitize_fields(changed_fields(parsed.value)))
    if not changes:
        return Err(ErrorKind.VALIDATION, "No valid fields to update")

    invalid = _check_formats(changes)
    if invalid:
        return invalid

    def update(session: Session) -> Result:
        lead = session.get(Lead, lead_id)
        if lead is None or not can_view_lead(user, lead):
            return LEAD_NOT_FOUND
        if "assigned_to" in changes and session.get(User, changes["assigned_to"]) is None:
            return not_found("Assigned user")

        old_values = lead.to_dict()
        for name, value in changes.items():
            setattr(lead, name, value)
        session.flush()
        return Ok((old_values, lead))

    result = ctx.database.transaction(update)
    if isinstance(result, Err):
        return result

    old_values, lead = result.value
    ctx.audit.log_update(user.id, ENTITY, lead_id, old_values, lead.to_dict(), ctx.client_ip)
    return Ok(_with_score(lead))


def delete_lead(ctx: RequestContext, user: CurrentUser, lead_id: str) -> Result:
    def delete(session: Session) -> Result:
        lead = session.get(Lead, lead_id)
        if lead is None or not can_view_lead(user, lead):
            return LEAD_NOT_FOUND
        old_values = lead.to_dict()
        session.delete(lead)
        return Ok(old_values)

    result = ctx.database.transaction(delete)
    if isinstance(result, Ok):
        ctx.audit.log_delete(user.id, ENTITY, lead_id, result.value, ctx.client_ip)
    return result
