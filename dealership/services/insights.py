"""
Rule-based sales insights: batch lead scoring, customer engagement
recommendations, sales trends and inventory needs.

The pure functions take mappings or model objects so the analytics service
can feed them aggregated rows as well as ORM instances.
"""

import logging
from collections import Counter
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Mapping, Optional

from dealership.core.context import RequestContext
from dealership.core.result import Err, Ok, Result, not_found
from dealership.core.security import CurrentUser
from dealership.db.base_model import utcnow
from dealership.models.communication import Communication
from dealership.models.customer import Customer
from dealership.models.lead import Lead, LeadStatus
from dealership.models.sale import Sale
from dealership.models.service import ServiceHistory
from dealership.schemas.common import parse_payload
from dealership.schemas.insights import EngagementRequest, LeadScoringRequest
from dealership.services.calculations import calculate_lead_score, get_lead_priority, round_money
from dealership.services.visibility import visible_leads

logger = logging.getLogger(__name__)

UPGRADE_AFTER_DAYS = 1095
SERVICE_DUE_AFTER_DAYS = 180
RECENT_CONTACT_DAYS = 30

# Inventory cover, in days of sales at the current rate
LOW_COVER_DAYS = 30
HIGH_COVER_DAYS = 90
MIN_DAILY_SALES_RATE = 0.1

SCORED_STATUSES = (LeadStatus.NEW.value, LeadStatus.CONTACTED.value)


def _value(row: Any, name: str) -> Any:
    if isinstance(row, Mapping):
        return row.get(name)
    return getattr(row, name, None)


def _days_since(when: Any, now: datetime) -> float:
    if isinstance(when, str):
        when = datetime.fromisoformat(when)
    return (now - when.replace(tzinfo=None)).total_seconds() / 86400


def _recommendation(kind: str, priority: str, message: str, action: str) -> Dict[str, str]:
    return {"type": kind, "priority": priority, "message": message, "action": action}


def generate_engagement_recommendations(
    customer: Any,
    purchases: List[Any],
    services: List[Any],
    communications: List[Any],
    now: Optional[datetime] = None,
) -> List[Dict[str, str]]:
    """
    Outreach suggestions from a customer's history.

    Args:
        customer: Customer row or mapping
        purchases: Sales, newest first
        services: Service-history records, newest first
        communications: Messages sent to the customer, newest first
        now: Reference time, defaults to the current UTC time

    Returns:
        Recommendation dicts with ``type``, ``priority``, ``message`` and ``action``
    """
    now = now or utcnow()
    recommendations = []

    if purchases and _days_since(_value(purchases[0], "sale_date"), now) > UPGRADE_AFTER_DAYS:
        recommendations.append(_recommendation(
            "vehicle_upgrade", "High",
            "Customer may be ready for a vehicle upgrade",
            "Send promotional email about new inventory",
        ))

    if services and _days_since(_value(services[0], "service_date"), now) > SERVICE_DUE_AFTER_DAYS:
        recommendations.append(_recommendation(
            "service_reminder", "Medium",
            "Customer is due for routine maintenance",
            "Send service reminder email/SMS",
        ))

    if communications and not any(
        _days_since(_value(message, "sent_date"), now) <= RECENT_CONTACT_DAYS for message in communications
    ):
        recommendations.append(_recommendation(
            "engagement", "Low",
            "No recent communication with customer",
            "Send personalized check-in message",
        ))

    preferred = _value(customer, "preferred_contact")
    if preferred:
        recommendations.append(_recommendation(
            "communication", "Info",
            f"Customer prefers {preferred} communication",
            f"Use {preferred} for outreach",
        ))

    return recommendations


def analyze_sales_trends(sales: Iterable[Any], period: int = 30, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Totals over the last ``period`` days; each sale needs sale_date, sale_price and vehicle_type."""
    now = now or utcnow()
    cutoff = now - timedelta(days=period)
    recent = [sale for sale in sales if _value(sale, "sale_date") >= cutoff]

    total_revenue = sum(float(_value(sale, "sale_price") or 0) for sale in recent)
    average = total_revenue / len(recent) if recent else 0
    vehicle_types = Counter(_value(sale, "vehicle_type") or "Unknown" for sale in recent)

    return {
        "period": period,
        "total_sales": len(recent),
        "total_revenue": round_money(total_revenue),
        "avg_sale_price": round_money(average),
        "popular_vehicle_types": dict(vehicle_types),
        "trend": "positive" if recent else "neutral",
    }


def predict_inventory_needs(vehicles: Iterable[Any], sales_last_30_days: int) -> Dict[str, Any]:
    """Days of available stock at the last month's sales rate, with a restock/promote hint."""
    statuses = [_value(vehicle, "status") for vehicle in vehicles]
    inventory = {
        "available": statuses.count("Available"),
        "sold": statuses.count("Sold"),
        "total": len(statuses),
    }

    sales_rate = sales_last_30_days / 30
    days_of_inventory = inventory["available"] / max(sales_rate, MIN_DAILY_SALES_RATE)

    if days_of_inventory < LOW_COVER_DAYS:
        recommendation = "Low inventory - consider restocking"
    elif days_of_inventory > HIGH_COVER_DAYS:
        recommendation = "High inventory - consider promotions"
    else:
        recommendation = "Inventory levels are healthy"

    return {
        "inventory": inventory,
        "sales_rate": round_money(sales_rate),
        "days_of_inventory": round(days_of_inventory),
        "recommendation": recommendation,
    }


def score_leads(ctx: RequestContext, user: CurrentUser, body: Any) -> Result:
    """Score the listed leads, or every New and Contacted lead, highest score first."""
    parsed = parse_payload(LeadScoringRequest, {} if body is None else body)
    if isinstance(parsed, Err):
        return parsed
    lead_ids = parsed.value.lead_ids

    with ctx.database.session() as session:
        query = session.query(Lead)
        if lead_ids:
            query = query.filter(Lead.id.in_(lead_ids))
        else:
            query = query.filter(Lead.lead_status.in_(SCORED_STATUSES))

        scored = []
        for lead in visible_leads(user, query.all()):
            data = lead.to_dict()
            data["score"] = calculate_lead_score(lead)
            data["priority"] = get_lead_priority(data["score"])
            scored.append(data)

    scored.sort(key=lambda lead: lead["score"], reverse=True)
    logger.info(f"Scored {len(scored)} leads for user {user.id}")
    return Ok(scored)


def engagement_recommendations(ctx: RequestContext, body: Any) -> Result:
    parsed = parse_payload(EngagementRequest, body, ["customer_id"])
    if isinstance(parsed, Err):
        return parsed
    customer_id = parsed.value.customer_id

    with ctx.database.session() as session:
        customer = session.get(Customer, customer_id)
        if customer is None:
            return not_found("Customer")

        purchases = (
            session.query(Sale).filter(Sale.customer_id == customer_id).order_by(Sale.sale_date.desc()).all()
        )
        services = (
            session.query(ServiceHistory)
            .filter(ServiceHistory.customer_id == customer_id)
            .order_by(ServiceHistory.service_date.desc())
            .all()
        )
        communications = (
            session.query(Communication)
            .filter(Communication.customer_id == customer_id)
            .order_by(Communication.sent_date.desc())
            .all()
        )

        return Ok({
            "customer": customer.to_dict(),
            "recommendations": generate_engagement_recommendations(customer, purchases, services, communications),
        })
