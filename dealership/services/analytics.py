"""
Read-only reporting over sales, leads, inventory and the service department.

Counts and sums that the database can do portably are aggregated in SQL;
month bucketing and per-group money figures are done here so the same code
runs on PostgreSQL and SQLite. Cancelled sales are left out of every figure.
"""

import logging
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import case, func

from dealership.core.context import RequestContext
from dealership.core.result import Ok, Result
from dealership.db.base_model import utcnow
from dealership.models.lead import Lead, LeadStatus
from dealership.models.part import Part
from dealership.models.sale import Sale, SaleStatus
from dealership.models.service import AppointmentStatus, ServiceAppointment
from dealership.models.user import User
from dealership.models.vehicle import Vehicle, VehicleStatus
from dealership.services.calculations import (
    calculate_commission,
    calculate_inventory_value,
    calculate_profit,
    round_money,
)
from dealership.services.insights import analyze_sales_trends, predict_inventory_needs

logger = logging.getLogger(__name__)

WINDOW_DAYS = 30
HISTORY_DAYS = 365
TOP_VEHICLES_LIMIT = 10
LOW_STOCK_LIMIT = 20

CANCELLED = SaleStatus.CANCELLED.value


def _count_where(condition):
    return func.count(case((condition, 1)))


def dashboard_metrics(ctx: RequestContext, now: Optional[datetime] = None) -> Result:
    """Headline counts for the last 30 days plus current inventory."""
    now = now or utcnow()
    since = now - timedelta(days=WINDOW_DAYS)

    with ctx.database.session() as session:
        sales = (
            session.query(func.count(Sale.id), func.sum(Sale.sale_price), func.avg(Sale.sale_price))
            .filter(Sale.sale_date >= since, Sale.sale_status != CANCELLED)
            .one()
        )
        leads = (
            session.query(
                func.count(Lead.id),
                _count_where(Lead.lead_status == LeadStatus.NEW.value),
                _count_where(Lead.lead_status == LeadStatus.CONVERTED.value),
            )
            .filter(Lead.created_at >= since)
            .one()
        )
        inventory = session.query(
            func.count(Vehicle.id),
            _count_where(Vehicle.status == VehicleStatus.AVAILABLE.value),
            _count_where(Vehicle.status == VehicleStatus.SOLD.value),
        ).one()
        service = (
            session.query(
                func.count(ServiceAppointment.id),
                _count_where(ServiceAppointment.status == AppointmentStatus.SCHEDULED.value),
                _count_where(ServiceAppointment.status == AppointmentStatus.COMPLETED.value),
            )
            .filter(ServiceAppointment.appointment_date >= since)
            .one()
        )

    return Ok({
        "sales": {
            "total_sales": sales[0],
            "total_revenue": round_money(sales[1]),
            "avg_sale_price": round_money(sales[2]),
        },
        "leads": {"total_leads": leads[0], "new_leads": leads[1], "converted_leads": leads[2]},
        "inventory": {"total_vehicles": inventory[0], "available_vehicles": inventory[1], "sold_vehicles": inventory[2]},
        "service": {"total_appointments": service[0], "scheduled": service[1], "completed": service[2]},
    })


def _monthly(sales: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    months: Dict[str, Dict[str, Any]] = {}
    for sale in sales:
        month = sale["sale_date"].strftime("%Y-%m")
        bucket = months.setdefault(month, {"month": month, "count": 0, "revenue": 0.0})
        bucket["count"] += 1
        bucket["revenue"] += sale["sale_price"]
    for bucket in months.values():
        bucket["revenue"] = round_money(bucket["revenue"])
    return sorted(months.values(), key=lambda bucket: bucket["month"], reverse=True)


def _by_salesperson(sales: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    people: Dict[str, Dict[str, Any]] = {}
    for sale in sales:
        person = people.setdefault(sale["salesperson_id"], {
            "salesperson_id": sale["salesperson_id"],
            "name": sale["salesperson_name"],
            "sales_count": 0,
            "total_revenue": 0.0,
        })
        person["sales_count"] += 1
        person["total_revenue"] += sale["sale_price"]

    for person in people.values():
        person["total_revenue"] = round_money(person["total_revenue"])
        person["commission"] = calculate_commission(person["total_revenue"])
    return sorted(people.values(), key=lambda person: person["total_revenue"], reverse=True)


def _top_vehicles(sales: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    groups = defaultdict(list)
    for sale in sales:
        groups[(sale["make"], sale["model"])].append(sale)

    top = []
    for (make, model), group in groups.items():
        profits = [calculate_profit(sale["sale_price"], sale["purchase_price"])["profit"] for sale in group]
        top.append({
            "make": make,
            "model": model,
            "sales_count": len(group),
            "avg_price": round_money(sum(sale["sale_price"] for sale in group) / len(group)),
            "avg_profit": round_money(sum(profits) / len(profits)),
        })
    top.sort(key=lambda row: row["sales_count"], reverse=True)
    return top[:TOP_VEHICLES_LIMIT]


def sales_analytics(ctx: RequestContext, now: Optional[datetime] = None) -> Result:
    """
    Sales performance.

    Returns:
        ``Ok`` with monthly totals for the last year, and for the last 30 days
        revenue and commission per salesperson, the best-selling models with
        their average profit, and the overall trend
    """
    now = now or utcnow()
    since = now - timedelta(days=WINDOW_DAYS)

    with ctx.database.session() as session:
        rows = (
            session.query(Sale, Vehicle, User.name)
            .join(Vehicle, Sale.vehicle_id == Vehicle.id)
            .outerjoin(User, Sale.salesperson_id == User.id)
            .filter(Sale.sale_date >= now - timedelta(days=HISTORY_DAYS), Sale.sale_status != CANCELLED)
            .order_by(Sale.sale_date.desc())
            .all()
        )
        sales = [
            {
                "sale_date": sale.sale_date,
                "sale_price": float(sale.sale_price or 0),
                "salesperson_id": sale.salesperson_id,
                "salesperson_name": salesperson_name,
                "make": vehicle.make,
                "model": vehicle.model,
                "purchase_price": vehicle.purchase_price,
                "vehicle_type": vehicle.type,
            }
            for sale, vehicle, salesperson_name in rows
        ]

    recent = [sale for sale in sales if sale["sale_date"] >= since]
    logger.debug(f"Sales analytics over {len(sales)} sales, {len(recent)} in the last {WINDOW_DAYS} days")
    return Ok({
        "monthly_sales": _monthly(sales),
        "sales_by_salesperson": _by_salesperson(recent),
        "top_vehicles": _top_vehicles(recent),
        "trends": analyze_sales_trends(recent, WINDOW_DAYS, now),
    })


def inventory_analytics(ctx: RequestContext, now: Optional[datetime] = None) -> Result:
    """Stock by status and type, inventory value, low-stock parts and restocking outlook."""
    now = now or utcnow()

    with ctx.database.session() as session:
        vehicles = session.query(Vehicle).all()
        recent_sales = (
            session.query(func.count(Sale.id))
            .filter(Sale.sale_date >= now - timedelta(days=WINDOW_DAYS), Sale.sale_status != CANCELLED)
            .scalar()
        )
        low_stock = (
            session.query(Part)
            .filter(Part.quantity_on_hand <= Part.reorder_level)
            .order_by(Part.quantity_on_hand.asc())
            .limit(LOW_STOCK_LIMIT)
            .all()
        )
        low_stock_parts = [
            {
                "id": part.id,
                "part_number": part.part_number,
                "description": part.description,
                "quantity_on_hand": part.quantity_on_hand,
                "reorder_level": part.reorder_level,
            }
            for part in low_stock
        ]

    by_status = defaultdict(list)
    for vehicle in vehicles:
        by_status[vehicle.status].append(vehicle)
    inventory_by_status = [
        {"status": status, "count": len(group), "total_value": calculate_inventory_value(group)}
        for status, group in sorted(by_status.items())
    ]

    available = by_status.get(VehicleStatus.AVAILABLE.value, [])
    by_type = defaultdict(list)
    for vehicle in available:
        by_type[vehicle.type].append(vehicle)
    inventory_by_type = []
    for vehicle_type, group in sorted(by_type.items(), key=lambda item: item[0] or ""):
        prices = [vehicle.sale_price for vehicle in group if vehicle.sale_price is not None]
        inventory_by_type.append({
            "type": vehicle_type,
            "count": len(group),
            "avg_price": round_money(sum(prices) / len(prices)) if prices else None,
        })

    return Ok({
        "inventory_by_status": inventory_by_status,
        "inventory_by_type": inventory_by_type,
        "inventory_value": calculate_inventory_value(available),
        "low_stock_parts": low_stock_parts,
        "inventory_needs": predict_inventory_needs(vehicles, recent_sales or 0),
    })
