"""
Deterministic money and scoring calculations used by the mutation services
and the read endpoints. No database or request context is needed.
"""

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, Mapping, Optional

DEFAULT_TAX_RATE = 0.08
REPAIR_ORDER_TAX_RATE = 0.08
DEFAULT_COMMISSION_RATE = 0.03

MAX_DEPRECIATION = 0.50
AGE_DEPRECIATION_PER_YEAR = 0.05
MILEAGE_DEPRECIATION_PER_100K = 0.10

HIGH_QUALITY_LEAD_SOURCES = ("Referral", "Website", "Repeat Customer")


def round_money(value: Any) -> float:
    """Round half-up to cents."""
    return float(Decimal(str(value or 0)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def calculate_monthly_payment(principal: float, annual_rate: float, months: int) -> float:
    """
    Level monthly payment from the standard amortization formula.

    Args:
        principal: Amount financed
        annual_rate: Annual interest rate in percent (6 means 6%)
        months: Number of monthly payments

    Returns:
        Monthly payment rounded to cents; principal / months for a zero rate,
        0 when principal or term is missing
    """
    if not principal or not months or int(months) <= 0:
        return 0.0

    num_payments = int(months)
    monthly_rate = float(annual_rate or 0) / 100 / 12

    if monthly_rate == 0:
        return round_money(float(principal) / num_payments)

    growth = (1 + monthly_rate) ** num_payments
    payment = float(principal) * (monthly_rate * growth) / (growth - 1)
    return round_money(payment)


def calculate_sale_total(
    sale_price: float = 0,
    trade_in_value: float = 0,
    down_payment: float = 0,
    tax_rate: float = DEFAULT_TAX_RATE,
    fees: float = 0,
) -> Dict[str, float]:
    sale_price = float(sale_price or 0)
    trade_in_value = float(trade_in_value or 0)
    down_payment = float(down_payment or 0)
    fees = float(fees or 0)

    subtotal = sale_price - trade_in_value
    tax = subtotal * float(tax_rate)
    total = subtotal + tax + fees
    amount_financed = total - down_payment

    return {
        "subtotal": round_money(subtotal),
        "tax": round_money(tax),
        "fees": round_money(fees),
        "total": round_money(total),
        "down_payment": round_money(down_payment),
        "amount_financed": round_money(amount_financed),
    }


def calculate_repair_order_total(items: Iterable[Any]) -> Dict[str, float]:
    """
    Labor/parts subtotals, flat 8% tax and grand total over repair-order items.

    Items may be mappings or objects exposing ``type`` and ``total_price``.
    """
    labor_total = 0.0
    parts_total = 0.0

    for item in items:
        if isinstance(item, Mapping):
            item_type, total_price = item.get("type"), item.get("total_price")
        else:
            item_type, total_price = item.type, item.total_price
        total_price = float(total_price or 0)

        if item_type == "labor":
            labor_total += total_price
        elif item_type == "part":
            parts_total += total_price

    subtotal = labor_total + parts_total
    tax = subtotal * REPAIR_ORDER_TAX_RATE
    total = subtotal + tax

    return {
        "labor_total": round_money(labor_total),
        "parts_total": round_money(parts_total),
        "subtotal": round_money(subtotal),
        "tax": round_money(tax),
        "total": round_money(total),
    }


def calculate_trade_in_value(
    base_value: float,
    year: Optional[int] = None,
    mileage: Optional[int] = None,
    current_year: Optional[int] = None,
) -> float:
    """Capped linear depreciation: 5% per year of age plus 10% per 100k miles, at most 50%."""
    current_year = current_year or datetime.now().year
    year = int(year or current_year)
    mileage = int(mileage or 0)

    age_depreciation = max(current_year - year, 0) * AGE_DEPRECIATION_PER_YEAR
    mileage_depreciation = (mileage / 100000) * MILEAGE_DEPRECIATION_PER_100K
    depreciation = min(age_depreciation + mileage_depreciation, MAX_DEPRECIATION)

    return round_money(float(base_value or 0) * (1 - depreciation))


def calculate_inventory_value(vehicles: Iterable[Any]) -> float:
    total = 0.0
    for vehicle in vehicles:
        price = vehicle.get("purchase_price") if isinstance(vehicle, Mapping) else vehicle.purchase_price
        total += float(price or 0)
    return round_money(total)


def calculate_profit(sale_price: float, purchase_price: float, expenses: float = 0) -> Dict[str, float]:
    sale_price = float(sale_price or 0)
    profit = sale_price - float(purchase_price or 0) - float(expenses or 0)
    margin = (profit / sale_price) * 100 if sale_price > 0 else 0.0
    return {"profit": round_money(profit), "margin": round_money(margin)}


def calculate_commission(sale_price: float, commission_rate: float = DEFAULT_COMMISSION_RATE) -> float:
    return round_money(float(sale_price or 0) * float(commission_rate))


def _field(lead: Any, name: str) -> Any:
    if isinstance(lead, Mapping):
        return lead.get(name)
    return getattr(lead, name, None)


def calculate_lead_score(lead: Any, now: Optional[datetime] = None) -> int:
    """
    Additive 0-100 score rewarding value, source quality, contact completeness,
    a scheduled follow-up, a stated vehicle interest and a recent inquiry.
    """
    score = 0

    estimated_value = float(_field(lead, "estimated_value") or 0)
    if estimated_value > 0:
        score += 20
        if estimated_value > 30000:
            score += 10

    if _field(lead, "lead_source") in HIGH_QUALITY_LEAD_SOURCES:
        score += 15

    if _field(lead, "contact_email"):
        score += 10
    if _field(lead, "contact_phone"):
        score += 10

    if _field(lead, "follow_up_date"):
        score += 15

    if _field(lead, "vehicle_interested"):
        score += 10

    inquiry_date = _field(lead, "inquiry_date")
    if inquiry_date:
        if isinstance(inquiry_date, str):
            inquiry_date = datetime.fromisoformat(inquiry_date)
        now = now or datetime.now(timezone.utc).replace(tzinfo=None)
        days_since = (now - inquiry_date.replace(tzinfo=None)).total_seconds() / 86400
        if days_since < 1:
            score += 20
        elif days_since < 7:
            score += 10

    return min(score, 100)


def get_lead_priority(score: int) -> str:
    if score >= 80:
        return "High"
    if score >= 50:
        return "Medium"
    return "Low"
