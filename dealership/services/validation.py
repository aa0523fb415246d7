"""
Field-format validators and free-text sanitizing. Pure functions, no I/O.
"""

import re
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional

from dealership.core.permissions import ROLE_NAMES
from dealership.models.lead import LeadStatus
from dealership.models.sale import SaleStatus
from dealership.models.service import AppointmentStatus, ItemType, RepairOrderStatus

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^[\d\s\-+()]+$")
# 17 characters, letters I, O and Q are never used
VIN_RE = re.compile(r"^[A-HJ-NPR-Z0-9]{17}$", re.IGNORECASE)
ZIP_RE = re.compile(r"^\d{5}(-\d{4})?$")


def validate_email(email: Optional[str]) -> bool:
    if not email:
        return False
    return bool(EMAIL_RE.match(email))


def validate_phone(phone: Optional[str]) -> bool:
    """Digits, spaces, dashes, plus signs and parentheses, with at least 10 digits."""
    if not phone:
        return False
    return bool(PHONE_RE.match(phone)) and len(re.sub(r"\D", "", phone)) >= 10


def validate_vin(vin: Optional[str]) -> bool:
    if not vin:
        return False
    return bool(VIN_RE.match(vin))


def validate_zip_code(zip_code: Optional[str]) -> bool:
    if not zip_code:
        return False
    return bool(ZIP_RE.match(zip_code))


def validate_date(value: Any) -> bool:
    if not value:
        return False
    if isinstance(value, (date, datetime)):
        return True
    try:
        datetime.fromisoformat(str(value))
    except ValueError:
        return False
    return True


def validate_positive_number(value: Any) -> bool:
    """True for numbers (or numeric strings) that are zero or greater."""
    try:
        return float(value) >= 0
    except (TypeError, ValueError):
        return False


def validate_required_fields(data: Dict[str, Any], required_fields: Iterable[str]) -> Optional[List[str]]:
    """
    Check that every required field is present and non-blank.

    Args:
        data: Raw request body
        required_fields: Field names that must be present

    Returns:
        List of missing field names, or None when nothing is missing
    """
    missing = []
    for field in required_fields:
        value = data.get(field)
        if value is None or value == "" or (isinstance(value, str) and value.strip() == ""):
            missing.append(field)
    return missing or None


def sanitize_input(value: Any) -> Any:
    """Trim strings and drop angle brackets; other values pass through."""
    if not isinstance(value, str):
        return value
    return value.strip().replace("<", "").replace(">", "")


def validate_lead_status(status: Optional[str]) -> bool:
    return status in {s.value for s in LeadStatus}


def validate_sale_status(status: Optional[str]) -> bool:
    return status in {s.value for s in SaleStatus}


def validate_service_status(status: Optional[str]) -> bool:
    return status in {s.value for s in AppointmentStatus}


def validate_repair_order_status(status: Optional[str]) -> bool:
    return status in {s.value for s in RepairOrderStatus}


def validate_item_type(item_type: Optional[str]) -> bool:
    return item_type in {t.value for t in ItemType}


def validate_role(role: Optional[str]) -> bool:
    return role in ROLE_NAMES


def sanitize_fields(data: Dict[str, Any]) -> Dict[str, Any]:
    return {key: sanitize_input(value) for key, value in data.items()}
