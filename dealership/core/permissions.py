"""
Static role-based permission table and the permission gate.
"""

import enum
import logging
from typing import Dict, FrozenSet, Optional

from dealership.core.result import Err, ErrorKind, Ok, Result

logger = logging.getLogger(__name__)


class Role(str, enum.Enum):
    ADMIN = "admin"
    SALES = "sales"
    SERVICE_MANAGER = "service_manager"
    TECHNICIAN = "technician"
    ACCOUNTANT = "accountant"
    INVENTORY_MANAGER = "inventory_manager"


ROLE_NAMES = frozenset(role.value for role in Role)

_A = Role.ADMIN.value
_S = Role.SALES.value
_SM = Role.SERVICE_MANAGER.value
_T = Role.TECHNICIAN.value
_AC = Role.ACCOUNTANT.value
_IM = Role.INVENTORY_MANAGER.value

PERMISSIONS: Dict[str, FrozenSet[str]] = {
    # Leads
    "VIEW_LEADS": frozenset({_A, _S}),
    "CREATE_LEADS": frozenset({_A, _S}),
    "EDIT_LEADS": frozenset({_A, _S}),
    "DELETE_LEADS": frozenset({_A}),
    "ASSIGN_LEADS": frozenset({_A, _S}),

    # Customers
    "VIEW_CUSTOMERS": frozenset({_A, _S, _SM, _AC}),
    "CREATE_CUSTOMERS": frozenset({_A, _S}),
    "EDIT_CUSTOMERS": frozenset({_A, _S}),
    "DELETE_CUSTOMERS": frozenset({_A}),

    # Sales
    "VIEW_SALES": frozenset({_A, _S, _AC}),
    "CREATE_SALES": frozenset({_A, _S}),
    "EDIT_SALES": frozenset({_A, _S}),
    "APPROVE_SALES": frozenset({_A}),
    "DELETE_SALES": frozenset({_A}),

    # Vehicles
    "VIEW_VEHICLES": frozenset({_A, _S, _IM}),
    "CREATE_VEHICLES": frozenset({_A, _IM}),
    "EDIT_VEHICLES": frozenset({_A, _IM}),
    "DELETE_VEHICLES": frozenset({_A, _IM}),

    # Parts
    "VIEW_PARTS": frozenset({_A, _SM, _T, _IM}),
    "CREATE_PARTS": frozenset({_A, _IM}),
    "EDIT_PARTS": frozenset({_A, _IM}),
    "DELETE_PARTS": frozenset({_A, _IM}),

    # Service
    "VIEW_APPOINTMENTS": frozenset({_A, _SM, _T}),
    "CREATE_APPOINTMENTS": frozenset({_A, _SM}),
    "EDIT_APPOINTMENTS": frozenset({_A, _SM}),
    "DELETE_APPOINTMENTS": frozenset({_A, _SM}),

    "VIEW_REPAIR_ORDERS": frozenset({_A, _SM, _T, _AC}),
    "CREATE_REPAIR_ORDERS": frozenset({_A, _SM}),
    "EDIT_REPAIR_ORDERS": frozenset({_A, _SM, _T}),
    "COMPLETE_REPAIR_ORDERS": frozenset({_A, _SM}),

    # Financial
    "VIEW_TRANSACTIONS": frozenset({_A, _AC}),
    "CREATE_TRANSACTIONS": frozenset({_A, _AC}),
    "APPROVE_TRANSACTIONS": frozenset({_A}),

    # Communications
    "VIEW_COMMUNICATIONS": frozenset({_A, _S, _SM}),
    "SEND_COMMUNICATIONS": frozenset({_A, _S, _SM}),

    # Documents
    "VIEW_DOCUMENTS": frozenset({_A, _S, _SM, _AC}),
    "UPLOAD_DOCUMENTS": frozenset({_A, _S, _SM}),
    "DELETE_DOCUMENTS": frozenset({_A}),

    # Audit
    "VIEW_AUDIT_LOGS": frozenset({_A}),

    # User management
    "VIEW_USERS": frozenset({_A}),
    "CREATE_USERS": frozenset({_A}),
    "EDIT_USERS": frozenset({_A}),
    "DELETE_USERS": frozenset({_A}),
}


def has_permission(role: Optional[str], permission: Optional[str]) -> bool:
    """Unknown permissions allow no role."""
    if not role or not permission:
        return False
    return role in PERMISSIONS.get(permission, frozenset())


def can_access_resource(role: Optional[str], resource_type: str, action: str) -> bool:
    return has_permission(role, f"{action.upper()}_{resource_type.upper()}")


def check_permission(user, permission: str) -> Result:
    """
    Permission gate.

    Args:
        user: Authenticated user carrying a ``role`` attribute
        permission: Permission name, e.g. ``CREATE_SALES``

    Returns:
        ``Ok(user)`` when the role is allowed, otherwise a FORBIDDEN ``Err``
    """
    if user is None or not getattr(user, "role", None):
        return Err(ErrorKind.UNAUTHORIZED, "Unauthorized")

    if not has_permission(user.role, permission):
        logger.info(f"Role '{user.role}' denied {permission} (user {user.id})")
        return Err(ErrorKind.FORBIDDEN, f"Forbidden: missing permission {permission}")

    return Ok(user)
