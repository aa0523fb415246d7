"""
Row-level visibility rules, applied after an entity has been fetched and
independently of how it was fetched.
"""

from typing import Any, Iterable, List

from dealership.core.permissions import Role


def _get(entity: Any, name: str) -> Any:
    if isinstance(entity, dict):
        return entity.get(name)
    return getattr(entity, name, None)


def can_view_lead(user: Any, lead: Any) -> bool:
    """Admins see every lead; everyone else only leads assigned to them."""
    if user is None or lead is None:
        return False
    if user.role == Role.ADMIN.value:
        return True
    return _get(lead, "assigned_to") == user.id


def visible_leads(user: Any, leads: Iterable[Any]) -> List[Any]:
    return [lead for lead in leads if can_view_lead(user, lead)]
