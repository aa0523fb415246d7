"""
Best-effort audit trail.

Every create/update/delete and every login/logout is appended to
``audit_logs`` in a session of its own. A failure here is logged and
swallowed: the business mutation it describes has already committed and
must stand.
"""

import logging
from typing import Any, Callable, Dict, Mapping, Optional

from sqlalchemy.orm import Session

from dealership.core.result import Ok, Result
from dealership.db.base_model import utcnow
from dealership.models.audit import AuditAction, AuditLogEntry
from dealership.models.user import User

logger = logging.getLogger(__name__)

UNKNOWN_IP = "unknown"
AUDIT_LOG_LIMIT = 1000


def get_client_ip(headers: Optional[Mapping[str, str]]) -> str:
    """First X-Forwarded-For hop, else X-Real-IP, else ``"unknown"``."""
    if not headers:
        return UNKNOWN_IP

    forwarded = headers.get("x-forwarded-for")
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop

    real_ip = headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()

    return UNKNOWN_IP


class AuditRecorder:
    """Appends immutable audit entries without ever failing the caller"""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def record(
        self,
        user_id: Optional[str],
        action: AuditAction,
        entity_type: str,
        entity_id: Optional[str],
        old_values: Optional[Dict[str, Any]] = None,
        new_values: Optional[Dict[str, Any]] = None,
        ip_address: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        """
        Append one audit entry.

        Returns:
            The stored entry as a dict, or None if it could not be written
        """
        session = None
        try:
            session = self.session_factory()
            entry = AuditLogEntry(
                user_id=user_id,
                action=AuditAction(action).value,
                entity_type=entity_type,
                entity_id=entity_id,
                old_values=old_values,
                new_values=new_values,
                timestamp=utcnow(),
                ip_address=ip_address or UNKNOWN_IP,
            )
            session.add(entry)
            session.commit()
            return entry.to_dict()
        except Exception as e:
            if session is not None:
                session.rollback()
            logger.exception(f"Error creating audit log for {action} {entity_type} {entity_id}: {e}")
            return None
        finally:
            if session is not None:
                session.close()

    def log_create(self, user_id, entity_type, entity_id, new_values, ip_address=None):
        return self.record(user_id, AuditAction.CREATE, entity_type, entity_id, None, new_values, ip_address)

    def log_update(self, user_id, entity_type, entity_id, old_values, new_values, ip_address=None):
        return self.record(user_id, AuditAction.UPDATE, entity_type, entity_id, old_values, new_values, ip_address)

    def log_delete(self, user_id, entity_type, entity_id, old_values, ip_address=None):
        return self.record(user_id, AuditAction.DELETE, entity_type, entity_id, old_values, None, ip_address)

    def log_login(self, user_id, ip_address=None):
        return self.record(user_id, AuditAction.LOGIN, "USER", user_id, None, None, ip_address)

    def log_logout(self, user_id, ip_address=None):
        return self.record(user_id, AuditAction.LOGOUT, "USER", user_id, None, None, ip_address)


def list_audit_logs(
    database,
    entity_type: Optional[str] = None,
    entity_id: Optional[str] = None,
    user_id: Optional[str] = None,
) -> Result:
    """Newest first, at most 1000 entries, with the actor's name and email."""
    with database.session() as session:
        query = session.query(AuditLogEntry, User.name, User.email).outerjoin(User, AuditLogEntry.user_id == User.id)
        if entity_type:
            query = query.filter(AuditLogEntry.entity_type == entity_type)
        if entity_id:
            query = query.filter(AuditLogEntry.entity_id == entity_id)
        if user_id:
            query = query.filter(AuditLogEntry.user_id == user_id)

        entries = []
        rows = query.order_by(AuditLogEntry.timestamp.desc()).limit(AUDIT_LOG_LIMIT).all()
        for entry, user_name, user_email in rows:
            data = entry.to_dict()
            data.update({"user_name": user_name, "user_email": user_email})
            entries.append(data)
        return Ok(entries)
