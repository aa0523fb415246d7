"""
SQLAlchemy model for the audit_logs table.
"""

import enum

from sqlalchemy import JSON, Column, DateTime, String

from dealership.db.session import Base
from dealership.db.base_model import BaseModel


class AuditAction(str, enum.Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"


class AuditLogEntry(Base, BaseModel):
    """
    Append-only record of a mutating action. The application never updates or
    deletes rows in this table.
    """
    __tablename__ = "audit_logs"

    # Actor; no FK so entries outlive deleted users
    user_id = Column(String(36), nullable=True, index=True)
    action = Column(String, nullable=False)
    entity_type = Column(String, nullable=False, index=True)
    entity_id = Column(String(36), nullable=True, index=True)
    old_values = Column(JSON, nullable=True)
    new_values = Column(JSON, nullable=True)
    timestamp = Column(DateTime, nullable=False, index=True)
    ip_address = Column(String, nullable=True)

    def __repr__(self):
        return f"<AuditLogEntry {self.action} {self.entity_type} {self.entity_id}>"
