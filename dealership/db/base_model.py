import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Dict

from sqlalchemy import Column, DateTime, String
from sqlalchemy import inspect as sa_inspect


def utcnow() -> datetime:
    """Naive UTC timestamp, the form every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_id() -> str:
    return str(uuid.uuid4())


def _jsonable(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    return value


class BaseModel:
    """Base class for all database models."""

    # Excluded from snapshots and API responses
    __private_fields__: tuple = ()

    # String UUID primary key, portable across PostgreSQL and SQLite
    id = Column(String(36), primary_key=True, default=new_id, index=True)

    # Timestamps
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    def to_dict(self) -> Dict[str, Any]:
        """Column snapshot in JSON-ready form, used for responses and audit values."""
        return {
            attr.key: _jsonable(getattr(self, attr.key))
            for attr in sa_inspect(self).mapper.column_attrs
            if attr.key not in self.__private_fields__
        }
