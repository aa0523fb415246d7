from dataclasses import dataclass
from typing import Optional

from dealership.db.session import Database
from dealership.services.audit import AuditRecorder
from dealership.services.notifications import Notifier


@dataclass
class RequestContext:
    """Per-request collaborators handed to the gates and the domain services."""
    database: Database
    audit: AuditRecorder
    notifier: Notifier
    token: Optional[str]
    client_ip: str
