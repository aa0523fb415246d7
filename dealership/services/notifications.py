"""
Outbound email and SMS notifiers.

These are stand-ins for a real delivery provider: they log the message and
report success. The communications service only relies on the
``NotificationResult`` they return, so a provider-backed subclass can report
failures the same way.
"""

import logging
import time
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_SENDER = "noreply@dealership.com"


@dataclass
class NotificationResult:
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None


class Notifier:
    """Routes email and SMS messages to their delivery channel"""

    def __init__(self, sender: str = DEFAULT_SENDER):
        self.sender = sender

    def send_email(self, to: str, subject: str, body: str) -> NotificationResult:
        logger.info(f"Sending email to {to} from {self.sender}: {subject}")
        return NotificationResult(success=True, message_id=f"mock-email-{time.time_ns()}")

    def send_sms(self, to: str, message: str) -> NotificationResult:
        logger.info(f"Sending SMS to {to} ({len(message)} chars)")
        return NotificationResult(success=True, message_id=f"mock-sms-{time.time_ns()}")
