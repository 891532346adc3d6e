"""
Message delivery result models.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass
class DeliveryResult:
    """Result of message delivery attempt."""

    success: bool
    delivery_time: datetime
    error_message: Optional[str]
    message_sid: Optional[str] = None
    status: Optional[str] = None

    def validate(self) -> bool:
        """Validate delivery result data."""
        if not isinstance(self.success, bool):
            raise ValueError("success must be a boolean")

        if not isinstance(self.delivery_time, datetime):
            raise ValueError("delivery_time must be a datetime object")

        if self.error_message is not None:
            if not isinstance(self.error_message, str):
                raise ValueError("error_message must be a string or None")

            if len(self.error_message) > 500:
                raise ValueError("error_message too long (max 500 characters)")

        # Logical validation: if success is False, error_message should be provided
        if not self.success and not self.error_message:
            raise ValueError("error_message should be provided when success is False")

        if self.success and not self.message_sid:
            raise ValueError("message_sid should be provided when success is True")

        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "delivery_time": self.delivery_time.isoformat(),
            "message_sid": self.message_sid,
            "status": self.status,
            "error_message": self.error_message,
        }
