"""
Alert formatting models.
"""

from dataclasses import dataclass

# Twilio rejects WhatsApp bodies longer than this
MAX_MESSAGE_LENGTH = 1600


@dataclass
class FormattedAlert:
    """Formatted alert ready for delivery."""

    title: str
    message: str
    entry_count: int = 0

    def validate(self) -> bool:
        """Validate formatted alert data."""
        if not isinstance(self.title, str):
            raise ValueError("title must be a string")

        if not self.title.strip():
            raise ValueError("title cannot be empty")

        if len(self.title) > 200:
            raise ValueError("title too long (max 200 characters)")

        if not isinstance(self.message, str):
            raise ValueError("message must be a string")

        if not self.message.strip():
            raise ValueError("message cannot be empty")

        if len(self.message) > MAX_MESSAGE_LENGTH:
            raise ValueError(
                f"message too long (max {MAX_MESSAGE_LENGTH} characters)"
            )

        if not isinstance(self.entry_count, int) or self.entry_count < 0:
            raise ValueError("entry_count must be a non-negative integer")

        return True
