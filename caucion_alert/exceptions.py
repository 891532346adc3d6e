"""
Exception types raised by the Caución Rate Alert components.
"""

from typing import Optional


class CaucionAlertError(Exception):
    """Base class for all errors raised by this package."""


class ConfigurationError(CaucionAlertError, ValueError):
    """Raised when the configuration cannot be loaded or is invalid."""


class FetchError(CaucionAlertError):
    """Raised when the rate page cannot be navigated to or never renders its table."""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


class NotifyError(CaucionAlertError):
    """Raised when the messaging provider rejects or fails a send."""

    def __init__(
        self,
        message: str,
        code: Optional[int] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.code = code
        self.status_code = status_code


class SessionExpiredError(NotifyError):
    """
    Raised when the WhatsApp sandbox session expired or the recipient never joined.

    The recipient has to send ``join <keyword>`` to the sandbox number again
    before any further message can be delivered.
    """

    def __init__(
        self,
        message: str,
        code: Optional[int] = None,
        status_code: Optional[int] = None,
        sandbox_number: Optional[str] = None,
    ):
        super().__init__(message, code=code, status_code=status_code)
        self.sandbox_number = sandbox_number

    @property
    def rejoin_hint(self) -> str:
        """Human-actionable instructions to restore the sandbox session."""
        number = self.sandbox_number or "the sandbox number"
        return f'Send "join <your-keyword>" to {number} to receive alerts again.'
