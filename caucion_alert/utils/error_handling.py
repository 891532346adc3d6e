"""
Error handling utilities for the Caución Rate Alert system.

Failures are recorded in an in-memory tracker and logged. Nothing here
retries: a failed scrape or send is reported once and the next trigger
starts from scratch.
"""

import functools
import inspect
import traceback
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from .logging import get_logger


class ErrorSeverity(Enum):
    """Error severity levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories for classification."""

    SCRAPING = "scraping"
    CONFIGURATION = "configuration"
    PARSING = "parsing"
    MESSAGE_DELIVERY = "message_delivery"
    SCHEDULING = "scheduling"
    HTTP = "http"
    SYSTEM = "system"


@dataclass
class ErrorInfo:
    """Information about an error occurrence."""

    timestamp: datetime
    component: str
    category: ErrorCategory
    severity: ErrorSeverity
    message: str
    exception_type: str
    traceback: str
    context: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "component": self.component,
            "category": self.category.value,
            "severity": self.severity.value,
            "message": self.message,
            "exception_type": self.exception_type,
        }


class ErrorTracker:
    """Keeps a bounded history of errors for the health endpoint."""

    def __init__(self, max_errors: int = 500):
        self.max_errors = max_errors
        self.errors: List[ErrorInfo] = []
        self.error_counts: Dict[str, int] = {}
        self.logger = get_logger("error_tracker")

    def record_error(
        self,
        component: str,
        category: ErrorCategory,
        severity: ErrorSeverity,
        message: str,
        exception: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> ErrorInfo:
        """
        Record an error occurrence.

        Args:
            component: Component where error occurred
            category: Error category
            severity: Error severity
            message: Error message
            exception: Exception object if available
            context: Additional context information

        Returns:
            ErrorInfo object
        """
        error_info = ErrorInfo(
            timestamp=datetime.now(),
            component=component,
            category=category,
            severity=severity,
            message=message,
            exception_type=type(exception).__name__ if exception else "Unknown",
            traceback="".join(
                traceback.format_exception(
                    type(exception), exception, exception.__traceback__
                )
            )
            if exception
            else "",
            context=context or {},
        )

        self.errors.append(error_info)
        if len(self.errors) > self.max_errors:
            self.errors.pop(0)

        error_key = f"{component}.{category.value}.{severity.value}"
        self.error_counts[error_key] = self.error_counts.get(error_key, 0) + 1

        self.logger.error(
            f"Error recorded: {message}",
            extra={
                "error_component": component,
                "category": category.value,
                "severity": severity.value,
                "exception_type": error_info.exception_type,
                "context": context,
            },
        )

        return error_info

    def get_error_stats(self) -> Dict[str, Any]:
        """Get error statistics."""
        last_day = datetime.now() - timedelta(days=1)

        return {
            "total_errors": len(self.errors),
            "errors_last_day": len([e for e in self.errors if e.timestamp >= last_day]),
            "error_counts": self.error_counts.copy(),
            "last_error": self.errors[-1].to_dict() if self.errors else None,
        }

    def get_component_errors(self, component: str, limit: int = 10) -> List[ErrorInfo]:
        """Get recent errors for a specific component."""
        return [e for e in self.errors if e.component == component][-limit:]

    def clear(self):
        self.errors.clear()
        self.error_counts.clear()


# Global error tracker instance
_error_tracker: Optional[ErrorTracker] = None


def get_error_tracker() -> ErrorTracker:
    """Get global error tracker instance."""
    global _error_tracker
    if _error_tracker is None:
        _error_tracker = ErrorTracker()
    return _error_tracker


def with_error_handling(
    component: str,
    category: ErrorCategory,
    severity: ErrorSeverity = ErrorSeverity.MEDIUM,
    fallback_value: Any = None,
    suppress_exceptions: bool = False,
):
    """
    Decorator that records and logs failures of the wrapped callable.

    Args:
        component: Component name
        category: Error category
        severity: Error severity
        fallback_value: Value to return on failure when suppressing
        suppress_exceptions: Whether to swallow the exception after recording it
    """

    def decorator(func: Callable) -> Callable:
        def handle(e: Exception):
            get_error_tracker().record_error(
                component=component,
                category=category,
                severity=severity,
                message=f"Error in {func.__name__}: {e}",
                exception=e,
                context={"function": func.__name__},
            )
            if not suppress_exceptions:
                raise e
            get_logger(component).warning(
                f"Suppressing exception in {func.__name__}: {e}"
            )
            return fallback_value

        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                return handle(e)

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                return handle(e)

        if inspect.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator
