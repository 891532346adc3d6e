"""
Structured logging utilities for the Caución Rate Alert system.

Every component logs JSON payloads through the standard ``logging``
hierarchy rooted at ``caucion_alert``. The manager wires console output,
a rotating main log, a rotating error log and one rotating file per
pipeline component.
"""

import json
import logging
import logging.handlers
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

ROOT_LOGGER_NAME = "caucion_alert"

# Components that get their own log file
PIPELINE_COMPONENTS = [
    "market.clock",
    "rate.scraper",
    "notifier",
    "pipeline",
    "server",
    "scheduler",
    "orchestrator",
]

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class ComponentLogger:
    """
    Structured logger bound to one component.

    Messages are serialized as JSON with the component name, a timestamp
    and any context passed at construction or per call.
    """

    def __init__(
        self, component_name: str, extra_context: Optional[Dict[str, Any]] = None
    ):
        self.component_name = component_name
        self.extra_context = extra_context or {}
        self.logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.{component_name}")

    def _format_message(
        self, message: str, extra: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        log_data = {
            "timestamp": datetime.now().isoformat(),
            "component": self.component_name,
            "message": message,
            **self.extra_context,
        }

        if extra:
            log_data.update(extra)

        return log_data

    def _emit(
        self,
        level: int,
        message: str,
        extra: Optional[Dict[str, Any]] = None,
        exc_info: bool = False,
    ):
        log_data = self._format_message(message, extra)
        if exc_info:
            log_data["exception"] = True
        self.logger.log(level, json.dumps(log_data, default=str), exc_info=exc_info)

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self._emit(logging.DEBUG, message, extra)

    def info(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self._emit(logging.INFO, message, extra)

    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self._emit(logging.WARNING, message, extra)

    def error(
        self,
        message: str,
        extra: Optional[Dict[str, Any]] = None,
        exc_info: bool = False,
    ):
        self._emit(logging.ERROR, message, extra, exc_info)

    def critical(
        self,
        message: str,
        extra: Optional[Dict[str, Any]] = None,
        exc_info: bool = False,
    ):
        self._emit(logging.CRITICAL, message, extra, exc_info)


class LoggingManager:
    """
    Centralized logging configuration.

    Handles handler setup, log file rotation and the cache of component loggers.
    """

    def __init__(
        self,
        log_dir: str = "logs",
        log_level: str = "INFO",
        components: Optional[List[str]] = None,
    ):
        """
        Initialize logging manager.

        Args:
            log_dir: Directory for log files
            log_level: Default log level name
            components: Components that get a dedicated log file
        """
        self.log_dir = Path(log_dir)
        self.log_level = getattr(logging, log_level.upper())
        self.components = components if components is not None else PIPELINE_COMPONENTS
        self.component_loggers: Dict[str, ComponentLogger] = {}

        self.log_dir.mkdir(parents=True, exist_ok=True)
        self._setup_logging()

    def _setup_logging(self):
        formatter = logging.Formatter(LOG_FORMAT)

        root_logger = logging.getLogger(ROOT_LOGGER_NAME)
        root_logger.setLevel(self.log_level)
        root_logger.handlers.clear()

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(self.log_level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

        main_handler = logging.handlers.RotatingFileHandler(
            self.log_dir / f"{ROOT_LOGGER_NAME}.log",
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
        )
        main_handler.setLevel(self.log_level)
        main_handler.setFormatter(formatter)
        root_logger.addHandler(main_handler)

        error_handler = logging.handlers.RotatingFileHandler(
            self.log_dir / "errors.log",
            maxBytes=5 * 1024 * 1024,  # 5MB
            backupCount=3,
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(formatter)
        root_logger.addHandler(error_handler)

        self._setup_component_handlers()

    def _setup_component_handlers(self):
        for component in self.components:
            component_logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.{component}")
            component_logger.handlers.clear()

            handler = logging.handlers.RotatingFileHandler(
                self.log_dir / f"{component.replace('.', '_')}.log",
                maxBytes=5 * 1024 * 1024,  # 5MB
                backupCount=2,
            )
            handler.setLevel(self.log_level)
            handler.setFormatter(
                logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
            )
            component_logger.addHandler(handler)

    def get_component_logger(
        self, component_name: str, extra_context: Optional[Dict[str, Any]] = None
    ) -> ComponentLogger:
        """Get or create a cached component logger."""
        cache_key = f"{component_name}_{hash(str(extra_context))}"

        if cache_key not in self.component_loggers:
            self.component_loggers[cache_key] = ComponentLogger(
                component_name, extra_context
            )

        return self.component_loggers[cache_key]

    def set_log_level(self, level: str):
        """Set log level for the root logger and all non-error handlers."""
        log_level = getattr(logging, level.upper())
        self.log_level = log_level

        root_logger = logging.getLogger(ROOT_LOGGER_NAME)
        root_logger.setLevel(log_level)

        for handler in root_logger.handlers:
            if "errors.log" in str(getattr(handler, "baseFilename", "")):
                continue
            handler.setLevel(log_level)

    def get_log_stats(self) -> Dict[str, Any]:
        stats = {
            "log_directory": str(self.log_dir),
            "log_level": logging.getLevelName(self.log_level),
            "component_loggers": len(self.component_loggers),
            "log_files": [],
        }

        for log_file in sorted(self.log_dir.glob("*.log")):
            file_stats = log_file.stat()
            stats["log_files"].append(
                {
                    "name": log_file.name,
                    "size_bytes": file_stats.st_size,
                    "modified": datetime.fromtimestamp(file_stats.st_mtime).isoformat(),
                }
            )

        return stats


# Global logging manager instance
_logging_manager: Optional[LoggingManager] = None


def setup_logging(log_dir: str = "logs", log_level: str = "INFO") -> LoggingManager:
    """
    Setup global logging configuration.

    Args:
        log_dir: Directory for log files
        log_level: Default log level

    Returns:
        LoggingManager instance
    """
    global _logging_manager
    _logging_manager = LoggingManager(log_dir, log_level)
    return _logging_manager


def get_logger(
    component_name: str, extra_context: Optional[Dict[str, Any]] = None
) -> ComponentLogger:
    """Get a component logger, initializing default logging on first use."""
    if _logging_manager is None:
        setup_logging()

    return _logging_manager.get_component_logger(component_name, extra_context)


def get_logging_stats() -> Dict[str, Any]:
    """Get logging statistics."""
    if _logging_manager is None:
        return {"error": "Logging not initialized"}

    return _logging_manager.get_log_stats()
