"""
Structured logging configuration for the Visiora backend.

Provides JSON-formatted logs with context propagation so every line
emitted while serving a request carries its request id, user and store.
"""

import logging
import json
import sys
import uuid
from contextvars import ContextVar
from datetime import datetime
from typing import Any, Dict, Optional

# Context variables for request tracing
request_id_var: ContextVar[str] = ContextVar("request_id", default="")
user_id_var: ContextVar[str] = ContextVar("user_id", default="")
store_domain_var: ContextVar[str] = ContextVar("store_domain", default="")


def generate_request_id() -> str:
    """Generate a unique request ID."""
    return str(uuid.uuid4())[:8]


def set_request_context(
    request_id: Optional[str] = None,
    user_id: Optional[str] = None,
) -> str:
    """
    Set request context variables for logging.

    store_domain_var is set by the store handlers after the store lookup.
    """
    req_id = request_id or generate_request_id()
    request_id_var.set(req_id)
    if user_id:
        user_id_var.set(str(user_id))
    return req_id


def clear_request_context() -> None:
    """Clear request context after request completes."""
    request_id_var.set("")
    user_id_var.set("")
    store_domain_var.set("")


class StructuredLogFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs logs in JSON format suitable for log aggregation systems
    like ELK, Splunk, or CloudWatch.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        # Add context from context variables
        if request_id := request_id_var.get():
            log_data["request_id"] = request_id
        if user_id := user_id_var.get():
            log_data["user_id"] = user_id
        if store_domain := store_domain_var.get():
            log_data["store"] = store_domain

        # Add extra fields from record
        if hasattr(record, "extra_fields"):
            log_data.update(record.extra_fields)

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class DevelopmentFormatter(logging.Formatter):
    """
    Human-readable formatter for development.

    Provides colorized, readable output for local development.
    """

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
        "RESET": "\033[0m",
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.COLORS["RESET"])
        reset = self.COLORS["RESET"]

        # Build context string
        context_parts = []
        if request_id := request_id_var.get():
            context_parts.append(f"req={request_id}")
        if user_id := user_id_var.get():
            context_parts.append(f"user={user_id}")
        if store_domain := store_domain_var.get():
            context_parts.append(f"store={store_domain}")

        context_str = f" [{', '.join(context_parts)}]" if context_parts else ""

        timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]

        log_line = (
            f"{color}{timestamp} {record.levelname:8}{reset}"
            f"{context_str} "
            f"{record.name}: {record.getMessage()}"
        )

        if hasattr(record, "extra_fields") and record.extra_fields:
            extras = " | ".join(f"{k}={v}" for k, v in record.extra_fields.items())
            log_line += f" | {extras}"

        if record.exc_info:
            log_line += f"\n{self.formatException(record.exc_info)}"

        return log_line


class ContextLogger(logging.LoggerAdapter):
    """
    Logger adapter that automatically includes context in log messages.

    Usage:
        logger = get_logger(__name__)
        logger.info("Fetched orders", extra={"count": 12, "api_version": "2024-07"})
    """

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        # Extract extra fields and store them properly
        extra = kwargs.get("extra", {})
        if extra:
            # Store extra fields in a way the formatter can access
            kwargs["extra"] = {"extra_fields": extra}
        return msg, kwargs


def get_logger(name: str) -> ContextLogger:
    """
    Get a configured logger with context support.

    Args:
        name: Logger name (typically __name__)

    Returns:
        ContextLogger instance
    """
    logger = logging.getLogger(name)
    return ContextLogger(logger, {})


def configure_logging(
    log_level: str = "INFO",
    json_format: bool = False,
) -> None:
    """
    Configure application logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON format for production, readable format for development
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper()))

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(getattr(logging, log_level.upper()))

    if json_format:
        formatter = StructuredLogFormatter()
    else:
        formatter = DevelopmentFormatter()

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


# ============ Specialized Loggers ============


class PerformanceLogger:
    """Logger specialized for upstream call timings."""

    def __init__(self, name: str = "performance"):
        self.logger = get_logger(name)

    def log_upstream_call(
        self,
        resource: str,
        shop_domain: str,
        api_version: str,
        status_code: Optional[int],
        duration_ms: float,
        success: bool = True,
    ) -> None:
        """Log a single Shopify Admin API attempt."""
        self.logger.info(
            f"Shopify call: {resource}",
            extra={
                "resource": resource,
                "shop_domain": shop_domain,
                "api_version": api_version,
                "status_code": status_code,
                "duration_ms": round(duration_ms, 2),
                "success": success,
            },
        )


class SecurityLogger:
    """Logger specialized for security events."""

    def __init__(self, name: str = "security"):
        self.logger = get_logger(name)

    def log_credential_access(
        self, user_id: int, shop_domain: str, action: str
    ) -> None:
        """Log credential access."""
        self.logger.info(
            f"Credential {action}",
            extra={
                "user_id": user_id,
                "shop_domain": shop_domain,
                "action": action,
            },
        )

    def log_decrypt_failure(self, shop_domain: str, reason: str) -> None:
        """Log a stored credential that failed to decrypt."""
        self.logger.warning(
            "Credential decryption failed",
            extra={"shop_domain": shop_domain, "reason": reason},
        )


# Global logger instances
perf_logger = PerformanceLogger()
security_logger = SecurityLogger()
