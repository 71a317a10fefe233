"""
Observability for mycoassert.

Provides:
- Structured logging with JSON format
- Prometheus metrics for the static compiler and the contract verifier

Usage:
    from mycoassert.core.observability import configure_structured_logging, metrics
"""

import json
import logging
from datetime import UTC, datetime

from prometheus_client import CollectorRegistry, Counter, Histogram

from mycoassert.core.config import settings

# ============================================================================
# Structured Logging Configuration
# ============================================================================

# LogRecord attributes that are not user-supplied `extra` fields
_RESERVED_RECORD_KEYS = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "getMessage",
        "exc_info",
        "exc_text",
        "stack_info",
    }
)


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs logs as JSON with standard fields:
    - timestamp: ISO 8601 format
    - level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - logger: Logger name
    - message: Log message
    - extra: Any additional context from logging.extra
    """

    def format(self, record: logging.LogRecord) -> str:
        """
        Format log record as JSON.

        Args:
            record: Python logging LogRecord

        Returns:
            JSON-formatted log string
        """
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
            }

        log_entry["function"] = record.funcName
        log_entry["line"] = record.lineno

        extra_keys = {
            k: v for k, v in record.__dict__.items() if k not in _RESERVED_RECORD_KEYS
        }
        if extra_keys:
            log_entry["extra"] = extra_keys

        return json.dumps(log_entry, default=str)


def configure_structured_logging(level: str | None = None, structured: bool | None = None) -> None:
    """
    Configure the `mycoassert` logger.

    Only the package logger is touched; the host application's root logger
    is left alone.

    Args:
        level: Log level (default: settings.app_log_level)
        structured: Emit JSON lines when True, plain text otherwise
            (default: settings.structured_logs)
    """
    if level is None:
        level = settings.app_log_level
    if structured is None:
        structured = settings.structured_logs

    package_logger = logging.getLogger("mycoassert")
    package_logger.handlers.clear()
    package_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler()
    if structured:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))

    package_logger.addHandler(handler)


# ============================================================================
# Prometheus Metrics
# ============================================================================

# Use a custom registry to avoid conflicts with the host application's metrics
_registry = CollectorRegistry()


class Metrics:
    """
    Centralized metrics collection.

    Metrics groups:
    - Compiler: compilation count, duration, validators emitted, source size
    - Contracts: verification outcomes
    """

    def __init__(self, registry: CollectorRegistry) -> None:
        """Initialize all metrics with proper labels."""
        self.registry = registry

        # -------------------------------------------------------------------
        # Compiler Metrics
        # -------------------------------------------------------------------

        self.compiler_compilations_total = Counter(
            "mycoassert_compiler_compilations_total",
            "Total schema registry compilations",
            ["status"],
            registry=self.registry,
        )

        self.compiler_duration_seconds = Histogram(
            "mycoassert_compiler_duration_seconds",
            "Schema registry compilation duration in seconds",
            buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
            registry=self.registry,
        )

        self.compiler_validators_count = Histogram(
            "mycoassert_compiler_validators_count",
            "Number of public validators in generated source",
            buckets=(1, 5, 10, 25, 50, 100, 250),
            registry=self.registry,
        )

        self.compiler_source_bytes = Histogram(
            "mycoassert_compiler_source_bytes",
            "Size of generated validator source in bytes",
            buckets=(1024, 4096, 16384, 65536, 262144, 1048576),
            registry=self.registry,
        )

        # -------------------------------------------------------------------
        # Contract Metrics
        # -------------------------------------------------------------------

        self.contract_verifications_total = Counter(
            "mycoassert_contract_verifications_total",
            "Total contract verifications",
            ["status"],
            registry=self.registry,
        )


# Global metrics instance
metrics = Metrics(_registry)
