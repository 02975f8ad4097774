"""
DentalRef - Structured Logging Configuration
============================================

Logging setup for applications embedding the engine:
- JSON structured output (for log aggregation)
- Profile correlation IDs (one per criteria profile being ranked)
- Standard library integration (engine modules use ``logging.getLogger``)

The engine modules never call ``configure_logging`` themselves; the host
application does, once, at startup.

Usage:
    from dentalref.core.logging_config import configure_logging, bind_profile
    configure_logging(json_output=True)

    profile_id = bind_profile()
    results = rank(materials, profile)

Environment Variables:
    LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
    LOG_FORMAT: json, console (default: json in production, console in dev)
    ENVIRONMENT: production/prod/staging enable JSON by default
"""

import logging
import logging.config
import re
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Optional

import structlog
from structlog.types import EventDict, WrappedLogger

import dentalref
from dentalref.core.config import get_settings


# =============================================================================
# CONTEXT VARIABLES
# =============================================================================

# Criteria profile correlation ID - set per recommendation session
profile_id_var: ContextVar[Optional[str]] = ContextVar("profile_id", default=None)

# Selected procedure ID - set while linking related procedures
procedure_id_var: ContextVar[Optional[str]] = ContextVar("procedure_id", default=None)

_ANSI_ESCAPE = re.compile(r"\x1b\[[0-9;]*m")


def generate_profile_id() -> str:
    """Generate a new short profile ID."""
    return str(uuid.uuid4())[:8]


def get_profile_id() -> Optional[str]:
    """Get current profile ID from context."""
    return profile_id_var.get()


def bind_profile(profile_id: Optional[str] = None) -> str:
    """Bind a profile ID to the current context, generating one if omitted."""
    profile_id = profile_id or generate_profile_id()
    profile_id_var.set(profile_id)
    return profile_id


def bind_procedure(procedure_id: str) -> None:
    """Bind the selected procedure ID to the current context."""
    procedure_id_var.set(procedure_id)


def clear_context() -> None:
    """Reset all bound context variables."""
    profile_id_var.set(None)
    procedure_id_var.set(None)


# =============================================================================
# CUSTOM PROCESSORS
# =============================================================================

def add_profile_context(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict
) -> EventDict:
    """Add profile context from context variables."""
    profile_id = profile_id_var.get()
    if profile_id:
        event_dict["profile_id"] = profile_id

    procedure_id = procedure_id_var.get()
    if procedure_id:
        event_dict["procedure_id"] = procedure_id

    return event_dict


def add_service_info(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict
) -> EventDict:
    """Add service metadata."""
    event_dict["service"] = "dentalref"
    event_dict["version"] = dentalref.__version__
    return event_dict


def add_timestamp_iso(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict
) -> EventDict:
    """Add ISO 8601 timestamp with timezone."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def rename_event_key(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict
) -> EventDict:
    """Rename 'event' to 'message' for consistency with common log formats."""
    if "event" in event_dict:
        event_dict["message"] = event_dict.pop("event")
    return event_dict


def drop_color_codes(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict
) -> EventDict:
    """Remove ANSI color codes from message for JSON output."""
    if isinstance(event_dict.get("message"), str):
        event_dict["message"] = _ANSI_ESCAPE.sub("", event_dict["message"])
    return event_dict


# =============================================================================
# CONFIGURATION
# =============================================================================

def resolve_json_output(json_output: Optional[bool] = None) -> bool:
    """Explicit flag, then LOG_FORMAT, then ENVIRONMENT."""
    if json_output is not None:
        return json_output
    settings = get_settings()
    if settings.json_logs is not None:
        return settings.json_logs
    return settings.environment in ("production", "prod", "staging")


def configure_logging(
    json_output: Optional[bool] = None,
    log_level: Optional[str] = None,
    include_timestamp: bool = True
) -> None:
    """
    Configure structured logging for the application.

    Args:
        json_output: If True, output JSON. If None, auto-detect from environment.
        log_level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to LOG_LEVEL env var.
        include_timestamp: Include ISO timestamp in logs.
    """
    if log_level is None:
        log_level = get_settings().log_level
    log_level = log_level.upper()

    json_output = resolve_json_output(json_output)

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        add_profile_context,
        add_service_info,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if include_timestamp:
        shared_processors.insert(0, add_timestamp_iso)

    if json_output:
        shared_processors.extend([
            rename_event_key,
            drop_color_codes,
            structlog.processors.format_exc_info,
        ])
        final_processor = structlog.processors.JSONRenderer(sort_keys=True)
    else:
        final_processor = structlog.dev.ConsoleRenderer(
            colors=False,
            exception_formatter=structlog.dev.plain_traceback,
        )

    # Direct structlog usage (bypasses stdlib to avoid double-rendering)
    structlog.configure(
        processors=shared_processors + [final_processor],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level, logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Engine modules log through stdlib -> ProcessorFormatter -> same format
    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "structlog": {
                "()": structlog.stdlib.ProcessorFormatter,
                "processors": [
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    final_processor,
                ],
                "foreign_pre_chain": shared_processors,
            },
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stdout",
                "formatter": "structlog",
            },
        },
        "loggers": {
            "": {
                "handlers": ["default"],
                "level": log_level,
                "propagate": True,
            },
        },
    })

    logger = structlog.get_logger("logging_config")
    logger.info(
        "Logging configured",
        format="json" if json_output else "console",
        level=log_level,
    )
