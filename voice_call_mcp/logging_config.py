"""
Structured Logging Configuration

This module configures structured logging using the 'structlog' library.
It sets up processors for adding timestamps, log levels, correlation IDs,
and renders logs in JSON (default) or colorized console format.

Logs are written to stderr: in stdio mode stdout carries the protocol stream.
"""

import contextvars
import logging
import os
import sys
import uuid

import structlog
from structlog import dev as structlog_dev

SERVICE_NAME = 'voice-call-mcp'

# Context variable for correlation ID (one per tool-call request)
correlation_id_var = contextvars.ContextVar('correlation_id', default=None)

SENSITIVE_KEYS = {
    'api_key', 'apikey', 'api-key',
    'token', 'access_token', 'auth_token', 'authtoken', 'bearer',
    'password', 'passwd', 'pwd',
    'authorization', 'auth',
    'credential', 'credentials', 'secret', 'secrets',
    'account_sid',
}


def get_correlation_id():
    """Get the current correlation ID."""
    return correlation_id_var.get()


def set_correlation_id(value=None):
    """Set the correlation ID and return it."""
    if value is None:
        value = uuid.uuid4().hex[:12]
    correlation_id_var.set(value)
    return value


def add_correlation_id(logger, method_name, event_dict):
    """Add correlation ID to the log record."""
    correlation_id = get_correlation_id()
    if correlation_id:
        event_dict['correlation_id'] = correlation_id
    return event_dict


def add_service_context(logger, method_name, event_dict):
    """Add service context to the log record."""
    event_dict['service'] = SERVICE_NAME
    component = event_dict.get('logger')
    if not component:
        component = getattr(getattr(logger, 'logger', None), 'name', None) or getattr(logger, 'name', 'unknown')
    event_dict['component'] = component
    return event_dict


def _redact_value(value):
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, str):
        if not value:
            return ''
        # First 2 chars kept for debugging (e.g. "AC" for Twilio SIDs)
        if len(value) > 4:
            return f"{value[:2]}***REDACTED***"
        return "***REDACTED***"
    if isinstance(value, (list, tuple)):
        return [_redact_value(v) for v in value]
    return "***REDACTED***"


def _is_sensitive(key) -> bool:
    key_normalized = str(key).lower().replace('_', '').replace('-', '')
    for pattern in SENSITIVE_KEYS:
        pattern_normalized = pattern.replace('_', '').replace('-', '')
        # Exact or suffix match only, so "passthrough" doesn't match "pass"
        if key_normalized == pattern_normalized or key_normalized.endswith(pattern_normalized):
            return True
    return False


def _sanitize(d):
    sanitized = {}
    for key, value in d.items():
        if _is_sensitive(key):
            sanitized[key] = _redact_value(value)
        elif isinstance(value, dict):
            sanitized[key] = _sanitize(value)
        elif isinstance(value, (list, tuple)):
            sanitized[key] = [_sanitize(v) if isinstance(v, dict) else v for v in value]
        else:
            sanitized[key] = value
    return sanitized


def sanitize_secrets(logger, method_name, event_dict):
    """
    Redact sensitive information from log events.

    Twilio auth tokens, account SIDs, the speech-model API key and the ngrok
    auth token must never reach the logs. Values are replaced with
    '***REDACTED***' while the rest of the event is preserved.
    """
    return _sanitize(event_dict)


def configure_logging(log_level="INFO", log_format=None, stream=None):
    """
    Set up structured logging.

    Environment overrides (optional):
      - LOG_LEVEL: debug|info|warning|error|critical
      - LOG_FORMAT: json|console (default: json)
      - LOG_COLOR:  0|1 (console only; default: 1)
    """
    env_level = os.getenv("LOG_LEVEL")
    if env_level:
        log_level = env_level
    log_level_upper = str(log_level).upper()
    level_value = getattr(logging, log_level_upper, logging.INFO)

    log_format = (os.getenv("LOG_FORMAT") or log_format or "json").strip().lower()
    log_color = os.getenv("LOG_COLOR", "1").strip().lower() not in ("0", "false")

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            add_service_context,
            add_correlation_id,
            sanitize_secrets,
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    if log_format == "console":
        renderer = structlog_dev.ConsoleRenderer(colors=log_color)
    else:
        renderer = structlog.processors.JSONRenderer()

    processor_formatter = structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=[
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
        ],
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(level_value)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(processor_formatter)
    root_logger.addHandler(handler)

    # Reduce noisy third-party loggers
    for name in ('twilio.http_client', 'uvicorn.access', 'httpx', 'mcp', 'ngrok'):
        logging.getLogger(name).setLevel(logging.WARNING)
