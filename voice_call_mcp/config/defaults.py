"""
Default value application for configuration.

Environment variables override YAML values for every non-secret setting.
"""

import os
from typing import Any, Dict

from voice_call_mcp.errors import ConfigurationError

_TRUTHY = ("1", "true", "yes", "on")


def parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUTHY


def _parse_port(name: str, value: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be an integer port number, got {value!r}")


def _section(config_data: Dict[str, Any], name: str) -> Dict[str, Any]:
    block = config_data.get(name)
    return dict(block) if isinstance(block, dict) else {}


def apply_twilio_defaults(config_data: Dict[str, Any]) -> None:
    """
    Environment variables:
    - RECORD_CALLS: record placed calls (default: false)
    """
    twilio = _section(config_data, 'twilio')
    record = os.getenv('RECORD_CALLS')
    if record is not None:
        twilio['record_calls'] = parse_bool(record)
    config_data['twilio'] = twilio


def apply_callback_defaults(config_data: Dict[str, Any]) -> None:
    """
    Environment variables:
    - PORT: local port exposed through the tunnel for provider webhooks (default: 3004)
    """
    callback = _section(config_data, 'callback')
    port = os.getenv('PORT')
    if port:
        callback['port'] = _parse_port('PORT', port)
    config_data['callback'] = callback


def apply_transport_defaults(config_data: Dict[str, Any]) -> None:
    """
    Select the transport binding.

    Environment variables:
    - MCP_TRANSPORT: 'stdio' or 'sse' (takes precedence)
    - SSE_LOCAL: 'true' selects 'sse'
    - SSE_HOST / SSE_PORT: listener address for sse mode
    - SSE_BIND_FAILURE_FATAL: stop the process when the sse listener can't bind
    """
    transport = _section(config_data, 'transport')

    mode = os.getenv('MCP_TRANSPORT')
    if mode:
        transport['mode'] = mode
    elif os.getenv('SSE_LOCAL') is not None:
        transport['mode'] = 'sse' if os.getenv('SSE_LOCAL', '').strip().lower() == 'true' else 'stdio'
    transport.setdefault('mode', 'stdio')

    host = os.getenv('SSE_HOST')
    if host:
        transport['sse_host'] = host
    port = os.getenv('SSE_PORT')
    if port:
        transport['sse_port'] = _parse_port('SSE_PORT', port)

    fatal = os.getenv('SSE_BIND_FAILURE_FATAL')
    if fatal is not None:
        transport['bind_failure_fatal'] = parse_bool(fatal)

    config_data['transport'] = transport


def apply_logging_defaults(config_data: Dict[str, Any]) -> None:
    """
    Environment variables:
    - LOG_LEVEL
    - LOG_FORMAT: json|console
    """
    logging_cfg = _section(config_data, 'logging')
    level = os.getenv('LOG_LEVEL')
    if level:
        logging_cfg['level'] = level.strip().lower()
    fmt = os.getenv('LOG_FORMAT')
    if fmt:
        logging_cfg['format'] = fmt.strip().lower()
    config_data['logging'] = logging_cfg
