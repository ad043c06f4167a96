"""
Configuration package for the voice call MCP server.

This package contains:
- models: pydantic models for every config section
- loaders: .env and YAML loading
- security: credential injection (environment only)
- defaults: environment overrides for non-secret settings
"""

from typing import List, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from voice_call_mcp.config.defaults import (
    apply_callback_defaults,
    apply_logging_defaults,
    apply_transport_defaults,
    apply_twilio_defaults,
)
from voice_call_mcp.config.loaders import load_env_file, load_optional_yaml
from voice_call_mcp.config.models import (
    AppConfig,
    CallbackConfig,
    LoggingConfig,
    NgrokConfig,
    OpenAIConfig,
    ServerConfig,
    TransportConfig,
    TwilioConfig,
)
from voice_call_mcp.config.security import inject_provider_api_keys, inject_twilio_credentials
from voice_call_mcp.errors import ConfigurationError


def load_config(path: Optional[str] = None, env_file: Optional[str] = None) -> AppConfig:
    """
    Load and validate configuration.

    Args:
        path: Optional YAML file (absolute or relative to project root)
        env_file: Optional .env file (defaults to ./.env)

    Raises:
        ConfigurationError: If a file can't be read or a value is invalid
    """
    # Phase 1: .env, then YAML with env expansion
    load_env_file(env_file)
    config_data = load_optional_yaml(path)

    # Phase 2: Security - credentials from environment only
    inject_twilio_credentials(config_data)
    inject_provider_api_keys(config_data)

    # Phase 3: Environment overrides and defaults
    apply_twilio_defaults(config_data)
    apply_callback_defaults(config_data)
    apply_transport_defaults(config_data)
    apply_logging_defaults(config_data)

    # Phase 4: Validate
    try:
        return AppConfig(**config_data)
    except PydanticValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def validate_production_config(config: AppConfig) -> Tuple[List[str], List[str]]:
    """
    Check a loaded configuration before serving.

    Returns:
        (errors, warnings): errors block startup, warnings are logged only.
        Missing credentials are warnings: tools can still be listed and a
        call attempt reports the failure to the caller.
    """
    errors: List[str] = []
    warnings: List[str] = []

    twilio = config.twilio
    if not twilio.account_sid or not twilio.auth_token:
        warnings.append("Twilio credentials not set (TWILIO_ACCOUNT_SID / TWILIO_AUTH_TOKEN); calls will fail")
    if not twilio.from_number:
        warnings.append("TWILIO_NUMBER not set; calls will fail")
    elif not twilio.from_number.startswith('+'):
        errors.append(f"TWILIO_NUMBER must be in E.164 format, got {twilio.from_number!r}")

    if not config.openai.api_key:
        warnings.append("OPENAI_API_KEY not set; the call bridge will not be able to speak")
    if not config.ngrok.authtoken:
        warnings.append("NGROK_AUTHTOKEN not set; tunnel creation relies on the ngrok agent's own config")

    for name, port in (("PORT", config.callback.port), ("SSE_PORT", config.transport.sse_port)):
        if port < 1 or port > 65535:
            errors.append(f"{name} {port} out of valid range (1-65535)")

    if config.transport.mode == 'sse':
        if config.transport.sse_port == config.callback.port:
            errors.append("SSE_PORT and PORT must differ: the tunnel exposes PORT for provider webhooks")
        if config.transport.sse_host == '0.0.0.0':
            warnings.append("SSE listener bound to 0.0.0.0 without authentication; restrict access with a firewall")

    if config.logging.level == 'debug':
        warnings.append("Debug logging enabled (call context is logged verbatim)")

    return errors, warnings


__all__ = [
    'AppConfig',
    'CallbackConfig',
    'LoggingConfig',
    'NgrokConfig',
    'OpenAIConfig',
    'ServerConfig',
    'TransportConfig',
    'TwilioConfig',
    'load_config',
    'validate_production_config',
]
