"""
Security-critical configuration injection.

SECURITY POLICY:
- Twilio credentials, the speech-model API key and the ngrok auth token
  MUST come from environment variables only
- Values for them found in YAML are discarded
"""

import os
from typing import Any, Dict


def _is_nonempty_string(val: Any) -> bool:
    """Check if value is a string with non-whitespace content."""
    return isinstance(val, str) and val.strip() != ""


def _env(name: str):
    value = os.getenv(name)
    return value.strip() if _is_nonempty_string(value) else None


def _section(config_data: Dict[str, Any], name: str) -> Dict[str, Any]:
    block = config_data.get(name)
    return dict(block) if isinstance(block, dict) else {}


def inject_twilio_credentials(config_data: Dict[str, Any]) -> None:
    """
    Inject Twilio credentials from environment variables ONLY.

    Environment variables:
    - TWILIO_ACCOUNT_SID
    - TWILIO_AUTH_TOKEN

    The originating number is not a secret: TWILIO_NUMBER overrides the
    YAML value when set.
    """
    twilio = _section(config_data, 'twilio')
    twilio['account_sid'] = _env("TWILIO_ACCOUNT_SID")
    twilio['auth_token'] = _env("TWILIO_AUTH_TOKEN")
    from_number = _env("TWILIO_NUMBER")
    if from_number:
        twilio['from_number'] = from_number
    config_data['twilio'] = twilio


def inject_provider_api_keys(config_data: Dict[str, Any]) -> None:
    """
    Inject the speech-model API key and the tunnel auth token.

    Environment variables:
    - OPENAI_API_KEY
    - NGROK_AUTHTOKEN
    """
    openai = _section(config_data, 'openai')
    openai['api_key'] = _env("OPENAI_API_KEY")
    config_data['openai'] = openai

    ngrok = _section(config_data, 'ngrok')
    ngrok['authtoken'] = _env("NGROK_AUTHTOKEN")
    config_data['ngrok'] = ngrok
