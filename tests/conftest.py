"""
Shared fixtures: service handles wired to stub collaborators, and a dispatcher.
"""

import pytest

from voice_call_mcp.config import AppConfig
from voice_call_mcp.dispatcher import RequestDispatcher
from voice_call_mcp.services.handles import ServiceHandles
from voice_call_mcp.tools.context import ToolExecutionContext
from voice_call_mcp.tools.registry import ToolRegistry
from tests.stubs import CountingFactory, StubTelephonyClient, StubTunnel

_ENV_VARS = (
    "TWILIO_ACCOUNT_SID", "TWILIO_AUTH_TOKEN", "TWILIO_NUMBER", "OPENAI_API_KEY",
    "NGROK_AUTHTOKEN", "RECORD_CALLS", "PORT", "SSE_LOCAL", "MCP_TRANSPORT",
    "SSE_HOST", "SSE_PORT", "SSE_BIND_FAILURE_FATAL", "LOG_LEVEL", "LOG_FORMAT",
    "VOICE_CALL_CONFIG",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Keep the host environment and any local .env out of the tests."""
    for name in _ENV_VARS:
        # setenv first so teardown also removes values loaded from .env files
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.setenv("VOICE_CALL_ENV_FILE", str(tmp_path / "missing.env"))


@pytest.fixture
def app_config():
    return AppConfig(
        twilio={"account_sid": "ACtest", "auth_token": "secret-token", "from_number": "+15550001111"},
        callback={"port": 3004},
    )


@pytest.fixture
def telephony_client():
    return StubTelephonyClient()


@pytest.fixture
def client_factory(telephony_client):
    return CountingFactory(telephony_client)


@pytest.fixture
def tunnel():
    return StubTunnel()


@pytest.fixture
def services(app_config, client_factory, tunnel):
    return ServiceHandles(app_config, client_factory=client_factory, tunnel=tunnel)


@pytest.fixture
def registry(services):
    registry = ToolRegistry()
    registry.initialize_default_tools(services)
    return registry


@pytest.fixture
def dispatcher(registry, app_config):
    return RequestDispatcher(registry, config=app_config.model_dump())


@pytest.fixture
def tool_context(app_config):
    return ToolExecutionContext(request_id="req-1", tool_name="trigger-call", config=app_config.model_dump())
