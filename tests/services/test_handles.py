"""
Unit tests for ServiceHandles.

Tests cover:
- Idempotent lazy construction of the telephony client and callback URL
- Single-flight behaviour under concurrent callers
- Failure handling (handle stays absent, later retry succeeds)
"""

import asyncio

import pytest

from voice_call_mcp.errors import TelephonyInitializationError, TunnelProvisioningError
from voice_call_mcp.services.handles import ServiceHandles
from tests.stubs import CountingFactory, StubTelephonyClient, StubTunnel


class TestTelephonyClient:

    @pytest.mark.asyncio
    async def test_created_once(self, services, client_factory, telephony_client):
        first = await services.ensure_telephony_client()
        second = await services.ensure_telephony_client()

        assert first is telephony_client
        assert second is first
        assert client_factory.created == 1

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_construction(self, app_config, tunnel):
        created = []

        async def slow_factory(config):
            created.append(config)
            await asyncio.sleep(0)
            return StubTelephonyClient()

        services = ServiceHandles(app_config, client_factory=slow_factory, tunnel=tunnel)
        clients = await asyncio.gather(*(services.ensure_telephony_client() for _ in range(5)))

        assert len(created) == 1
        assert all(c is clients[0] for c in clients)

    @pytest.mark.asyncio
    async def test_factory_failure_is_wrapped_and_retried(self, app_config, tunnel):
        attempts = []

        def flaky_factory(config):
            attempts.append(config)
            if len(attempts) == 1:
                raise RuntimeError("bad credentials")
            return StubTelephonyClient()

        services = ServiceHandles(app_config, client_factory=flaky_factory, tunnel=tunnel)

        with pytest.raises(TelephonyInitializationError, match="bad credentials"):
            await services.ensure_telephony_client()
        assert services.telephony_client is None

        client = await services.ensure_telephony_client()
        assert client is services.telephony_client
        assert len(attempts) == 2


class TestPublicCallbackUrl:

    @pytest.mark.asyncio
    async def test_provisioned_once(self, services, tunnel):
        first = await services.ensure_public_callback_url(3004)
        second = await services.ensure_public_callback_url(3004)

        assert first == second == "https://abc.ngrok.io"
        assert tunnel.forward_calls == [3004]

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_tunnel(self, services, tunnel):
        urls = await asyncio.gather(*(services.ensure_public_callback_url(3004) for _ in range(4)))

        assert set(urls) == {"https://abc.ngrok.io"}
        assert tunnel.forward_calls == [3004]

    @pytest.mark.asyncio
    async def test_empty_url_is_a_provisioning_error(self, app_config, telephony_client):
        services = ServiceHandles(app_config, client_factory=CountingFactory(telephony_client),
                                  tunnel=StubTunnel(url=""))

        with pytest.raises(TunnelProvisioningError, match="Failed to obtain ngrok URL"):
            await services.ensure_public_callback_url(3004)
        assert services.callback_url is None

    @pytest.mark.asyncio
    async def test_tunnel_exception_is_wrapped_and_retried(self, app_config, telephony_client):
        tunnel = StubTunnel(error=OSError("authtoken rejected"))
        services = ServiceHandles(app_config, client_factory=CountingFactory(telephony_client), tunnel=tunnel)

        with pytest.raises(TunnelProvisioningError, match="authtoken rejected"):
            await services.ensure_public_callback_url(3004)

        tunnel.error = None
        assert await services.ensure_public_callback_url(3004) == "https://abc.ngrok.io"
        assert len(tunnel.forward_calls) == 2

    @pytest.mark.asyncio
    async def test_close_closes_tunnel(self, services, tunnel):
        await services.close()
        assert tunnel.closed is True
