"""
Unit tests for NgrokTunnel with the ngrok SDK patched out.
"""

from unittest.mock import Mock, patch

import pytest

from voice_call_mcp.services.tunnel import NgrokTunnel


class TestNgrokTunnel:

    @pytest.mark.asyncio
    async def test_forward_with_authtoken(self):
        listener = Mock()
        listener.url.return_value = "https://abc.ngrok.io"
        with patch("voice_call_mcp.services.tunnel.ngrok") as ngrok_mod:
            ngrok_mod.forward.return_value = listener
            url = await NgrokTunnel("tok").forward(3004)

        assert url == "https://abc.ngrok.io"
        ngrok_mod.forward.assert_called_once_with(3004, authtoken="tok")

    @pytest.mark.asyncio
    async def test_forward_falls_back_to_env_token(self):
        listener = Mock()
        listener.url.return_value = "https://abc.ngrok.io"
        with patch("voice_call_mcp.services.tunnel.ngrok") as ngrok_mod:
            ngrok_mod.forward.return_value = listener
            await NgrokTunnel().forward(3004)

        ngrok_mod.forward.assert_called_once_with(3004, authtoken_from_env=True)

    @pytest.mark.asyncio
    async def test_empty_url_returned_as_is(self):
        listener = Mock()
        listener.url.return_value = None
        with patch("voice_call_mcp.services.tunnel.ngrok") as ngrok_mod:
            ngrok_mod.forward.return_value = listener
            url = await NgrokTunnel("tok").forward(3004)

        assert url == ""

    @pytest.mark.asyncio
    async def test_close_disconnects_opened_tunnels(self):
        listener = Mock()
        listener.url.return_value = "https://abc.ngrok.io"
        with patch("voice_call_mcp.services.tunnel.ngrok") as ngrok_mod:
            ngrok_mod.forward.return_value = listener
            tunnel = NgrokTunnel("tok")
            await tunnel.forward(3004)
            await tunnel.close()
            await tunnel.close()

        ngrok_mod.disconnect.assert_called_once_with("https://abc.ngrok.io")
