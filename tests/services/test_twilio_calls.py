"""
Unit tests for TwilioCallService.

The Twilio REST client is replaced with a Mock; nothing leaves the process.
"""

from unittest.mock import Mock, patch
from urllib.parse import parse_qs, urlparse

import pytest
from twilio.base.exceptions import TwilioRestException

from voice_call_mcp.config import TwilioConfig
from voice_call_mcp.errors import CollaboratorCallError, TelephonyInitializationError
from voice_call_mcp.services.twilio_calls import TwilioCallService


@pytest.fixture
def rest_client():
    client = Mock()
    client.calls.create.return_value = Mock(sid="CA999")
    return client


class TestFromConfig:

    def test_missing_credentials(self):
        with pytest.raises(TelephonyInitializationError, match="TWILIO_ACCOUNT_SID"):
            TwilioCallService.from_config(TwilioConfig(from_number="+15550001111"))

    def test_builds_rest_client(self):
        config = TwilioConfig(account_sid="ACtest", auth_token="tok", from_number="+15550001111")
        with patch("voice_call_mcp.services.twilio_calls.Client") as client_cls:
            service = TwilioCallService.from_config(config)

        client_cls.assert_called_once_with("ACtest", "tok")
        assert isinstance(service, TwilioCallService)


class TestMakeCall:

    @pytest.mark.asyncio
    async def test_places_call(self, rest_client):
        service = TwilioCallService(rest_client, "+15550001111")

        sid = await service.make_call("https://abc.ngrok.io", "+1234567890", "Remind them about Friday")

        assert sid == "CA999"
        kwargs = rest_client.calls.create.call_args.kwargs
        assert kwargs["to"] == "+1234567890"
        assert kwargs["from_"] == "+15550001111"
        assert "record" not in kwargs

        url = urlparse(kwargs["url"])
        assert f"{url.scheme}://{url.netloc}{url.path}" == "https://abc.ngrok.io/call/outgoing"
        query = parse_qs(url.query)
        assert query["callType"] == ["outgoing"]
        assert query["callContext"] == ["Remind them about Friday"]

    @pytest.mark.asyncio
    async def test_records_when_enabled(self, rest_client):
        service = TwilioCallService(rest_client, "+15550001111", record_calls=True)

        await service.make_call("https://abc.ngrok.io/", "+1234567890")

        kwargs = rest_client.calls.create.call_args.kwargs
        assert kwargs["record"] is True
        assert kwargs["url"].startswith("https://abc.ngrok.io/call/outgoing?")

    @pytest.mark.asyncio
    async def test_provider_rejection(self, rest_client):
        rest_client.calls.create.side_effect = TwilioRestException(
            400, "https://api.twilio.com/Calls.json", msg="The 'To' number is not a valid phone number.", code=21211
        )
        service = TwilioCallService(rest_client, "+15550001111")

        with pytest.raises(CollaboratorCallError, match="not a valid phone number"):
            await service.make_call("https://abc.ngrok.io", "+1234567890")

    @pytest.mark.asyncio
    async def test_missing_originating_number(self, rest_client):
        service = TwilioCallService(rest_client, None)

        with pytest.raises(CollaboratorCallError, match="TWILIO_NUMBER"):
            await service.make_call("https://abc.ngrok.io", "+1234567890")
        rest_client.calls.create.assert_not_called()
