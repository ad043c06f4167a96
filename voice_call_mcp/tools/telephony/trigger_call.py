"""
Trigger Call Tool - place an outbound phone call with context for the agent.
"""

from dataclasses import dataclass
from typing import Any, Dict, Union

import structlog

from voice_call_mcp.errors import ValidationError
from voice_call_mcp.metrics import CALLS_PLACED
from voice_call_mcp.tools.base import Tool, ToolCategory, ToolDefinition, ToolFailure, ToolName, ToolParameter
from voice_call_mcp.tools.context import ToolExecutionContext

logger = structlog.get_logger(__name__)

DEFAULT_CALLBACK_PORT = 3004

E164_ERROR = "Phone number must be in E.164 format (e.g., +1234567890)"

DESCRIPTION = """
Trigger an outbound phone call via Twilio.

**Best for:** Making phone calls to any phone number with custom context.
**Usage Example:**
```json
{
  "name": "trigger-call",
  "arguments": {
    "toNumber": "+1234567890",
    "callContext": "Hello, this is a test call from the MCP server."
  }
}
```
**Returns:** Call SID and status information.
"""


@dataclass(frozen=True)
class CallRequest:
    to_number: str
    call_context: str = ""


@dataclass(frozen=True)
class CallSuccess:
    call_sid: str
    to_number: str
    call_context: str

    is_error = False

    def to_payload(self) -> Dict[str, Any]:
        return {
            "status": "success",
            "message": "Call triggered successfully",
            "callSid": self.call_sid,
            "toNumber": self.to_number,
            "callContext": self.call_context,
        }


class CallFailure(ToolFailure):
    pass


CallResult = Union[CallSuccess, CallFailure]


def validate_phone_number(to_number: Any) -> str:
    """
    Coarse E.164 check: a leading '+' and at least 10 characters.

    Raises:
        ValidationError: If the number is missing or not E.164-shaped
    """
    if not to_number:
        raise ValidationError("Phone number is required")
    if not isinstance(to_number, str) or not to_number.startswith('+') or len(to_number) < 10:
        raise ValidationError(E164_ERROR)
    return to_number


class TriggerCallTool(Tool):
    """
    Place an outbound call through Twilio.

    The telephony client and the public callback tunnel are created on the
    first call and reused afterwards.
    """

    def __init__(self, services):
        self._services = services
        self._definition = ToolDefinition(
            name=ToolName.TRIGGER_CALL.value,
            description=DESCRIPTION,
            category=ToolCategory.TELEPHONY,
            parameters=[
                ToolParameter(
                    name="toNumber",
                    type="string",
                    description="The phone number to call (must be in E.164 format, e.g., +1234567890)",
                    required=True,
                ),
                ToolParameter(
                    name="callContext",
                    type="string",
                    description="Context or message for the call",
                ),
            ],
        )

    @property
    def definition(self) -> ToolDefinition:
        return self._definition

    def validate_parameters(self, parameters: Dict[str, Any]) -> None:
        validate_phone_number(parameters.get("toNumber"))
        super().validate_parameters(parameters)

    def parse_request(self, parameters: Dict[str, Any]) -> CallRequest:
        self.validate_parameters(parameters)
        return CallRequest(
            to_number=parameters["toNumber"],
            call_context=parameters.get("callContext") or "",
        )

    async def execute(self, parameters: Dict[str, Any], context: ToolExecutionContext) -> CallResult:
        """
        Validate the request, make sure the services exist and place the call.

        Returns:
            CallSuccess with the provider call SID, or CallFailure. Invalid
            requests fail before any collaborator is contacted.
        """
        try:
            request = self.parse_request(parameters)
        except ValidationError as e:
            logger.warning("Rejected call request", error=str(e))
            return CallFailure(str(e))

        logger.info("Call requested", to_number=request.to_number)
        logger.debug("Call context", call_context=request.call_context)

        port = context.get_config_value("callback.port", DEFAULT_CALLBACK_PORT)
        try:
            client = await self._services.ensure_telephony_client()
            callback_url = await self._services.ensure_public_callback_url(port)
            call_sid = await client.make_call(callback_url, request.to_number, request.call_context)
        except Exception as e:
            logger.error("Call trigger error", to_number=request.to_number, error=str(e))
            return CallFailure(f"Failed to trigger call: {e}")

        CALLS_PLACED.inc()
        logger.info("Call triggered", call_sid=call_sid, to_number=request.to_number,
                    elapsed_ms=context.elapsed_ms())
        return CallSuccess(call_sid=call_sid, to_number=request.to_number, call_context=request.call_context)
