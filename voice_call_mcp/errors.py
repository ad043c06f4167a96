"""
Error taxonomy for the voice call MCP server.

Per-request errors never escape the dispatcher: they are turned into a
failure result or an error envelope. Only TransportSetupError (stdio mode)
and ConfigurationError are allowed to stop the process.
"""


class VoiceCallError(Exception):
    """Base class for all errors raised by this package."""


class ConfigurationError(VoiceCallError):
    """Configuration could not be loaded or is invalid."""


class ValidationError(VoiceCallError):
    """A call request has malformed or missing fields."""


class ServiceInitializationError(VoiceCallError):
    """An external service handle could not be constructed."""


class TelephonyInitializationError(ServiceInitializationError):
    """The telephony client could not be created from the configured credentials."""


class TunnelProvisioningError(ServiceInitializationError):
    """The tunnel collaborator did not produce a public URL."""


class CollaboratorCallError(VoiceCallError):
    """The telephony provider rejected or failed the call placement."""


class ProtocolError(VoiceCallError):
    """A tool-call request could not be routed."""


class UnknownToolError(ProtocolError):
    def __init__(self, name: str):
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class MissingArgumentsError(ProtocolError):
    def __init__(self):
        super().__init__("No arguments provided")


class TransportSetupError(VoiceCallError):
    """The selected transport could not be bound."""
