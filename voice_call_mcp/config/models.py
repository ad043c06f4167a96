"""
Configuration models for the voice call MCP server.

Pydantic v2 models validate the merged YAML + environment configuration.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class TwilioConfig(BaseModel):
    account_sid: Optional[str] = None
    auth_token: Optional[str] = None
    from_number: Optional[str] = None
    record_calls: bool = Field(default=False)

    @field_validator("from_number", mode="before")
    @classmethod
    def _from_number_text(cls, value):
        if value is None:
            return None
        if isinstance(value, str):
            # Unexpanded ${VAR} means the variable is unset
            return None if value.startswith("${") else value
        # YAML reads an unquoted +15550001111 as an int and drops the '+'
        raise ValueError(
            f"from_number must be a string; quote E.164 numbers in YAML "
            f"(e.g. from_number: \"+15550001111\"), got {value!r}"
        )


class OpenAIConfig(BaseModel):
    # Speech-model key handed to the call bridge; this process only checks it is present.
    api_key: Optional[str] = None


class NgrokConfig(BaseModel):
    authtoken: Optional[str] = None


class CallbackConfig(BaseModel):
    port: int = Field(default=3004)
    path: str = Field(default="/call/outgoing")

    @field_validator("path")
    @classmethod
    def _leading_slash(cls, value: str) -> str:
        if not value.startswith("/"):
            return "/" + value
        return value


class TransportConfig(BaseModel):
    mode: str = Field(default="stdio")  # 'stdio' | 'sse'
    sse_host: str = Field(default="127.0.0.1")
    sse_port: int = Field(default=3000)
    sse_path: str = Field(default="/sse")
    message_path: str = Field(default="/messages/")
    # Whether a listener bind failure in sse mode stops the process
    bind_failure_fatal: bool = Field(default=False)

    @field_validator("mode")
    @classmethod
    def _known_mode(cls, value: str) -> str:
        mode = (value or "").strip().lower()
        if mode not in ("stdio", "sse"):
            raise ValueError(f"Unsupported transport mode: {value!r} (expected 'stdio' or 'sse')")
        return mode


class LoggingConfig(BaseModel):
    level: str = Field(default="info")  # debug|info|warning|error|critical
    format: str = Field(default="json")  # json|console


class ServerConfig(BaseModel):
    name: str = Field(default="voice-call-mcp")
    version: str = Field(default="1.0.0")


class AppConfig(BaseModel):
    twilio: TwilioConfig = Field(default_factory=TwilioConfig)
    openai: OpenAIConfig = Field(default_factory=OpenAIConfig)
    ngrok: NgrokConfig = Field(default_factory=NgrokConfig)
    callback: CallbackConfig = Field(default_factory=CallbackConfig)
    transport: TransportConfig = Field(default_factory=TransportConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
