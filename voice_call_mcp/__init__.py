"""
MCP server that lets an AI assistant place outbound phone calls via Twilio.
"""

__version__ = "1.0.0"
