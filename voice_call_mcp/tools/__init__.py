"""
Tool calling system for the voice call MCP server.

Tools are described once (ToolDefinition), registered in a ToolRegistry and
executed by the RequestDispatcher.
"""
