"""MCP server wiring: FastMCP instance, tool decorator and error payloads."""
