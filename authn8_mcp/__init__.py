"""Authn8 MCP package.

Provides an MCP server that lists the 2FA accounts reachable by an Authn8
personal access token and returns the current OTP code for one of them.
"""

__version__ = "1.0.0"

__all__ = [
    "client",
    "config",
    "errors",
    "mcp_server",
    "models",
    "resolver",
    "tools",
]
