"""Core package for the MCP dispatch server.

This package houses the protocol components:
- registry: Tool descriptors and the read-only registry
- server: Request lifecycle (method gate, envelope decoding, routing, error envelopes)
- errors: Exceptions raised by tools
"""

from .errors import ToolExecutionError, ValidationError
from .registry import Tool, ToolRegistry
from .server import CORS_HEADERS, PROTOCOL_VERSION, DispatchResult, DispatchServer

__all__ = [
    "CORS_HEADERS",
    "PROTOCOL_VERSION",
    "DispatchResult",
    "DispatchServer",
    "Tool",
    "ToolExecutionError",
    "ToolRegistry",
    "ValidationError",
]
