from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional

from observability.metrics import record_request, record_tool_call

from .registry import ToolRegistry

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "0.1"
REQUEST_TYPES = ("capabilities", "tool_call")

CORS_HEADERS: Dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

BodyReader = Callable[[], Awaitable[bytes]]


def _reject_constant(name: str) -> Any:
    # NaN, Infinity and -Infinity are not JSON
    raise ValueError(f"Invalid JSON constant: {name}")


@dataclass(frozen=True)
class DispatchResult:
    """Protocol-level outcome of one request; `body` is None for 204."""

    status_code: int
    body: Optional[Dict[str, Any]] = None


class DispatchServer:
    """Routes MCP envelopes to the capability listing or to a registered tool.

    The dispatcher knows nothing about individual tools. It owns the request
    lifecycle only: method gate, envelope decoding, type routing and turning
    every failure into an error envelope.

    Envelope shapes:
    { "type": "capabilities" }
    { "type": "tool_call", "tool_name": str, "parameters": dict }
    """

    def __init__(self, registry: ToolRegistry) -> None:
        self.registry = registry

    # --- Public API ---
    async def handle_request(self, method: str, read_body: BodyReader) -> DispatchResult:
        method = (method or "").upper()
        if method == "OPTIONS":
            return DispatchResult(204)
        if method != "POST":
            record_request("none", 405)
            return self._error(405, "Method not allowed")

        raw = await read_body()
        try:
            envelope = self.decode_envelope(raw)
        except (ValueError, RecursionError) as e:
            logger.warning("Error processing request: %s", e)
            record_request("invalid", 400)
            return self._error(400, "Invalid request")

        result = await self.dispatch(envelope)
        request_type = envelope.get("type")
        record_request(request_type if request_type in REQUEST_TYPES else "unknown", result.status_code)
        return result

    @staticmethod
    def decode_envelope(raw: bytes | str) -> Dict[str, Any]:
        """Parse a request body into an envelope mapping.

        Raises ValueError (json.JSONDecodeError and UnicodeDecodeError are both
        subclasses) when the body is not a strict JSON object.
        """
        if isinstance(raw, (bytes, bytearray)):
            raw = raw.decode("utf-8")
        envelope = json.loads(raw, parse_constant=_reject_constant)
        if not isinstance(envelope, dict):
            raise ValueError(f"Envelope must be a JSON object, got {type(envelope).__name__}")
        return envelope

    async def dispatch(self, envelope: Dict[str, Any]) -> DispatchResult:
        request_type = envelope.get("type")
        logger.debug("Dispatching %s request", request_type)
        if request_type == "capabilities":
            return DispatchResult(200, self.capabilities())
        if request_type == "tool_call":
            return await self.call_tool(envelope.get("tool_name"), envelope.get("parameters", {}))
        return self._error(400, f"Unknown request type: {request_type}")

    def capabilities(self) -> Dict[str, Any]:
        return {
            "protocol_version": PROTOCOL_VERSION,
            "capabilities": {"tools": self.registry.list_descriptors()},
        }

    async def call_tool(self, tool_name: Any, parameters: Any) -> DispatchResult:
        tool = self.registry.get(tool_name)
        if tool is None:
            return self._error(404, f"Tool not found: {tool_name}")

        start = time.perf_counter()
        try:
            result = await tool.execute(parameters)
            # Fail here rather than in the transport so the caller still gets an error envelope
            json.dumps(result, allow_nan=False)
        except Exception as e:
            record_tool_call(tool.name, False, time.perf_counter() - start)
            logger.exception("Error executing tool %s", tool.name)
            return self._error(500, f"Error executing tool {tool.name}: {self._describe(e)}")

        record_tool_call(tool.name, True, time.perf_counter() - start)
        return DispatchResult(200, {"result": result})

    # --- Utilities ---
    @staticmethod
    def _describe(exc: BaseException) -> str:
        return str(exc) or exc.__class__.__name__

    @staticmethod
    def _error(status_code: int, message: str) -> DispatchResult:
        return DispatchResult(status_code, {"error": message})
