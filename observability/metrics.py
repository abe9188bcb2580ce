"""
Prometheus metrics for dispatched requests and tool calls.
All metrics live in one process-local registry, served by a standalone exporter
that binds its own port so it never shares the MCP endpoint.
"""
from __future__ import annotations

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest, start_http_server

# Single registry for the process
REGISTRY = CollectorRegistry()

REQUESTS_TOTAL = Counter(
    "mcp_requests_total",
    "Dispatched requests by envelope type and response status",
    ["request_type", "status"],
    registry=REGISTRY,
)
TOOL_CALLS_TOTAL = Counter(
    "mcp_tool_calls_total",
    "Tool invocations by tool and outcome",
    ["tool", "outcome"],
    registry=REGISTRY,
)
TOOL_LATENCY = Histogram(
    "mcp_tool_latency_seconds",
    "Tool execution latency",
    ["tool"],
    registry=REGISTRY,
)

def record_request(request_type: str, status: int) -> None:
    REQUESTS_TOTAL.labels(request_type=request_type, status=str(status)).inc()


def record_tool_call(tool: str, success: bool, latency_s: float) -> None:
    outcome = "success" if success else "failure"
    TOOL_CALLS_TOTAL.labels(tool=tool, outcome=outcome).inc()
    TOOL_LATENCY.labels(tool=tool).observe(max(0.0, latency_s))


def metrics_payload_bytes() -> bytes:
    return generate_latest(REGISTRY)


def start_metrics_server(host: str, port: int) -> None:
    """Serve REGISTRY at http://host:port/metrics from a daemon thread."""
    start_http_server(port, addr=host, registry=REGISTRY)
