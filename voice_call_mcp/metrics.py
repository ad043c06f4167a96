"""
Prometheus metrics (module scope, registered once).
"""

from prometheus_client import Counter, Histogram

TOOL_CALL_SECONDS = Histogram(
    "voice_call_mcp_tool_call_seconds",
    "Elapsed time of tool-call requests",
    labelnames=("tool", "outcome"),
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0),
)

CALLS_PLACED = Counter(
    "voice_call_mcp_calls_placed_total",
    "Outbound calls accepted by the telephony provider",
)
