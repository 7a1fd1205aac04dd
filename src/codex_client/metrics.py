from __future__ import annotations

from prometheus_client import Counter, Histogram, start_http_server

completion_requests_total = Counter(
    "completion_requests_total",
    "Total completion requests by outcome",
    labelnames=["status"],
)

completion_request_latency_seconds = Histogram(
    "completion_request_latency_seconds",
    "Completion endpoint round-trip latency (seconds)",
    buckets=[0.1, 0.3, 0.5, 1, 2, 5, 10, 30, 60],
)

continuation_errors_total = Counter(
    "completion_continuation_errors_total",
    "Continuations that raised while handling a result",
)


def maybe_start_metrics(*, enable: bool, bind: str, port: int) -> None:
    if not enable:
        return
    start_http_server(port, addr=bind)
