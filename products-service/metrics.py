from prometheus_client import Counter, Histogram

from config import settings

SERVICE_NAME = settings.service_name

# Prometheus metrics
REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["service", "method", "endpoint", "status"]
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["service", "method", "endpoint"]
)
ERROR_COUNT = Counter(
    "http_errors_total",
    "Total HTTP errors",
    ["service", "endpoint", "error_type"]
)


def record_error(endpoint: str, error_type: str) -> None:
    ERROR_COUNT.labels(service=SERVICE_NAME, endpoint=endpoint, error_type=error_type).inc()
