"""Prometheus metrics for rgstream"""

from prometheus_client import Counter, Histogram

search_requests_total = Counter(
    'rgstream_search_requests_total', 'Total number of search invocations', ['status']
)
search_duration_seconds = Histogram(
    'rgstream_search_duration_seconds',
    'Wall time of a search from spawn to exit',
    buckets=(0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
)
matches_found_total = Counter('rgstream_matches_found_total', 'Total LineMatch records produced')
chunks_processed_total = Counter('rgstream_chunks_processed_total', 'Stdout chunks fed to the parser')
bytes_processed_total = Counter('rgstream_bytes_processed_total', 'Stdout bytes fed to the parser')
protocol_errors_total = Counter(
    'rgstream_protocol_errors_total', 'Match lines received before any file header'
)
http_responses_total = Counter(
    'rgstream_http_responses_total', 'HTTP responses by endpoint and status', ['method', 'endpoint', 'status']
)
errors_total = Counter('rgstream_errors_total', 'Errors by type', ['error_type'])


def record_chunk(size: int) -> None:
    chunks_processed_total.inc()
    bytes_processed_total.inc(size)


def record_search(status: str, duration: float, num_matches: int) -> None:
    search_requests_total.labels(status=status).inc()
    search_duration_seconds.observe(duration)
    if num_matches:
        matches_found_total.inc(num_matches)


def record_http_response(method: str, endpoint: str, status: int) -> None:
    http_responses_total.labels(method=method, endpoint=endpoint, status=str(status)).inc()


def record_error(error_type: str) -> None:
    errors_total.labels(error_type=error_type).inc()
