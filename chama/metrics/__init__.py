# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Prometheus metrics for the chama API."""
from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "http_requests_total", "Total HTTP requests", ["method", "endpoint", "status"]
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds", "HTTP request latency", ["method", "endpoint"]
)
HTTP_ERRORS = Counter(
    "http_errors_total", "Total HTTP errors", ["method", "endpoint", "status"]
)

AUTH_ATTEMPTS = Counter(
    "chama_auth_attempts_total", "Login attempts", ["outcome"]
)
LOAN_TRANSITIONS = Counter(
    "chama_loan_transitions_total", "Loan status transitions", ["status"]
)
QUEUE_APPROVALS = Counter(
    "chama_queue_approvals_total", "Chair-queue items approved", ["type"]
)
VOTES_CAST = Counter(
    "chama_votes_cast_total", "Poll votes accepted"
)
STORE_OPERATIONS = Counter(
    "chama_store_operations_total",
    "Collection store operations",
    ["backend", "operation", "outcome"],
)
