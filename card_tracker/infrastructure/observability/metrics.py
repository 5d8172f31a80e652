"""Prometheus metrics for request latency, ledger activity and authentication"""

from prometheus_client import Counter, Histogram

# Ledger metrics
transaction_counter = Counter(
    "card_tracker_transactions_total",
    "Transaction create/delete attempts against card balances",
    ["action", "type", "outcome"],  # create|delete, purchase|payment, applied|rejected
)

# Auth metrics
auth_attempt_counter = Counter(
    "card_tracker_auth_attempts_total",
    "Registration and login attempts",
    ["action", "outcome"],  # register|login, success|failure
)

# Edge metrics
rate_limited_counter = Counter(
    "card_tracker_rate_limited_total",
    "Requests rejected by the rate limiter",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_transaction(action: str, txn_type: str, outcome: str) -> None:
    transaction_counter.labels(action=action, type=txn_type, outcome=outcome).inc()


def record_auth_attempt(action: str, success: bool) -> None:
    auth_attempt_counter.labels(action=action, outcome="success" if success else "failure").inc()
