"""Prometheus metric inventory for academy-service.

Every metric the service exports is declared here; the modules that own
the behavior import the metric and increment or observe it at the point
of action.  Counters only go up, so tests assert on deltas.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP metrics (populated by the MetricsMiddleware)
# ---------------------------------------------------------------------------

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests by method, endpoint, and status code",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Application metrics
# ---------------------------------------------------------------------------

ASSESSMENT_SUBMISSIONS = Counter(
    "assessment_submissions_total",
    "Assessment submissions by kind and outcome",
    ["kind", "outcome"],  # kind: quiz|homework  outcome: graded|attempt_limit|conflict
)

GRADED_PERCENTAGE = Histogram(
    "assessment_graded_percentage",
    "Distribution of graded submission percentages",
    ["kind"],
    buckets=[10, 20, 30, 40, 50, 60, 70, 80, 90, 100],
)

PURCHASE_CODE_REDEMPTIONS = Counter(
    "purchase_code_redemptions_total",
    "Purchase code redemption attempts by result",
    ["result"],  # redeemed|unknown|used|already_purchased
)

RATE_LIMIT_HITS = Counter(
    "rate_limit_hits_total",
    "Requests rejected by rate limiting (429s)",
    ["key_type"],  # "user" or "ip"
)
