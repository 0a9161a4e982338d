"""Prometheus metrics for Hawk authentication outcomes."""

from prometheus_client import Counter, Histogram

# === Counters ===

AUTHENTICATIONS_TOTAL = Counter(
    "hawkauth_authentications_total",
    "Total Hawk authentication attempts",
    ["scheme", "outcome", "field"],  # scheme: header, bewit; outcome: success, failure
)

# === Histograms ===

AUTHENTICATION_LATENCY = Histogram(
    "hawkauth_authentication_latency_seconds",
    "Hawk verification latency in seconds, including lookups",
    ["scheme"],
    buckets=[0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0],
)


# === Helper Functions ===


def record_authentication(scheme: str, field: str | None, latency: float) -> None:
    """Record an authentication outcome; ``field`` is None on success."""
    outcome = "success" if field is None else "failure"
    AUTHENTICATIONS_TOTAL.labels(scheme=scheme, outcome=outcome, field=field or "").inc()
    AUTHENTICATION_LATENCY.labels(scheme=scheme).observe(latency)
