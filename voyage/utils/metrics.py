"""Prometheus metrics for persistence sync and logins."""

from prometheus_client import Counter, Histogram

itinerary_saves_total = Counter(
    "itinerary_saves_total",
    "Debounced bulk itinerary saves",
    ["outcome"],
)

itinerary_save_latency_ms = Histogram(
    "itinerary_save_latency_ms",
    "Bulk itinerary save latency in milliseconds",
    buckets=[10, 50, 100, 200, 500, 1000, 2000, 4000],
)

itinerary_deletes_total = Counter(
    "itinerary_deletes_total",
    "Explicit itinerary deletes",
    ["outcome"],
)

login_attempts_total = Counter(
    "login_attempts_total",
    "Login attempts by outcome",
    ["outcome"],
)


class PrometheusSyncMetrics:
    """Prometheus-based sync metrics implementation."""

    def record_save(self, outcome: str, latency_ms: float) -> None:
        """Record a bulk save and its latency."""
        itinerary_saves_total.labels(outcome=outcome).inc()
        itinerary_save_latency_ms.observe(latency_ms)

    def record_delete(self, outcome: str) -> None:
        """Record an explicit delete."""
        itinerary_deletes_total.labels(outcome=outcome).inc()

    def record_login(self, outcome: str) -> None:
        """Record a login attempt."""
        login_attempts_total.labels(outcome=outcome).inc()
