"""Prometheus metrics for the recurrence engine and trip marketplace."""

from prometheus_client import Counter

# Engine fallbacks (malformed dates, empty resolver windows, truncated expansions)
recurrence_fallbacks_total = Counter(
    "recurrence_fallbacks_total",
    "Total recurrence engine fallbacks",
    ["component", "reason"],
)

trip_instances_published_total = Counter(
    "trip_instances_published_total",
    "Total trip instances written to the data store",
    ["kind"],
)

series_deleted_total = Counter(
    "series_deleted_total",
    "Total recurring series deleted",
)

bookings_total = Counter(
    "bookings_total",
    "Total booking state transitions",
    ["status"],
)


class PrometheusMarketplaceMetrics:
    """Prometheus-based marketplace metrics implementation."""

    def inc_fallback(self, component: str, reason: str) -> None:
        """Increment engine fallback counter."""
        recurrence_fallbacks_total.labels(component=component, reason=reason).inc()

    def inc_published(self, kind: str, count: int = 1) -> None:
        """Increment published instances counter."""
        if count > 0:
            trip_instances_published_total.labels(kind=kind).inc(count)

    def inc_series_deleted(self) -> None:
        """Increment deleted series counter."""
        series_deleted_total.inc()

    def inc_booking(self, status: str) -> None:
        """Increment booking transition counter."""
        bookings_total.labels(status=status).inc()


metrics = PrometheusMarketplaceMetrics()
