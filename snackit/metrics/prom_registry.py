from prometheus_client import Counter, Histogram

event_counter = Counter(
    "snackit_events_total",
    "SnackIt webhook counters by key",
    labelnames=("key",),
)

publish_latency_hist = Histogram(
    "snackit_publish_latency_ms",
    "Wall time of the GitHub publish sequence (ms)",
    buckets=(50, 100, 250, 500, 1000, 2500, 5000, 10000, 30000),
)


def inc_counter(key: str, by: int = 1):
    event_counter.labels(key=key or "").inc(by)
