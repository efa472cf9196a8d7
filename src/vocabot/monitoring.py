"""Monitoring configuration for the bot."""
from prometheus_client import Counter, Gauge, Histogram, start_http_server

# Registry metrics
active_chats = Gauge(
    "vocabot_active_chats",
    "Number of chats with learning enabled, as seen by the last tick",
)

chats_registered = Counter(
    "vocabot_chats_registered_total",
    "Total number of chat registrations and reactivations",
)

# Dispatcher metrics
ticks = Counter(
    "vocabot_ticks_total",
    "Total number of dispatcher ticks",
)

tick_failures = Counter(
    "vocabot_tick_failures_total",
    "Total number of ticks aborted before reaching any chat",
)

flows_dispatched = Counter(
    "vocabot_flows_dispatched_total",
    "Total number of flows started for a chat",
    ["flow"],
)

flows_suppressed = Counter(
    "vocabot_flows_suppressed_total",
    "Total number of flows not started because the same chat and flow was busy",
    ["flow"],
)

flow_errors = Counter(
    "vocabot_flow_errors_total",
    "Total number of flows that failed with an exception",
    ["flow"],
)

flow_duration = Histogram(
    "vocabot_flow_duration_seconds",
    "Duration of a single chat flow in seconds",
    ["flow"],
    buckets=[0.1, 0.5, 1.0, 5.0, 30.0, 60.0, 120.0],
)

# Learning metrics
words_delivered = Counter(
    "vocabot_words_delivered_total",
    "Total number of words sent to chats",
    ["flow"],
)

# Delivery metrics
delivery_failures = Counter(
    "vocabot_delivery_failures_total",
    "Total number of messages that could not be delivered",
    ["error_type"],
)


def start_monitoring(port: int = 9090) -> None:
    """Start the Prometheus metrics server."""
    start_http_server(port)
