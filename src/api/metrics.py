from prometheus_client import Counter, Histogram, REGISTRY


# we check if they are already registered to avoid errors during hot reloads or test runs
def get_or_create_metric(name, documentation, metric_type, **kwargs):
    try:
        # Try to create it
        return metric_type(name, documentation, **kwargs)
    except ValueError:
        # If it already exists, retrieve it from the registry
        return REGISTRY._names_to_collectors[name]


REQUESTS_TOTAL = get_or_create_metric(
    "todo_requests_total",
    "Total requests",
    Counter,
    labelnames=["endpoint", "status"],
)

REQUEST_LATENCY_SECONDS = get_or_create_metric(
    "todo_request_latency_seconds",
    "Request latency",
    Histogram,
    labelnames=["endpoint"],
)

PLANNER_ITEMS_FETCHED_TOTAL = get_or_create_metric(
    "todo_planner_items_fetched_total", "Raw planner items fetched from Canvas", Counter
)

CUSTOM_TASKS_TOTAL = get_or_create_metric(
    "todo_custom_tasks_total",
    "Custom tasks submitted, by outcome",
    Counter,
    labelnames=["outcome"],
)
