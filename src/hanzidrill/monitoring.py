"""Monitoring metrics for the drill engine."""
from prometheus_client import Counter, Histogram

# Selection metrics
exercises_selected = Counter(
    "hanzidrill_exercises_selected_total",
    "Total number of exercises selected",
    ["reason"],
)

selection_duration = Histogram(
    "hanzidrill_selection_duration_seconds",
    "Duration of exercise selection in seconds",
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0],
)

# Learning metrics
exercises_completed = Counter(
    "hanzidrill_exercises_completed_total",
    "Total number of completed exercises",
    ["outcome"],
)

word_reviews = Counter(
    "hanzidrill_word_reviews_total",
    "Total number of word reviews",
    ["kind"],  # first, early, good, failure
)

# Storage metrics
store_operations = Counter(
    "hanzidrill_store_operations_total",
    "Total number of progress store operations",
    ["operation_type"],
)

store_errors = Counter(
    "hanzidrill_store_errors_total",
    "Total number of progress store errors",
    ["error_type"],
)
