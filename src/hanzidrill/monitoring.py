"""Monitoring configuration for the practice engine."""
from prometheus_client import Counter, Histogram

# Session metrics
sessions_started = Counter(
    "hanzidrill_sessions_started_total",
    "Total number of practice sessions started",
    ["mode", "selection"],
)

sessions_completed = Counter(
    "hanzidrill_sessions_completed_total",
    "Total number of practice sessions completed",
    ["mode"],
)

empty_selections = Counter(
    "hanzidrill_empty_selections_total",
    "Number of session starts that found nothing to practice",
    ["mode", "selection"],
)

# Answer metrics
answers_submitted = Counter(
    "hanzidrill_answers_total",
    "Total number of submitted answers",
    ["mode", "outcome"],  # outcome: correct, near_miss, incorrect
)

# Scheduling metrics
bucket_transitions = Counter(
    "hanzidrill_bucket_transitions_total",
    "Number of bucket transitions applied",
    ["mode", "direction"],  # direction: up, reset
)

# Error metrics
error_count = Counter(
    "hanzidrill_errors_total",
    "Total number of errors encountered",
    ["error_type"],
)

# Performance metrics
selection_duration = Histogram(
    "hanzidrill_selection_duration_seconds",
    "Duration of word selection queries in seconds",
    ["selection"],
    buckets=[0.001, 0.01, 0.05, 0.1, 0.5, 1.0],
)