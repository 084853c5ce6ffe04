"""Prometheus metrics for monitoring plan generation and recurring expense runs"""

from prometheus_client import Counter, Histogram

# Plan metrics
plan_counter = Counter(
    "payplan_plans_generated_total",
    "Installment plans generated",
    ["source"],  # order | preview
)

installment_counter = Counter(
    "payplan_installments_generated_total",
    "Installments created",
    ["source"],  # order | recurring
)

plan_value_histogram = Histogram(
    "payplan_plan_total_cents",
    "Order totals turned into plans",
    buckets=[10_000, 50_000, 100_000, 500_000, 1_000_000, 5_000_000],
)

# Recurring job metrics
recurring_run_duration_histogram = Histogram(
    "payplan_recurring_run_seconds",
    "Duration of recurring installment generation runs",
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_plan(source: str, total_cents: int, installment_count: int) -> None:
    """Record plan metrics for one generated plan"""
    plan_counter.labels(source=source).inc()
    plan_value_histogram.observe(total_cents)
    if installment_count:
        installment_counter.labels(source=source).inc(installment_count)


def record_recurring_run(generated: int, duration_seconds: float) -> None:
    recurring_run_duration_histogram.observe(duration_seconds)
    if generated:
        installment_counter.labels(source="recurring").inc(generated)
