"""
Date: 2026-10-18
Description:
Prometheus metrics for the binder.

Defines counters and summaries for tracking parameter flow, coercion fallbacks and instantiation durations.
"""

from prometheus_client import Counter, Summary, start_http_server

INSTANTIATIONS = Counter(
    'binder_instantiations_total', 'Total number of structures built by the binder'
)
PARAMETERS_BOUND = Counter(
    'binder_parameters_bound_total', 'Total number of parameters merged into a structure'
)
PARAMETERS_SKIPPED = Counter(
    'binder_parameters_skipped_total', 'Total number of parameters skipped because of a malformed path'
)
COERCION_FALLBACKS = Counter(
    'binder_coercion_fallbacks_total', 'Total number of typed leaves kept as raw text'
)

INSTANTIATE_DURATION = Summary(
    'binder_instantiate_duration_seconds', 'Time spent building individual structures'
)


def start_metrics_server(port: int = 8000) -> None:
    """Start the Prometheus metrics HTTP server."""
    start_http_server(port)
