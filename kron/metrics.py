"""
Prometheus metrics reported by kron.

``SchedulerMetrics`` holds the counters and gauges a scheduler updates as it runs. Since Prometheus does not allow
several metrics with the same name in one registry, create the collection once per registry and prefix. ``safe_get``
returns a shared instance:

.. code-block:: python

    metrics = safe_get(SchedulerMetrics)
    kron = SimpleKron(executor, clock, metrics=metrics)

Serve the default registry with ``MetricsConfig.start`` or ``prometheus_client.start_http_server``.
"""

from typing import Any, TypeVar

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge, Info

__all__ = ["SchedulerMetrics", "safe_get"]

_metrics_singularities: dict[type, Any] = {}


T = TypeVar("T")


def safe_get(cls: type[T], *args: Any, **kwargs: Any) -> T:
    """
    A factory for instances of metrics collections.

    Creates an instance of the given class on the first call and stores it. Any subsequent calls with the same class
    return the same instance.

    Args:
        cls: Metrics class to either create or get a cached version of

    Returns:
        An instance of given class
    """
    if cls not in _metrics_singularities:
        _metrics_singularities[cls] = cls(*args, **kwargs)

    return _metrics_singularities[cls]


class SchedulerMetrics:
    """
    Metrics for a scheduler.

    The collection includes the following metrics:
     * ticks_total                  Number of minutes the timer has fired for
     * dispatched_tasks_total       Number of task executions handed to the executor
     * failed_tasks_total           Number of task executions that raised an exception
     * running_tasks                Number of tasks currently executing
     * last_tick_time               Timestamp (seconds) of the minute most recently fired for
     * info                         Version of kron

    Args:
        prefix: Prefix of the metric names.
        registry: Registry to register the metrics in.
    """

    def __init__(self, prefix: str = "kron", registry: CollectorRegistry = REGISTRY) -> None:
        from kron import __version__

        prefix = prefix.strip().replace(" ", "_")

        self.ticks = Counter(f"{prefix}_ticks", "Number of minutes the timer has fired for", registry=registry)
        self.dispatched_tasks = Counter(
            f"{prefix}_dispatched_tasks", "Number of task executions handed to the executor", registry=registry
        )
        self.failed_tasks = Counter(
            f"{prefix}_failed_tasks", "Number of task executions that raised an exception", registry=registry
        )
        self.running_tasks = Gauge(f"{prefix}_running_tasks", "Number of tasks currently executing", registry=registry)
        self.last_tick_time = Gauge(
            f"{prefix}_last_tick_time", "Timestamp (seconds) of the minute most recently fired for", registry=registry
        )

        self.info = Info(f"{prefix}_info", "Information about the running scheduler", registry=registry)
        self.info.info({"kron_version": __version__})
