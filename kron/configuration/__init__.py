"""
Configuration for applications embedding kron.

A ``SchedulerConfig`` holds the time zone schedules are evaluated in, the size of the worker pool, logging and metrics
settings, and named schedule patterns. Load one from a YAML or JSON file with ``load_file``:

.. code-block:: python

    config = load_file(Path("scheduler.yaml"), SchedulerConfig)
    kron = SimpleKron.from_config(config, {"nightly-report": run_report})
"""

from .loaders import ConfigFormat, load_dict, load_file, load_io
from .models import (
    ConfigModel,
    LogConsoleHandlerConfig,
    LogFileHandlerConfig,
    LogHandlerConfig,
    LogLevel,
    MetricsConfig,
    PatternConfig,
    PromServerConfig,
    SchedulerConfig,
)

__all__ = [
    "ConfigFormat",
    "ConfigModel",
    "LogConsoleHandlerConfig",
    "LogFileHandlerConfig",
    "LogHandlerConfig",
    "LogLevel",
    "MetricsConfig",
    "PatternConfig",
    "PromServerConfig",
    "SchedulerConfig",
    "load_dict",
    "load_file",
    "load_io",
]
