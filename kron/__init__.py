"""
kron is an embeddable scheduler, running tasks whenever the current minute matches a cron-style pattern.

.. code-block:: python

    from concurrent.futures import ThreadPoolExecutor

    from kron import SimpleKron, SystemClock

    executor = ThreadPoolExecutor()
    kron = SimpleKron(executor, SystemClock("Europe/Oslo"))
    kron.add_task("0 2 * * *", nightly_report)
    kron.start()
"""

__version__ = "1.0.0"

from .clock import Clock, ManualClock, SystemClock
from .exceptions import (
    AlreadyStartedError,
    InvalidConfigError,
    KronError,
    NotStartedError,
    PatternParseError,
    SchedulerStateError,
)
from .pattern import Pattern, PatternField, PatternSpec, PatternValidationFailure
from .scheduling import Kron, MinuteTimer, SimpleKron
from .sources import AggregateTaskSource, SimpleTaskSource, TaskSource, aggregate
from .tasks import ExecutionContext, NullExecutionContext, SimpleTask, Task, TaskDefinition

__all__ = [
    "AggregateTaskSource",
    "AlreadyStartedError",
    "Clock",
    "ExecutionContext",
    "InvalidConfigError",
    "Kron",
    "KronError",
    "ManualClock",
    "MinuteTimer",
    "NotStartedError",
    "NullExecutionContext",
    "Pattern",
    "PatternField",
    "PatternParseError",
    "PatternSpec",
    "PatternValidationFailure",
    "SchedulerStateError",
    "SimpleKron",
    "SimpleTask",
    "SimpleTaskSource",
    "Task",
    "TaskDefinition",
    "TaskSource",
    "aggregate",
]
