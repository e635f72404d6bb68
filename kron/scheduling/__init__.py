"""
This module runs tasks on a schedule.

A ``MinuteTimer`` fires once for every minute passing on a clock, catching up on minutes missed while its thread was
not running. For each minute, ``Kron`` matches the patterns of its tasks against the minute on an executor, and runs
the matching tasks on the same executor. ``SimpleKron`` adds a task source of its own, for adding and removing tasks
directly.
"""

from ._dispatch import TaskLauncher, TaskRunner
from ._scheduler import ContextFactory, Kron, SimpleKron
from ._timer import IdealSleep, MinuteTimer

__all__ = ["ContextFactory", "IdealSleep", "Kron", "MinuteTimer", "SimpleKron", "TaskLauncher", "TaskRunner"]
