"""
This module defines the tasks run by kron, and the context they are executed in.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from kron.pattern import Pattern

__all__ = ["ExecutionContext", "NullExecutionContext", "SimpleTask", "Task", "TaskDefinition"]


class ExecutionContext(ABC):
    """
    Context given to a task while it executes.

    Tasks that declare the matching capabilities can use it to cooperate with the host: checking whether they should
    stop, pausing when asked to, and reporting progress.
    """

    @abstractmethod
    def has_stop_been_requested(self) -> bool:
        pass

    @abstractmethod
    def pause_if_requested(self) -> None:
        """
        Block while the host has requested the task to pause.
        """
        pass

    @abstractmethod
    def update_completeness(self, completeness: float) -> None:
        """
        Report progress, as a fraction between 0 and 1.
        """
        pass

    @abstractmethod
    def update_status(self, message: str) -> None:
        pass


class NullExecutionContext(ExecutionContext):
    """
    The default context. Stop is never requested, pausing never blocks, and status updates are discarded.
    """

    def has_stop_been_requested(self) -> bool:
        return False

    def pause_if_requested(self) -> None:
        pass

    def update_completeness(self, completeness: float) -> None:
        pass

    def update_status(self, message: str) -> None:
        pass


class Task(ABC):
    """
    A unit of work that kron can run.

    Subclasses declare which capabilities they support, and implement ``execute``. For plain functions, use
    ``Task.simple``.
    """

    @property
    def can_be_stopped(self) -> bool:
        return False

    @property
    def can_be_paused(self) -> bool:
        return False

    @property
    def supports_status_tracking(self) -> bool:
        return False

    @property
    def supports_completeness_tracking(self) -> bool:
        return False

    @abstractmethod
    def execute(self, context: ExecutionContext) -> None:
        pass

    @staticmethod
    def simple(target: Callable[[], None]) -> "Task":
        """
        Wrap a function taking no arguments as a task without any capabilities.
        """
        return SimpleTask(target)

    @staticmethod
    def from_callable(target: Callable[[], None]) -> "Task":
        return SimpleTask(target)


class SimpleTask(Task):
    """
    A task wrapping a function taking no arguments. It can not be stopped or paused, and reports no progress.
    """

    def __init__(self, target: Callable[[], None]) -> None:
        self.target = target

    def execute(self, context: ExecutionContext) -> None:
        self.target()

    def __repr__(self) -> str:
        name = getattr(self.target, "__qualname__", repr(self.target))
        return f"SimpleTask({name})"


@dataclass(frozen=True)
class TaskDefinition:
    """
    A task registered with a task source, together with its identifier and the pattern it runs on.
    """

    id: str
    pattern: "Pattern"
    task: Task

    def __iter__(self) -> Iterator[Any]:
        return iter((self.id, self.pattern, self.task))
