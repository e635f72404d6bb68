"""
Task sources provide the tasks kron schedules.

A ``SimpleTaskSource`` owns its tasks, and supports adding and removing them. An ``AggregateTaskSource`` combines
several sources without copying them, so tasks added to a member source are picked up on the next tick.

Task identifiers are expected to be unique across all sources combined in one aggregate. This is not enforced, and
kron makes no promise about which task runs if two sources use the same identifier.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from threading import RLock
from uuid import uuid4

from kron.pattern import Pattern
from kron.tasks import Task, TaskDefinition

__all__ = ["AggregateTaskSource", "SimpleTaskSource", "TaskSource", "aggregate"]


class TaskSource(ABC):
    """
    A named provider of scheduled tasks.
    """

    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    def size(self) -> int:
        pass

    @abstractmethod
    def scheduled_tasks(self) -> Iterable[TaskDefinition]:
        """
        A snapshot of the tasks currently scheduled. Changes made to the source after this returns are not reflected.
        """
        pass

    def __repr__(self) -> str:
        return f"<{self.__class__.__qualname__} {self.name()!r} with {self.size()} tasks>"


class SimpleTaskSource(TaskSource):
    """
    A task source holding its tasks in memory.

    Args:
        name: Name of the source, also used as the prefix of generated task identifiers.
    """

    def __init__(self, name: str = "<simple>") -> None:
        self._name = name
        self._tasks: dict[str, TaskDefinition] = {}
        self._tasks_lock = RLock()

    def name(self) -> str:
        return self._name

    def size(self) -> int:
        return len(self._tasks)

    def scheduled_tasks(self) -> Iterable[TaskDefinition]:
        with self._tasks_lock:
            return list(self._tasks.values())

    def add(self, pattern: Pattern, task: Task) -> str:
        """
        Schedule a task.

        Returns:
            The generated identifier of the task, unique within this source.
        """
        task_id = f"{self._name}{uuid4()}"
        with self._tasks_lock:
            self._tasks[task_id] = TaskDefinition(task_id, pattern, task)
        return task_id

    def remove(self, task_id: str) -> bool:
        """
        Unschedule a task. Removing an unknown identifier does nothing.

        Returns:
            True if a task was removed, False if no task had the given identifier.
        """
        with self._tasks_lock:
            return self._tasks.pop(task_id, None) is not None

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._tasks


class AggregateTaskSource(TaskSource):
    """
    A task source exposing the tasks of several other sources.

    Args:
        task_sources: Member sources. They are referenced, never copied or modified.
        name_base: Prefix of the aggregate's name, which also lists the names of the members.
    """

    def __init__(self, task_sources: Iterable[TaskSource], name_base: str = "Aggregate") -> None:
        self._task_sources = tuple(task_sources)
        self._name = f"{name_base} [{','.join(source.name() for source in self._task_sources)}]"

    def name(self) -> str:
        return self._name

    def size(self) -> int:
        return sum(source.size() for source in self._task_sources)

    def scheduled_tasks(self) -> Iterable[TaskDefinition]:
        return [definition for source in self._task_sources for definition in source.scheduled_tasks()]

    @property
    def members(self) -> tuple[TaskSource, ...]:
        return self._task_sources


def aggregate(*task_sources: TaskSource) -> TaskSource:
    """
    Combine task sources into one. A single source is returned as is.
    """
    if len(task_sources) == 1:
        return task_sources[0]
    return AggregateTaskSource(task_sources)
