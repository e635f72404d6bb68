import traceback
from collections.abc import Callable

import arrow

from kron.logger import KronLogger
from kron.metrics import SchedulerMetrics
from kron.sources import TaskSource
from kron.tasks import ExecutionContext, Task


class TaskLauncher:
    """
    Finds the tasks whose pattern matches a minute, and hands each of them to ``spawn_task``.
    """

    def __init__(
        self,
        launch_time: arrow.Arrow,
        task_source: TaskSource,
        logger: KronLogger,
        spawn_task: Callable[[str, Task], None],
    ) -> None:
        self.launch_time = launch_time
        self._task_source = task_source
        self._logger = logger
        self._spawn_task = spawn_task

    def __call__(self) -> None:
        try:
            definitions = list(self._task_source.scheduled_tasks())
        except Exception:
            self._logger.error(
                "Could not launch tasks for %s:\n%s", self.launch_time.isoformat(), traceback.format_exc()
            )
            return

        self._logger.trace("Matching %d tasks against %s", len(definitions), self.launch_time.isoformat())
        for task_id, pattern, task in definitions:
            try:
                if pattern.matches(self.launch_time):
                    self._spawn_task(task_id, task)
            except Exception:
                self._logger.error(
                    "Could not launch task %s for %s:\n%s",
                    task_id,
                    self.launch_time.isoformat(),
                    traceback.format_exc(),
                )


class TaskRunner:
    """
    Executes one task. Errors raised by the task are logged and counted, and go no further. Interruptions such as
    ``SystemExit`` are logged and counted too, then re-raised to the executor.
    """

    def __init__(
        self,
        task_id: str,
        task: Task,
        logger: KronLogger,
        context: ExecutionContext,
        metrics: SchedulerMetrics | None = None,
    ) -> None:
        self.task_id = task_id
        self.task = task
        self._logger = logger
        self._context = context
        self._metrics = metrics

    def __call__(self) -> None:
        self._logger.debug("Running task %s", self.task_id)
        if self._metrics:
            self._metrics.running_tasks.inc()

        try:
            self.task.execute(self._context)
            self._logger.debug("Task %s done", self.task_id)

        except Exception:
            self._logger.error("Task %s failed:\n%s", self.task_id, traceback.format_exc())
            if self._metrics:
                self._metrics.failed_tasks.inc()

        except BaseException:
            self._logger.error("Task %s was interrupted:\n%s", self.task_id, traceback.format_exc())
            if self._metrics:
                self._metrics.failed_tasks.inc()
            raise

        finally:
            if self._metrics:
                self._metrics.running_tasks.dec()
