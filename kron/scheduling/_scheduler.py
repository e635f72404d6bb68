from collections.abc import Callable, Mapping
from concurrent.futures import Executor
from threading import RLock
from types import TracebackType
from typing import TypeVar

import arrow

from kron.clock import Clock
from kron.configuration.models import SchedulerConfig
from kron.exceptions import AlreadyStartedError, InvalidConfigError, NotStartedError
from kron.logger import KronLogger, LoggerAdapter, setup_logging
from kron.metrics import SchedulerMetrics, safe_get
from kron.pattern import Pattern
from kron.scheduling._dispatch import TaskLauncher, TaskRunner
from kron.scheduling._timer import IdealSleep, MinuteTimer
from kron.sources import SimpleTaskSource, TaskSource, aggregate
from kron.tasks import ExecutionContext, NullExecutionContext, Task

ContextFactory = Callable[[str, Task], ExecutionContext]

_NULL_CONTEXT = NullExecutionContext()

Self = TypeVar("Self", bound="Kron")


def _null_context(task_id: str, task: Task) -> ExecutionContext:
    return _NULL_CONTEXT


class Kron:
    """
    Runs the tasks of one or more task sources whenever their patterns match the current minute.

    Matching and task execution both happen on the given executor, so a slow task never delays the next minute. The
    executor is not shut down by ``stop``, and tasks still running when ``stop`` returns are left to finish.

    .. code-block:: python

        with ThreadPoolExecutor() as executor:
            kron = Kron(executor, SystemClock("Europe/Oslo"), source)
            kron.start()
            ...
            kron.stop()

    Args:
        executor: Executor to run matching and tasks on.
        clock: Clock to follow. Patterns are matched in the time zone of the clock.
        task_sources: Sources of tasks to run.
        logger_adapter: Where to send log messages. Defaults to the ``kron`` logger of the ``logging`` module.
        metrics: Metrics to update. No metrics are reported if not given.
        context_factory: Creates the execution context given to a task. Defaults to a context that never requests
            stopping or pausing.
        ideal_sleep: Override for how long the timer sleeps between minutes. Mainly for tests.
    """

    def __init__(
        self,
        executor: Executor,
        clock: Clock,
        *task_sources: TaskSource,
        logger_adapter: LoggerAdapter | None = None,
        metrics: SchedulerMetrics | None = None,
        context_factory: ContextFactory | None = None,
        ideal_sleep: IdealSleep | None = None,
    ) -> None:
        self._executor = executor
        self._clock = clock
        self._task_source = aggregate(*task_sources)
        self._logger = KronLogger(logger_adapter)
        self._metrics = metrics
        self._context_factory = context_factory or _null_context
        self._ideal_sleep = ideal_sleep

        self._timer: MinuteTimer | None = None
        self._start_stop_lock = RLock()

    @property
    def task_source(self) -> TaskSource:
        return self._task_source

    @property
    def clock(self) -> Clock:
        return self._clock

    @property
    def executor(self) -> Executor:
        return self._executor

    @property
    def is_running(self) -> bool:
        with self._start_stop_lock:
            return self._timer is not None

    def start(self) -> None:
        """
        Start the timer. The current minute is matched immediately.

        Raises:
            AlreadyStartedError: If kron is already running.
        """
        with self._start_stop_lock:
            if self._timer is not None:
                raise AlreadyStartedError()

            timer = MinuteTimer(self._clock, self._logger, self._spawn_launcher, self._ideal_sleep)
            timer.start()
            self._timer = timer
            self._logger.info("Kron started.")

    def stop(self) -> None:
        """
        Stop the timer, and wait for its thread to exit. No minute is fired after this returns.

        Raises:
            NotStartedError: If kron is not running.
        """
        with self._start_stop_lock:
            if self._timer is None:
                raise NotStartedError()

            timer = self._timer
            self._timer = None
            timer.request_stop()
            timer.join()
            self._logger.info("Kron stopped.")

    def __enter__(self: Self) -> Self:
        self.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.stop()

    def _submit(self, description: str, call: Callable[[], None]) -> bool:
        try:
            self._executor.submit(call)
            return True
        except RuntimeError as e:
            self._logger.warn("Could not submit %s: %s", description, e)
            return False

    def _spawn_launcher(self, launch_time: arrow.Arrow) -> None:
        self._logger.debug("Launching tasks for %s", launch_time.isoformat())
        if self._metrics:
            self._metrics.ticks.inc()
            self._metrics.last_tick_time.set(launch_time.timestamp())

        launcher = TaskLauncher(launch_time, self._task_source, self._logger, self._spawn_task)
        self._submit(f"launch of tasks for {launch_time.isoformat()}", launcher)

    def _spawn_task(self, task_id: str, task: Task) -> None:
        self._logger.debug("Dispatching task %s", task_id)
        runner = TaskRunner(task_id, task, self._logger, self._context_factory(task_id, task), self._metrics)
        if self._submit(f"task {task_id}", runner) and self._metrics:
            self._metrics.dispatched_tasks.inc()


class SimpleKron(Kron):
    """
    A ``Kron`` with a task source of its own, to add tasks to and remove tasks from while running.

    .. code-block:: python

        kron = SimpleKron(executor, SystemClock())
        task_id = kron.add_task("*/5 * * * MON-FRI", poll_inbox)
        kron.start()

    Additional task sources can be given, their tasks are run alongside the tasks added to this instance.
    """

    def __init__(
        self,
        executor: Executor,
        clock: Clock,
        *task_sources: TaskSource,
        logger_adapter: LoggerAdapter | None = None,
        metrics: SchedulerMetrics | None = None,
        context_factory: ContextFactory | None = None,
        ideal_sleep: IdealSleep | None = None,
    ) -> None:
        self._simple_source = SimpleTaskSource()
        super().__init__(
            executor,
            clock,
            self._simple_source,
            *task_sources,
            logger_adapter=logger_adapter,
            metrics=metrics,
            context_factory=context_factory,
            ideal_sleep=ideal_sleep,
        )

    def add_task(self, pattern: str | Pattern, task: Task | Callable[[], None]) -> str:
        """
        Schedule a task.

        Args:
            pattern: Pattern to run the task on, as text or a parsed pattern.
            task: Task to run, or a function taking no arguments.

        Returns:
            Identifier of the task, to use with ``remove_task``.

        Raises:
            PatternParseError: If the pattern is given as text and is invalid.
        """
        if isinstance(pattern, str):
            pattern = Pattern.parse(pattern)
        if not isinstance(task, Task):
            task = Task.simple(task)

        task_id = self._simple_source.add(pattern, task)
        self._logger.trace("Added task %s with pattern %s", task_id, pattern)
        return task_id

    def remove_task(self, task_id: str) -> bool:
        """
        Unschedule a task added with ``add_task``. Removing an unknown task does nothing.

        Returns:
            True if a task was removed.
        """
        removed = self._simple_source.remove(task_id)
        self._logger.trace("Removed task %s: %s", task_id, removed)
        return removed

    @classmethod
    def from_config(
        cls,
        config: SchedulerConfig,
        tasks: Mapping[str, Task | Callable[[], None]],
        logger_adapter: LoggerAdapter | None = None,
    ) -> "SimpleKron":
        """
        Create a scheduler from a configuration. This sets up logging and metrics, and creates a thread pool and a
        clock in the configured time zone.

        Args:
            config: Scheduler configuration.
            tasks: Task to run for each schedule in the configuration, by schedule name.
            logger_adapter: Where to send log messages.

        Raises:
            InvalidConfigError: If a schedule has no matching task.
        """
        missing = [name for name in config.schedules if name not in tasks]
        if missing:
            raise InvalidConfigError(f"No task given for schedules {', '.join(missing)}", details=missing)

        setup_logging(config.log_handlers)

        metrics = None
        if config.metrics is not None:
            metrics = safe_get(SchedulerMetrics)
            config.metrics.start()

        kron = cls(
            config.create_executor(),
            config.create_clock(),
            logger_adapter=logger_adapter,
            metrics=metrics,
        )
        for name, schedule in config.schedules.items():
            task_id = kron.add_task(schedule.pattern, tasks[name])
            kron._logger.debug("Scheduled %s as task %s", name, task_id)

        return kron
