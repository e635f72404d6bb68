from collections.abc import Callable, Generator
from concurrent.futures import ThreadPoolExecutor
from threading import RLock
from time import monotonic, sleep

import arrow
import pytest

from kron.clock import ManualClock
from kron.logger import LoggerAdapter, LoggerLevel
from kron.tasks import ExecutionContext, Task


class RecordingTask(Task):
    def __init__(self, fail: bool = False) -> None:
        self.contexts: list[ExecutionContext] = []
        self.fail = fail
        self.lock = RLock()

    def execute(self, context: ExecutionContext) -> None:
        with self.lock:
            self.contexts.append(context)
        if self.fail:
            raise RuntimeError("Task failed on purpose")

    @property
    def call_count(self) -> int:
        with self.lock:
            return len(self.contexts)


class RecordingLoggerAdapter(LoggerAdapter):
    def __init__(self, enabled: LoggerLevel = LoggerLevel.TRACE) -> None:
        self.enabled = enabled
        self.messages: list[tuple[LoggerLevel, str]] = []
        self.lock = RLock()

    def is_level_enabled(self, level: LoggerLevel) -> bool:
        return level.value >= self.enabled.value

    def log(self, level: LoggerLevel, message: str) -> None:
        with self.lock:
            self.messages.append((level, message))

    def at(self, level: LoggerLevel) -> list[str]:
        with self.lock:
            return [message for lvl, message in self.messages if lvl == level]


@pytest.fixture
def executor() -> Generator[ThreadPoolExecutor, None, None]:
    pool = ThreadPoolExecutor(max_workers=4, thread_name_prefix="TestWorker")
    yield pool
    pool.shutdown(wait=True)


@pytest.fixture
def clock() -> ManualClock:
    # A Monday
    return ManualClock("2024-05-06T04:00:30", tz="UTC")


@pytest.fixture
def logger_adapter() -> RecordingLoggerAdapter:
    return RecordingLoggerAdapter()


@pytest.fixture
def fast_sleep() -> Callable[[arrow.Arrow], float]:
    return lambda _: 0.005


@pytest.fixture
def wait_for() -> Callable[..., bool]:
    def wait(condition: Callable[[], bool], timeout: float = 5.0) -> bool:
        deadline = monotonic() + timeout
        while monotonic() < deadline:
            if condition():
                return True
            sleep(0.005)
        return condition()

    return wait


@pytest.fixture
def make_task() -> Callable[..., RecordingTask]:
    return RecordingTask
