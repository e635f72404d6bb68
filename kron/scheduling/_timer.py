import traceback
from collections.abc import Callable
from threading import Thread

import arrow

from kron.clock import Clock
from kron.logger import KronLogger
from kron.threading import CancellationToken

IdealSleep = Callable[[arrow.Arrow], float]


def _next_minute(moment: arrow.Arrow) -> arrow.Arrow:
    # Step in absolute time, so DST changes neither skip nor repeat a minute
    return moment.to("UTC").shift(minutes=1).to(moment.tzinfo)


class MinuteTimer:
    """
    Calls a function once for every whole minute that passes on a clock, on a dedicated thread.

    When started, the timer fires for the current minute. It then sleeps until the next minute is due, and fires for
    every minute that has passed since the last one it fired for, in order. If the thread wakes up late, no minute is
    skipped.

    Args:
        clock: Clock to follow.
        logger: Logger for tick messages and errors.
        fire: Function called with the start of each minute.
        ideal_sleep: Function computing how long to sleep, in seconds, given the last minute fired for. Defaults to
            the time remaining until the next minute on the clock. Non-positive values cause no sleep.
    """

    def __init__(
        self,
        clock: Clock,
        logger: KronLogger,
        fire: Callable[[arrow.Arrow], None],
        ideal_sleep: IdealSleep | None = None,
    ) -> None:
        self._clock = clock
        self._logger = logger
        self._fire = fire
        self._ideal_sleep = ideal_sleep or self._time_until_next_minute
        self._cancellation_token = CancellationToken()
        self._thread = Thread(target=self._run, name="KronTimer", daemon=True)

    def _time_until_next_minute(self, last_fired: arrow.Arrow) -> float:
        return (_next_minute(last_fired) - self._clock.now()).total_seconds()

    def start(self) -> None:
        self._thread.start()

    def request_stop(self) -> None:
        self._cancellation_token.cancel()

    def join(self, timeout: float | None = None) -> None:
        self._thread.join(timeout)

    def is_alive(self) -> bool:
        return self._thread.is_alive()

    def _tick(self, minute: arrow.Arrow) -> None:
        self._logger.trace("Tick for %s", minute.isoformat())
        self._fire(minute)

    def _run(self) -> None:
        try:
            last_fired = self._clock.now().floor("minute")
            self._tick(last_fired)

            while not self._cancellation_token.is_cancelled:
                delay = self._ideal_sleep(last_fired)
                if delay > 0 and self._cancellation_token.wait(delay):
                    break

                current = self._clock.now().floor("minute")
                while current > last_fired and not self._cancellation_token.is_cancelled:
                    last_fired = _next_minute(last_fired)
                    self._tick(last_fired)

        except Exception:
            self._logger.error("Timer stopped after an unexpected error:\n%s", traceback.format_exc())
            raise

        self._logger.debug("Timer stopped.")
