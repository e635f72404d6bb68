"""
Exceptions raised by kron.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from kron.pattern import PatternValidationFailure

__all__ = [
    "AlreadyStartedError",
    "InvalidConfigError",
    "KronError",
    "NotStartedError",
    "PatternParseError",
    "SchedulerStateError",
]


class KronError(Exception):
    """
    Base class for all errors raised by kron.
    """


class PatternParseError(KronError, ValueError):
    """
    Exception thrown from ``Pattern.parse`` and ``PatternSpec.build`` if a pattern is invalid.

    The structured failure is available as ``failure``, listing every invalid field of the pattern, not only the
    first one found.
    """

    def __init__(self, failure: "PatternValidationFailure") -> None:
        super().__init__(str(failure))
        self.failure = failure

    def __repr__(self) -> str:
        return f"PatternParseError({self.failure!r})"


class SchedulerStateError(KronError, RuntimeError):
    """
    A scheduler was started or stopped when in the wrong state. The scheduler is left as it was.
    """


class AlreadyStartedError(SchedulerStateError):
    """
    Raised by ``start`` if the scheduler is already running.
    """

    def __init__(self) -> None:
        super().__init__("Kron is already started.")


class NotStartedError(SchedulerStateError):
    """
    Raised by ``stop`` if the scheduler is not running.
    """

    def __init__(self) -> None:
        super().__init__("Kron is not started.")


class InvalidConfigError(KronError):
    """
    Exception thrown from the configuration loaders if a config file is invalid. This can be due to

      * Missing fields
      * Incompatible types
      * Unknown fields
      * Invalid patterns
    """

    def __init__(self, message: str, details: list[str] | None = None) -> None:
        super().__init__()
        self.message = message
        self.details = details

    def __str__(self) -> str:
        return f"Invalid config: {self.message}"

    def __repr__(self) -> str:
        return self.__str__()
