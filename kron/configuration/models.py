"""
Module containing configuration models for applications embedding kron.
"""

from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from pathlib import Path
from typing import Annotated, Any, Literal

from humps import kebabize
from prometheus_client import REGISTRY, start_http_server
from pydantic import BaseModel, ConfigDict, Field, GetCoreSchemaHandler
from pydantic_core import CoreSchema, core_schema

from kron.clock import SystemClock
from kron.exceptions import PatternParseError
from kron.pattern import Pattern

__all__ = [
    "ConfigModel",
    "LogConsoleHandlerConfig",
    "LogFileHandlerConfig",
    "LogHandlerConfig",
    "LogLevel",
    "MetricsConfig",
    "PatternConfig",
    "PromServerConfig",
    "SchedulerConfig",
]


class ConfigModel(BaseModel):
    """
    Base model for configuration objects, setting the correct pydantic options for kron config.
    """

    model_config = ConfigDict(
        alias_generator=kebabize,
        populate_by_name=True,
        extra="forbid",
    )


def _pattern_text(value: object) -> object:
    return str(value) if isinstance(value, PatternConfig) else value


class PatternConfig:
    """
    Configuration parameter holding a schedule pattern, such as ``"*/15 8-17 * * MON-FRI"``.

    The pattern is validated when the configuration is loaded.
    """

    def __init__(self, expression: str) -> None:
        try:
            self._pattern = Pattern.parse(expression)
        except PatternParseError as e:
            raise ValueError(str(e.failure)) from e

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type: Any, handler: GetCoreSchemaHandler) -> CoreSchema:  # noqa: ANN401
        return core_schema.no_info_before_validator_function(
            _pattern_text,
            core_schema.no_info_after_validator_function(cls, handler(str)),
            serialization=core_schema.plain_serializer_function_ser_schema(str),
        )

    @property
    def pattern(self) -> Pattern:
        return self._pattern

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PatternConfig):
            return NotImplemented
        return self._pattern == other._pattern

    def __hash__(self) -> int:
        return hash(self._pattern)

    def __str__(self) -> str:
        return self._pattern.as_string()

    def __repr__(self) -> str:
        return self._pattern.as_string()


class LogLevel(Enum):
    """
    Enumeration of log levels.
    """

    CRITICAL = "CRITICAL"
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"
    DEBUG = "DEBUG"
    TRACE = "TRACE"

    @classmethod
    def _missing_(cls, value: object) -> "LogLevel":
        if not isinstance(value, str):
            raise ValueError(f"{value} is not a valid log level")
        for member in cls:
            if member.value == value.upper():
                return member
        raise ValueError(f"{value} is not a valid log level")


class LogFileHandlerConfig(ConfigModel):
    """
    Configuration for a log handler that writes to a file, with daily rotation.
    """

    type: Literal["file"]
    path: Path
    level: LogLevel
    retention: int = 7


class LogConsoleHandlerConfig(ConfigModel):
    """
    Configuration for a log handler that writes to standard output.
    """

    type: Literal["console"]
    level: LogLevel


LogHandlerConfig = Annotated[LogFileHandlerConfig | LogConsoleHandlerConfig, Field(discriminator="type")]


class PromServerConfig(ConfigModel):
    """
    Configuration for serving metrics to a Prometheus server.
    """

    port: int = 9000
    host: str = "0.0.0.0"


class MetricsConfig(ConfigModel):
    """
    Destination for scheduler metrics.
    """

    server: PromServerConfig | None = None

    def start(self) -> None:
        """
        Start serving metrics from the default registry, if a server is configured.
        """
        if self.server:
            start_http_server(self.server.port, self.server.host, registry=REGISTRY)


def _log_handler_default() -> list[LogHandlerConfig]:
    return [LogConsoleHandlerConfig(type="console", level=LogLevel.INFO)]


class SchedulerConfig(ConfigModel):
    """
    Configuration for a scheduler.

    .. code-block:: yaml

        timezone: Europe/Oslo
        max-workers: 8
        log-handlers:
          - type: console
            level: info
        schedules:
          nightly-report: "0 2 * * *"
          poll-inbox: "*/5 * * * MON-FRI"
    """

    timezone: str = "UTC"
    max_workers: int | None = Field(default=None, ge=1)
    log_handlers: list[LogHandlerConfig] = Field(default_factory=_log_handler_default)
    metrics: MetricsConfig | None = None
    schedules: dict[str, PatternConfig] = Field(default_factory=dict)

    def create_clock(self) -> SystemClock:
        return SystemClock(self.timezone)

    def create_executor(self) -> ThreadPoolExecutor:
        return ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="KronWorker")
